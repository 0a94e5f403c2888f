"""Filesystem-backed persisted store."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from chat_sidebar.adapters.history_store.base import PersistedStore

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_-]")


class FilesStore(PersistedStore):
    """Persist each key as its own file inside a directory."""

    def __init__(self, base_dir: Path, *, logger: Any | None = None) -> None:
        self._base_dir = base_dir
        self._base_dir.mkdir(parents=True, exist_ok=True)
        self._logger = logger

    def get_item(self, key: str) -> str | None:
        path = self._path_for(key)
        if not path.exists():
            return None

        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            if self._logger is not None:
                self._logger.warning("stored value for %s is unreadable; ignoring", key)
            return None

    def set_item(self, key: str, value: str) -> None:
        path = self._path_for(key)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(value, encoding="utf-8")
        tmp_path.replace(path)

    def remove_item(self, key: str) -> None:
        self._path_for(key).unlink(missing_ok=True)

    def _path_for(self, key: str) -> Path:
        safe_key = _UNSAFE_KEY_CHARS.sub("_", key)
        return self._base_dir / f"{safe_key}.json"
