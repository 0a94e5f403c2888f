"""Import a browser localStorage chat history export into a persisted store."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

from chat_sidebar.adapters.history_store.base import PersistedStore
from chat_sidebar.adapters.history_store.files_store import FilesStore
from chat_sidebar.adapters.history_store.tinydb_store import TinyDbStore
from chat_sidebar.services.history_repository import (
    DEFAULT_STORAGE_KEY,
    parse_entries,
    serialize_entries,
)

DEFAULT_DEST = Path("./data/history.json")
DEFAULT_BACKEND = "tinydb"


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "source",
        type=Path,
        help="JSON file holding the exported chatHistory array or a localStorage dump",
    )
    parser.add_argument(
        "--backend",
        choices=["tinydb", "files"],
        default=DEFAULT_BACKEND,
        help="Store backend to write into",
    )
    parser.add_argument(
        "--dest",
        type=Path,
        default=DEFAULT_DEST,
        help="TinyDB file path, or directory for the files backend",
    )
    parser.add_argument(
        "--key",
        default=DEFAULT_STORAGE_KEY,
        help="Storage key holding the history",
    )
    parser.add_argument(
        "--merge",
        action="store_true",
        help="Append imported entries after the existing history instead of replacing it",
    )
    args = parser.parse_args(argv)

    if not args.source.exists():
        raise SystemExit(f"source file {args.source} does not exist")

    source_text = args.source.read_text(encoding="utf-8")
    store = _open_store(args.backend, args.dest)
    try:
        imported, skipped = import_history(store, source_text, key=args.key, merge=args.merge)
    except ValueError as exc:
        raise SystemExit(f"cannot import {args.source}: {exc}") from None
    finally:
        close_store = getattr(store, "close", None)
        if close_store is not None:
            close_store()

    print(f"Imported {imported} entries into {args.dest} (key {args.key}).")
    if skipped:
        print(f"Skipped {skipped} invalid entries.")


def import_history(
    store: PersistedStore,
    source_text: str,
    *,
    key: str = DEFAULT_STORAGE_KEY,
    merge: bool = False,
) -> tuple[int, int]:
    """Validate the exported history and write it to store; returns (imported, skipped).

    Raises ValueError when the source holds no history array, leaving the store untouched.
    """

    raw_history = _extract_history(source_text, key)
    entries = parse_entries(json.dumps(raw_history))
    imported = len(entries)
    skipped = len(raw_history) - imported

    if merge:
        existing = parse_entries(store.get_item(key))
        # re-parsing replaces ids that collide with existing entries
        entries = parse_entries(serialize_entries(existing + entries))

    store.set_item(key, serialize_entries(entries))
    return imported, skipped


def _extract_history(source_text: str, key: str) -> list[Any]:
    try:
        data: Any = json.loads(source_text)
    except json.JSONDecodeError as exc:
        raise ValueError("source is not valid JSON") from exc

    # A full localStorage dump maps keys to their (string) values.
    if isinstance(data, dict):
        data = data.get(key)
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except json.JSONDecodeError as exc:
                raise ValueError(f"{key} value is not valid JSON") from exc

    if not isinstance(data, list):
        raise ValueError(f"no {key} array found in source")
    return data


def _open_store(backend: str, dest: Path) -> PersistedStore:
    if backend == "files":
        return FilesStore(dest)
    return TinyDbStore(dest)


if __name__ == "__main__":
    main()
