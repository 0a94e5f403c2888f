"""TinyDB-backed persisted store implementation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from tinydb import Query, TinyDB

from chat_sidebar.adapters.history_store.base import PersistedStore


class TinyDbStore(PersistedStore):
    """Persist serialized values as `{key, value}` documents in a TinyDB file."""

    def __init__(
        self,
        db_path: Path,
        *,
        table_name: str = "storage",
        logger: Any | None = None,
    ) -> None:
        self._db_path = db_path
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._db = TinyDB(self._db_path)
        self._table = self._db.table(table_name)
        self._logger = logger
        self._query = Query()

    def get_item(self, key: str) -> str | None:
        record = self._table.get(self._query.key == key)
        if record is None:
            return None

        value = record.get("value") if isinstance(record, dict) else None
        if isinstance(value, str):
            return value

        if self._logger is not None:
            self._logger.warning("stored value for %s is malformed; ignoring", key)
        return None

    def set_item(self, key: str, value: str) -> None:
        self._table.upsert({"key": key, "value": value}, self._query.key == key)

    def remove_item(self, key: str) -> None:
        self._table.remove(self._query.key == key)

    def close(self) -> None:
        """Close the underlying TinyDB instance."""

        self._db.close()
