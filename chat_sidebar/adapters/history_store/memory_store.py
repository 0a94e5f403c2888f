"""Process-local persisted store, used for ephemeral sessions and tests."""

from __future__ import annotations

from chat_sidebar.adapters.history_store.base import PersistedStore


class MemoryStore(PersistedStore):
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)
