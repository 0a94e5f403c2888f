"""Protocol definition for the persisted key-value store."""

from __future__ import annotations

from typing import Protocol


class PersistedStore(Protocol):
    """Durable string storage keyed by name, read and written synchronously."""

    def get_item(self, key: str) -> str | None:
        """Return the stored value for key, or None when nothing is stored."""

    def set_item(self, key: str, value: str) -> None:
        """Persist value under key, replacing any previous value."""

    def remove_item(self, key: str) -> None:
        """Forget the value stored under key."""
