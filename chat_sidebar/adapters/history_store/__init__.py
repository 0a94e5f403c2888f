"""Persisted store backends."""

from chat_sidebar.adapters.history_store.files_store import FilesStore
from chat_sidebar.adapters.history_store.memory_store import MemoryStore
from chat_sidebar.adapters.history_store.tinydb_store import TinyDbStore

__all__ = ["FilesStore", "MemoryStore", "TinyDbStore"]
