"""Chat history repository.

Owns the canonical, ordered list of chat entries for the sidebar and mediates
every read and write of the persisted store. The store always holds the exact
serialization of the in-memory list: each mutation writes the new list first
and only then replaces the in-memory copy, so a failed write leaves both
untouched.

Selection and menu state are tracked by entry id. Positional accessors
(`selected_index`, `menu_index`, `delete(index)`, ...) are derived from the
current list, so deleting an entry never leaves the selection pointing at a
different logical entry.
"""

from __future__ import annotations

import json
import threading
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from typing import Any

from chat_sidebar.adapters.history_store.base import PersistedStore
from chat_sidebar.core.models import (
    ChatEntry,
    DeleteResult,
    HistoryReset,
    LoadChat,
    NewChatMessage,
    new_entry_id,
)
from chat_sidebar.events.bridge import HISTORY_RESET, LOAD_CHAT, NEW_CHAT_MESSAGE, EventBridge
from chat_sidebar.services.search_filter import filter_entries
from chat_sidebar.services.selection import SelectionState

DEFAULT_STORAGE_KEY = "chatHistory"
DEFAULT_NO_RESPONSE_TEXT = "No response received"


class EntryNotFoundError(LookupError):
    """Raised when an index or id does not refer to an entry in the history."""


def utc_now_iso() -> str:
    """Current instant as ISO-8601 UTC with millisecond precision."""

    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_entries(raw: str | None, *, logger: Any | None = None) -> list[ChatEntry]:
    """Decode a stored history blob into entries.

    A missing blob is an empty history. A blob that is not a JSON array is
    logged and treated as empty. Elements without a non-empty string `query`
    are dropped; duplicate ids are replaced with fresh ones.
    """

    if raw is None:
        return []

    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        if logger is not None:
            logger.warning("chat history is corrupted. starting fresh.", exc_info=True)
        return []

    if not isinstance(data, list):
        if logger is not None:
            logger.warning("chat history is not a list (%s). starting fresh.", type(data).__name__)
        return []

    entries: list[ChatEntry] = []
    seen_ids: set[str] = set()
    for item in data:
        entry = ChatEntry.from_stored(item)
        if entry is None:
            continue
        if entry.id in seen_ids:
            entry = entry.model_copy(update={"id": new_entry_id()})
        seen_ids.add(entry.id)
        entries.append(entry)

    dropped = len(data) - len(entries)
    if dropped and logger is not None:
        logger.debug("dropped %d invalid chat history entries", dropped)

    return entries


def serialize_entries(entries: Iterable[ChatEntry]) -> str:
    return json.dumps([entry.to_stored() for entry in entries])


class HistoryRepository:
    """Keep the sidebar history, its persisted copy, and its selection in sync."""

    def __init__(
        self,
        store: PersistedStore,
        bridge: EventBridge,
        *,
        storage_key: str = DEFAULT_STORAGE_KEY,
        no_response_text: str = DEFAULT_NO_RESPONSE_TEXT,
        logger: Any | None = None,
    ) -> None:
        self._store = store
        self._bridge = bridge
        self._storage_key = storage_key
        self._no_response_text = no_response_text
        self._logger = logger
        self._entries: list[ChatEntry] = []
        self._selection = SelectionState()
        self._lock = threading.RLock()
        self._unsubscribe: Callable[[], None] | None = None
        self._loaded = False

    def start(self) -> None:
        """Hydrate from the store once and start listening for new chat messages.

        A stored blob that loading had to normalize is written back at once.
        """

        with self._lock:
            if not self._loaded:
                raw = self._store.get_item(self._storage_key)
                entries = parse_entries(raw, logger=self._logger)
                if raw is not None and serialize_entries(entries) != raw:
                    # the store holds the serialization of the loaded list
                    self._commit(entries)
                else:
                    self._entries = entries
                self._loaded = True
                if self._logger is not None:
                    self._logger.info("loaded %d chat history entries", len(self._entries))

            if self._unsubscribe is None:
                self._unsubscribe = self._bridge.subscribe(
                    NEW_CHAT_MESSAGE,
                    self.handle_new_chat_message,
                )

    def close(self) -> None:
        """Stop listening on the bridge. The history itself stays readable."""

        with self._lock:
            if self._unsubscribe is not None:
                self._unsubscribe()
                self._unsubscribe = None

    def __enter__(self) -> HistoryRepository:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def entries(self) -> list[ChatEntry]:
        with self._lock:
            return list(self._entries)

    @property
    def no_response_text(self) -> str:
        return self._no_response_text

    @property
    def selected_id(self) -> str | None:
        return self._selection.selected_id

    @property
    def menu_id(self) -> str | None:
        return self._selection.menu_id

    @property
    def selected_index(self) -> int | None:
        with self._lock:
            return self._position(self._selection.selected_id)

    @property
    def menu_index(self) -> int | None:
        with self._lock:
            return self._position(self._selection.menu_id)

    def serialized(self) -> str:
        """Serialization of the in-memory list, identical to the stored blob."""

        with self._lock:
            return serialize_entries(self._entries)

    def index_of(self, entry_id: str) -> int:
        with self._lock:
            position = self._position(entry_id)
            if position is None:
                raise EntryNotFoundError(f"no chat history entry with id {entry_id!r}")
            return position

    def entry_at(self, index: int) -> ChatEntry:
        with self._lock:
            if not 0 <= index < len(self._entries):
                raise EntryNotFoundError(f"no chat history entry at index {index}")
            return self._entries[index]

    def search(self, query: str) -> list[ChatEntry]:
        with self._lock:
            return filter_entries(self._entries, query)

    def append(self, query: str, response: str | None = None) -> ChatEntry:
        """Add a new entry at the end and persist the whole list."""

        if not query:
            raise ValueError("query must be a non-empty string")

        entry = ChatEntry(
            query=query,
            response=response or self._no_response_text,
            timestamp=utc_now_iso(),
        )

        with self._lock:
            self._commit([*self._entries, entry])

        if self._logger is not None:
            self._logger.info("recorded chat history entry %s", entry.id)
        return entry

    def handle_new_chat_message(self, payload: NewChatMessage | dict[str, Any]) -> None:
        """Bridge handler for `newChatMessage`; payloads without a message are ignored."""

        if not isinstance(payload, NewChatMessage):
            payload = NewChatMessage.model_validate(payload)

        if not payload.message:
            if self._logger is not None:
                self._logger.debug("ignoring newChatMessage without a message")
            return

        self.append(payload.message, payload.response)

    def select(self, index: int) -> LoadChat:
        """Mark the entry at index as selected and ask the conversation view to load it."""

        with self._lock:
            return self._activate(self.entry_at(index))

    def select_entry(self, entry_id: str) -> LoadChat:
        with self._lock:
            return self._activate(self.entry_at(self.index_of(entry_id)))

    def active_chat(self) -> LoadChat | None:
        with self._lock:
            position = self._position(self._selection.selected_id)
            if position is None:
                return None
            return self._load_chat_payload(self._entries[position])

    def delete(self, index: int) -> DeleteResult:
        """Remove the entry at index and reconcile selection with the shorter list.

        Emptying the history publishes `historyReset` instead of `loadChat`.
        Deleting the selected entry selects its successor (or the new last
        entry) and publishes `loadChat` for it.
        """

        with self._lock:
            removed = self.entry_at(index)
            remaining = self._entries[:index] + self._entries[index + 1 :]
            self._commit(remaining)
            self._selection.close_menu()

            if self._logger is not None:
                self._logger.info("deleted chat history entry %s", removed.id)

            if not remaining:
                self._selection.reset()
                self._bridge.publish(HISTORY_RESET, HistoryReset())
                return DeleteResult(removed=removed, reset=True)

            load_chat: LoadChat | None = None
            if self._selection.selected_id == removed.id:
                next_index = min(index, len(remaining) - 1)
                load_chat = self._activate(remaining[next_index])

            return DeleteResult(
                removed=removed,
                load_chat=load_chat,
                selected_index=self._position(self._selection.selected_id),
            )

    def delete_entry(self, entry_id: str) -> DeleteResult:
        with self._lock:
            return self.delete(self.index_of(entry_id))

    def open_menu(self, index: int) -> None:
        """Open the contextual menu of the entry at index, closing any other."""

        with self._lock:
            self._selection.open_menu(self.entry_at(index).id)

    def toggle_menu(self, index: int) -> None:
        with self._lock:
            self._selection.toggle_menu(self.entry_at(index).id)

    def open_entry_menu(self, entry_id: str) -> None:
        with self._lock:
            self.open_menu(self.index_of(entry_id))

    def toggle_entry_menu(self, entry_id: str) -> None:
        with self._lock:
            self.toggle_menu(self.index_of(entry_id))

    def close_menu(self) -> None:
        with self._lock:
            self._selection.close_menu()

    def close_menu_if(self, entry_id: str) -> bool:
        """Close the menu only while it still belongs to entry_id."""

        with self._lock:
            if self._selection.menu_id != entry_id:
                return False
            self._selection.close_menu()
            return True

    def new_chat(self) -> None:
        """Leave the selected conversation so the next message starts a fresh one."""

        with self._lock:
            self._selection.clear_selection()
            self._selection.close_menu()
        if self._logger is not None:
            self._logger.info("started a new chat")

    def _activate(self, entry: ChatEntry) -> LoadChat:
        self._selection.select(entry.id)
        payload = self._load_chat_payload(entry)
        self._bridge.publish(LOAD_CHAT, payload)
        return payload

    def _load_chat_payload(self, entry: ChatEntry) -> LoadChat:
        return LoadChat(message=entry.query, response=entry.response or self._no_response_text)

    def _commit(self, entries: list[ChatEntry]) -> None:
        self._store.set_item(self._storage_key, serialize_entries(entries))
        self._entries = entries

    def _position(self, entry_id: str | None) -> int | None:
        if entry_id is None:
            return None
        for position, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return position
        return None
