"""Pydantic models shared across the sidebar services and API."""

from __future__ import annotations

from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field


def new_entry_id() -> str:
    return uuid4().hex


class ChatEntry(BaseModel):
    """One persisted conversation turn."""

    query: str
    response: str | None = None
    timestamp: str | None = None
    id: str = Field(default_factory=new_entry_id)

    @classmethod
    def from_stored(cls, raw: Any) -> ChatEntry | None:
        """Build an entry from a stored element, or None if it has no usable query."""

        if not isinstance(raw, dict):
            return None

        query = raw.get("query")
        if not isinstance(query, str) or not query:
            return None

        response = raw.get("response")
        timestamp = raw.get("timestamp")
        entry_id = raw.get("id")

        fields: dict[str, Any] = {
            "query": query,
            "response": response if isinstance(response, str) else None,
            "timestamp": timestamp if isinstance(timestamp, str) else None,
        }
        if isinstance(entry_id, str) and entry_id:
            fields["id"] = entry_id
        return cls(**fields)

    def to_stored(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class NewChatMessage(BaseModel):
    """Inbound `newChatMessage` payload produced by the conversation view."""

    message: str | None = None
    response: str | None = None


class LoadChat(BaseModel):
    """Outbound `loadChat` payload asking the conversation view to show an entry."""

    message: str
    response: str


class HistoryReset(BaseModel):
    """Outbound signal that the sidebar returned to its initial state."""

    reason: str = "empty"


class PointerDown(BaseModel):
    """Pointer-down event; regions run from innermost to outermost."""

    regions: list[str] = Field(default_factory=list)


class DeleteResult(BaseModel):
    """Outcome of deleting a history entry."""

    removed: ChatEntry
    reset: bool = False
    load_chat: LoadChat | None = None
    selected_index: int | None = None


class EntryRow(BaseModel):
    """A single rendered row of the sidebar list."""

    id: str
    query: str
    display_time: str
    selected: bool = False
    menu_open: bool = False


class SidebarSnapshot(BaseModel):
    """Current state of the sidebar as seen by the browser."""

    is_open: bool
    is_searching: bool
    search_query: str
    rows: list[EntryRow] = Field(default_factory=list)
    selected_id: str | None = None
    menu_id: str | None = None


class SearchQuery(BaseModel):
    query: str = ""


class PublishResponse(BaseModel):
    """Standard response for endpoints that publish onto the event bridge."""

    delivered: int = 0


class MenuResponse(BaseModel):
    menu_id: str | None = None
