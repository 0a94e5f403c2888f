"""Sidebar visibility, search mode, and rendered rows."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from chat_sidebar.core.models import ChatEntry, EntryRow, SidebarSnapshot
from chat_sidebar.events.bridge import HISTORY_RESET, EventBridge
from chat_sidebar.services.history_repository import HistoryRepository

UNKNOWN_TIME = "Unknown time"


def format_timestamp(timestamp: str | None) -> str:
    """Render an ISO-8601 timestamp in local time, e.g. `5/1/2024, 2:30:00 PM`."""

    if not timestamp:
        return UNKNOWN_TIME

    normalized = timestamp[:-1] + "+00:00" if timestamp.endswith("Z") else timestamp
    try:
        local = datetime.fromisoformat(normalized).astimezone()
    except (ValueError, OverflowError):
        return UNKNOWN_TIME

    clock = local.strftime("%I:%M:%S %p").lstrip("0")
    return f"{local.month}/{local.day}/{local.year}, {clock}"


class SidebarView:
    """UI-local state behind the toggle and search affordances of the sidebar."""

    def __init__(
        self,
        repository: HistoryRepository,
        bridge: EventBridge,
        *,
        open_by_default: bool = True,
        logger: Any | None = None,
    ) -> None:
        self._repository = repository
        self._bridge = bridge
        self._logger = logger
        self._open_by_default = open_by_default
        self.is_open = open_by_default
        self.is_searching = False
        self.search_query = ""
        self._unsubscribe: Callable[[], None] | None = None

    def start(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self._bridge.subscribe(HISTORY_RESET, self.handle_reset)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def toggle_sidebar(self) -> None:
        self.is_open = not self.is_open
        if self.is_searching:
            self.is_searching = False
            self.search_query = ""

    def toggle_search(self) -> None:
        self.is_searching = not self.is_searching

    def set_search_query(self, query: str) -> None:
        self.search_query = query

    def handle_reset(self, _payload: Any) -> None:
        self.is_open = self._open_by_default
        self.is_searching = False
        self.search_query = ""
        if self._logger is not None:
            self._logger.info("chat history emptied; sidebar reset to initial state")

    def visible_entries(self) -> list[ChatEntry]:
        if self.is_searching:
            return self._repository.search(self.search_query)
        return self._repository.entries

    def snapshot(self) -> SidebarSnapshot:
        selected_id = self._repository.selected_id
        menu_id = self._repository.menu_id

        rows: list[EntryRow] = []
        if self.is_open:
            rows = [
                EntryRow(
                    id=entry.id,
                    query=entry.query,
                    display_time=format_timestamp(entry.timestamp),
                    selected=entry.id == selected_id,
                    menu_open=entry.id == menu_id,
                )
                for entry in self.visible_entries()
            ]

        return SidebarSnapshot(
            is_open=self.is_open,
            is_searching=self.is_searching,
            search_query=self.search_query,
            rows=rows,
            selected_id=selected_id,
            menu_id=menu_id,
        )
