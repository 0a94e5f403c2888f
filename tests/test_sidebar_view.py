from __future__ import annotations

import json

import pytest

from chat_sidebar.adapters.history_store.memory_store import MemoryStore
from chat_sidebar.events.bridge import HISTORY_RESET, EventBridge
from chat_sidebar.services.history_repository import DEFAULT_STORAGE_KEY, HistoryRepository
from chat_sidebar.services.sidebar_view import UNKNOWN_TIME, SidebarView, format_timestamp


@pytest.fixture
def view() -> SidebarView:
    blob = json.dumps(
        [
            {"query": "bread recipe", "response": "flour", "timestamp": "2024-05-01T12:30:00.000Z"},
            {"query": "python help", "response": "decorators"},
            {"query": "more bread", "response": "yeast", "timestamp": "garbage"},
        ]
    )
    bridge = EventBridge()
    repo = HistoryRepository(MemoryStore({DEFAULT_STORAGE_KEY: blob}), bridge)
    repo.start()
    sidebar = SidebarView(repo, bridge)
    sidebar.start()
    return sidebar


def test_snapshot_lists_every_entry_when_not_searching(view: SidebarView) -> None:
    snapshot = view.snapshot()

    assert snapshot.is_open is True  # noqa: S101
    assert [row.query for row in snapshot.rows] == [  # noqa: S101
        "bread recipe",
        "python help",
        "more bread",
    ]
    assert snapshot.rows[1].display_time == UNKNOWN_TIME  # noqa: S101
    assert snapshot.rows[2].display_time == UNKNOWN_TIME  # noqa: S101
    assert "2024" in snapshot.rows[0].display_time  # noqa: S101


def test_search_only_applies_while_searching(view: SidebarView) -> None:
    view.set_search_query("bread")
    assert len(view.visible_entries()) == 3  # noqa: S101

    view.toggle_search()

    assert [entry.query for entry in view.visible_entries()] == ["bread recipe", "more bread"]  # noqa: S101


def test_toggling_sidebar_leaves_search_mode(view: SidebarView) -> None:
    view.toggle_search()
    view.set_search_query("bread")

    view.toggle_sidebar()

    snapshot = view.snapshot()
    assert snapshot.is_open is False  # noqa: S101
    assert snapshot.is_searching is False  # noqa: S101
    assert snapshot.search_query == ""  # noqa: S101
    assert snapshot.rows == []  # noqa: S101


def test_rows_reflect_selection_and_menu(view: SidebarView) -> None:
    repo = view._repository
    repo.select(0)
    repo.open_menu(2)

    rows = view.snapshot().rows

    assert [row.selected for row in rows] == [True, False, False]  # noqa: S101
    assert [row.menu_open for row in rows] == [False, False, True]  # noqa: S101


def test_reset_clears_search_and_renders_empty_list() -> None:
    bridge = EventBridge()
    repo = HistoryRepository(
        MemoryStore({DEFAULT_STORAGE_KEY: json.dumps([{"query": "only"}])}),
        bridge,
    )
    repo.start()
    sidebar = SidebarView(repo, bridge, open_by_default=True)
    sidebar.start()
    sidebar.toggle_search()
    sidebar.set_search_query("only")

    repo.delete(0)

    snapshot = sidebar.snapshot()
    assert snapshot.is_searching is False  # noqa: S101
    assert snapshot.search_query == ""  # noqa: S101
    assert snapshot.rows == []  # noqa: S101
    assert snapshot.selected_id is None  # noqa: S101

    sidebar.close()
    assert bridge.subscriber_count(HISTORY_RESET) == 0  # noqa: S101


def test_reset_restores_startup_visibility() -> None:
    bridge = EventBridge()
    repo = HistoryRepository(
        MemoryStore({DEFAULT_STORAGE_KEY: json.dumps([{"query": "only"}])}),
        bridge,
    )
    repo.start()
    sidebar = SidebarView(repo, bridge, open_by_default=False)
    sidebar.start()
    sidebar.toggle_sidebar()
    assert sidebar.is_open is True  # noqa: S101

    repo.delete(0)

    assert sidebar.is_open is False  # noqa: S101
    assert sidebar.snapshot().rows == []  # noqa: S101


def test_closed_by_default_hides_rows() -> None:
    bridge = EventBridge()
    repo = HistoryRepository(MemoryStore({DEFAULT_STORAGE_KEY: json.dumps([{"query": "a"}])}), bridge)
    repo.start()

    sidebar = SidebarView(repo, bridge, open_by_default=False)

    assert sidebar.snapshot().rows == []  # noqa: S101


@pytest.mark.parametrize(
    "value",
    [None, "", "not a date", "0001-01-01T00:00:00.000+12:00", "9999-12-31T23:59:59-12:00"],
)
def test_format_timestamp_unknown(value: str | None) -> None:
    assert format_timestamp(value) == UNKNOWN_TIME  # noqa: S101


def test_format_timestamp_renders_date_and_clock() -> None:
    rendered = format_timestamp("2024-05-01T12:30:00.000Z")

    assert "/2024, " in rendered  # noqa: S101
    assert rendered.endswith(("AM", "PM"))  # noqa: S101
