from __future__ import annotations

import json

from chat_sidebar.adapters.history_store.memory_store import MemoryStore
from chat_sidebar.core.models import PointerDown
from chat_sidebar.events.bridge import POINTER_DOWN, EventBridge
from chat_sidebar.services.dismissal import OutsideClickDismissal
from chat_sidebar.services.history_repository import DEFAULT_STORAGE_KEY, HistoryRepository
from chat_sidebar.services.selection import SelectionState, menu_region


def build(*queries: str) -> tuple[HistoryRepository, EventBridge, OutsideClickDismissal]:
    blob = json.dumps([{"query": query} for query in queries])
    bridge = EventBridge()
    repo = HistoryRepository(MemoryStore({DEFAULT_STORAGE_KEY: blob}), bridge)
    repo.start()
    dismissal = OutsideClickDismissal(repo, bridge)
    dismissal.start()
    return repo, bridge, dismissal


def test_pointer_down_outside_closes_menu() -> None:
    repo, bridge, _ = build("A", "B")
    repo.open_menu(1)

    bridge.publish(POINTER_DOWN, PointerDown(regions=["row:other", "sidebar"]))

    assert repo.menu_index is None  # noqa: S101


def test_pointer_down_inside_menu_keeps_it_open() -> None:
    repo, bridge, _ = build("A", "B")
    repo.open_menu(1)
    region = menu_region(repo.entries[1].id)

    bridge.publish(POINTER_DOWN, {"regions": ["menu-item:delete", region, "sidebar"]})

    assert repo.menu_index == 1  # noqa: S101


def test_pointer_down_without_open_menu_does_nothing() -> None:
    repo, bridge, _ = build("A")
    repo.select(0)

    bridge.publish(POINTER_DOWN, PointerDown())

    assert repo.menu_index is None  # noqa: S101
    assert repo.selected_index == 0  # noqa: S101


def test_pointer_down_does_not_touch_selection() -> None:
    repo, bridge, _ = build("A", "B")
    repo.select(0)
    repo.open_menu(0)

    bridge.publish(POINTER_DOWN, PointerDown())

    assert repo.selected_index == 0  # noqa: S101
    assert repo.menu_index is None  # noqa: S101


def test_close_stops_listening() -> None:
    repo, bridge, dismissal = build("A")
    repo.open_menu(0)

    dismissal.close()
    bridge.publish(POINTER_DOWN, PointerDown())

    assert repo.menu_index == 0  # noqa: S101
    assert bridge.subscriber_count(POINTER_DOWN) == 0  # noqa: S101


def test_selection_state_transitions() -> None:
    state = SelectionState()

    state.select("a")
    state.open_menu("b")
    state.open_menu("c")
    assert (state.selected_id, state.menu_id) == ("a", "c")  # noqa: S101

    state.toggle_menu("c")
    assert state.menu_id is None  # noqa: S101

    state.toggle_menu("a")
    state.reset()
    assert (state.selected_id, state.menu_id) == (None, None)  # noqa: S101


class ReopeningOwner:
    """Reports one open menu while another request has already opened a different one."""

    def __init__(self) -> None:
        self.current: str | None = "newer"
        self.closed: list[str] = []

    @property
    def menu_id(self) -> str | None:
        return "older"

    def close_menu_if(self, entry_id: str) -> bool:
        if self.current != entry_id:
            return False
        self.closed.append(entry_id)
        self.current = None
        return True


def test_pointer_down_leaves_a_menu_opened_in_between() -> None:
    owner = ReopeningOwner()
    dismissal = OutsideClickDismissal(owner, EventBridge())

    dismissal.handle_pointer_down(PointerDown(regions=["sidebar"]))

    assert owner.current == "newer"  # noqa: S101
    assert owner.closed == []  # noqa: S101
