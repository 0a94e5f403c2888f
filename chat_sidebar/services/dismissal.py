"""Close the open contextual menu when a pointer lands outside of it."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

from chat_sidebar.core.models import PointerDown
from chat_sidebar.events.bridge import POINTER_DOWN, EventBridge
from chat_sidebar.services.selection import menu_region


class _MenuOwner(Protocol):
    @property
    def menu_id(self) -> str | None: ...

    def close_menu_if(self, entry_id: str) -> bool: ...


class OutsideClickDismissal:
    """Listen for `pointerDown` and dismiss the open menu on outside presses."""

    def __init__(self, owner: _MenuOwner, bridge: EventBridge, *, logger: Any | None = None) -> None:
        self._owner = owner
        self._bridge = bridge
        self._logger = logger
        self._unsubscribe: Callable[[], None] | None = None

    def start(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self._bridge.subscribe(POINTER_DOWN, self.handle_pointer_down)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def handle_pointer_down(self, payload: PointerDown | dict[str, Any]) -> None:
        if not isinstance(payload, PointerDown):
            payload = PointerDown.model_validate(payload)

        menu_id = self._owner.menu_id
        if menu_id is None:
            return

        if menu_region(menu_id) in payload.regions:
            return

        if not self._owner.close_menu_if(menu_id):
            return
        if self._logger is not None:
            self._logger.debug("dismissed menu for %s after outside pointer press", menu_id)
