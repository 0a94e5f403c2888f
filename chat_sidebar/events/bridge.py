"""Process-wide publish/subscribe channel between the sidebar and the conversation view."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

NEW_CHAT_MESSAGE = "newChatMessage"
LOAD_CHAT = "loadChat"
HISTORY_RESET = "historyReset"
POINTER_DOWN = "pointerDown"

Handler = Callable[[Any], None]


class EventBridge:
    """Named-topic observer registry with synchronous, fire-and-forget delivery."""

    def __init__(self, *, logger: Any | None = None) -> None:
        self._handlers: dict[str, list[Handler]] = {}
        self._lock = threading.Lock()
        self._logger = logger or logging.getLogger("ChatSidebar.events")

    def subscribe(self, topic: str, handler: Handler) -> Callable[[], None]:
        """Register handler for topic and return a callable that removes it."""

        with self._lock:
            self._handlers.setdefault(topic, []).append(handler)

        def unsubscribe() -> None:
            self.unsubscribe(topic, handler)

        return unsubscribe

    def unsubscribe(self, topic: str, handler: Handler) -> bool:
        with self._lock:
            handlers = self._handlers.get(topic, [])
            if handler not in handlers:
                return False
            handlers.remove(handler)
            if not handlers:
                del self._handlers[topic]
            return True

    def publish(self, topic: str, payload: Any) -> int:
        """Deliver payload to every subscriber of topic; returns how many were called.

        A failing handler is logged and does not prevent delivery to the others.
        """

        with self._lock:
            handlers = list(self._handlers.get(topic, []))

        for handler in handlers:
            try:
                handler(payload)
            except Exception:
                self._logger.error("%s handler %r failed", topic, handler, exc_info=True)

        return len(handlers)

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return len(self._handlers.get(topic, []))


bridge = EventBridge()
