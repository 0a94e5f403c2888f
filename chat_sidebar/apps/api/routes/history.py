"""History endpoints used by the sidebar and the conversation view."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from fastapi import APIRouter, FastAPI, HTTPException, Request

from chat_sidebar.core.models import (
    ChatEntry,
    DeleteResult,
    LoadChat,
    MenuResponse,
    NewChatMessage,
    PointerDown,
    PublishResponse,
    SidebarSnapshot,
)
from chat_sidebar.events.bridge import NEW_CHAT_MESSAGE, POINTER_DOWN
from chat_sidebar.services.history_repository import EntryNotFoundError

if TYPE_CHECKING:
    from chat_sidebar.events.bridge import EventBridge
    from chat_sidebar.services.history_repository import HistoryRepository
    from chat_sidebar.services.sidebar_view import SidebarView

router: APIRouter = APIRouter()


def _history_repo(http_request: Request) -> HistoryRepository:
    return cast("HistoryRepository", http_request.app.state.services["history_repo"])


def _bridge(http_request: Request) -> EventBridge:
    return cast("EventBridge", http_request.app.state.services["bridge"])


def get_history(http_request: Request) -> SidebarSnapshot:
    """Return the sidebar as it should currently be rendered."""

    sidebar_view = cast("SidebarView", http_request.app.state.services["sidebar_view"])
    return sidebar_view.snapshot()


def search_history(http_request: Request, q: str = "") -> list[ChatEntry]:
    return _history_repo(http_request).search(q)


def get_active_chat(http_request: Request) -> LoadChat | None:
    return _history_repo(http_request).active_chat()


def post_message(message: NewChatMessage, http_request: Request) -> PublishResponse:
    """Forward a finished conversation turn to the history as `newChatMessage`."""

    delivered = _bridge(http_request).publish(NEW_CHAT_MESSAGE, message)
    return PublishResponse(delivered=delivered)


def select_entry(entry_id: str, http_request: Request) -> LoadChat:
    try:
        return _history_repo(http_request).select_entry(entry_id)
    except EntryNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from None


def delete_entry(entry_id: str, http_request: Request) -> DeleteResult:
    try:
        return _history_repo(http_request).delete_entry(entry_id)
    except EntryNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from None


def open_menu(entry_id: str, http_request: Request) -> MenuResponse:
    history_repo = _history_repo(http_request)
    try:
        history_repo.open_entry_menu(entry_id)
    except EntryNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from None
    return MenuResponse(menu_id=history_repo.menu_id)


def toggle_menu(entry_id: str, http_request: Request) -> MenuResponse:
    history_repo = _history_repo(http_request)
    try:
        history_repo.toggle_entry_menu(entry_id)
    except EntryNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from None
    return MenuResponse(menu_id=history_repo.menu_id)


def pointer_down(event: PointerDown, http_request: Request) -> MenuResponse:
    _bridge(http_request).publish(POINTER_DOWN, event)
    return MenuResponse(menu_id=_history_repo(http_request).menu_id)


def register_history_routes(app: FastAPI) -> None:
    """Attach history routes to the provided application."""

    router.add_api_route("/history", get_history, methods=["GET"], response_model=SidebarSnapshot)
    router.add_api_route(
        "/history/search",
        search_history,
        methods=["GET"],
        response_model=list[ChatEntry],
    )
    router.add_api_route(
        "/history/active",
        get_active_chat,
        methods=["GET"],
        response_model=LoadChat | None,
    )
    router.add_api_route(
        "/history/messages",
        post_message,
        methods=["POST"],
        response_model=PublishResponse,
        status_code=202,
    )
    router.add_api_route(
        "/history/entries/{entry_id}/select",
        select_entry,
        methods=["POST"],
        response_model=LoadChat,
    )
    router.add_api_route(
        "/history/entries/{entry_id}",
        delete_entry,
        methods=["DELETE"],
        response_model=DeleteResult,
    )
    router.add_api_route(
        "/history/entries/{entry_id}/menu",
        open_menu,
        methods=["POST"],
        response_model=MenuResponse,
    )
    router.add_api_route(
        "/history/entries/{entry_id}/menu/toggle",
        toggle_menu,
        methods=["POST"],
        response_model=MenuResponse,
    )
    router.add_api_route(
        "/history/pointer-down",
        pointer_down,
        methods=["POST"],
        response_model=MenuResponse,
    )
    app.include_router(router)
