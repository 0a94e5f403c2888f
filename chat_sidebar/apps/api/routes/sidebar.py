"""Sidebar toggle and search affordances."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from fastapi import APIRouter, FastAPI, Request

from chat_sidebar.core.models import SearchQuery, SidebarSnapshot

if TYPE_CHECKING:
    from chat_sidebar.services.history_repository import HistoryRepository
    from chat_sidebar.services.sidebar_view import SidebarView

router: APIRouter = APIRouter()


def _sidebar_view(http_request: Request) -> SidebarView:
    return cast("SidebarView", http_request.app.state.services["sidebar_view"])


def toggle_sidebar(http_request: Request) -> SidebarSnapshot:
    sidebar_view = _sidebar_view(http_request)
    sidebar_view.toggle_sidebar()
    return sidebar_view.snapshot()


def toggle_search(http_request: Request) -> SidebarSnapshot:
    sidebar_view = _sidebar_view(http_request)
    sidebar_view.toggle_search()
    return sidebar_view.snapshot()


def set_search(search: SearchQuery, http_request: Request) -> SidebarSnapshot:
    """Update the filter text typed into the search input."""

    sidebar_view = _sidebar_view(http_request)
    sidebar_view.set_search_query(search.query)
    return sidebar_view.snapshot()


def new_chat(http_request: Request) -> SidebarSnapshot:
    """Deselect the current conversation; the history itself is untouched."""

    history_repo = cast("HistoryRepository", http_request.app.state.services["history_repo"])
    history_repo.new_chat()
    return _sidebar_view(http_request).snapshot()


def register_sidebar_routes(app: FastAPI) -> None:
    """Attach sidebar routes to the provided application."""

    router.add_api_route(
        "/sidebar/toggle",
        toggle_sidebar,
        methods=["POST"],
        response_model=SidebarSnapshot,
    )
    router.add_api_route(
        "/sidebar/search/toggle",
        toggle_search,
        methods=["POST"],
        response_model=SidebarSnapshot,
    )
    router.add_api_route(
        "/sidebar/search",
        set_search,
        methods=["PUT"],
        response_model=SidebarSnapshot,
    )
    router.add_api_route(
        "/sidebar/new-chat",
        new_chat,
        methods=["POST"],
        response_model=SidebarSnapshot,
    )
    app.include_router(router)
