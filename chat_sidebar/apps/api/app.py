"""FastAPI application factory."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chat_sidebar.adapters.history_store.base import PersistedStore
from chat_sidebar.adapters.history_store.files_store import FilesStore
from chat_sidebar.adapters.history_store.memory_store import MemoryStore
from chat_sidebar.adapters.history_store.tinydb_store import TinyDbStore
from chat_sidebar.apps.api.routes.health import register_health_routes
from chat_sidebar.apps.api.routes.history import register_history_routes
from chat_sidebar.apps.api.routes.sidebar import register_sidebar_routes
from chat_sidebar.events.bridge import EventBridge, bridge as default_bridge
from chat_sidebar.services.dismissal import OutsideClickDismissal
from chat_sidebar.services.history_repository import HistoryRepository
from chat_sidebar.services.sidebar_view import SidebarView
from config import config
from logger import logger


def create_app(bridge: EventBridge | None = None) -> FastAPI:
    """Create and configure the FastAPI application instance."""

    services = build_services(bridge or default_bridge)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        close_services(services)

    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None, title="chat-sidebar", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.services = services
    app.state.logger = logger

    register_history_routes(app)
    register_sidebar_routes(app)
    register_health_routes(app)

    return app


def build_services(bridge: EventBridge) -> dict[str, Any]:
    store = build_store(config.HISTORY_BACKEND)

    history_repo = HistoryRepository(
        store,
        bridge,
        storage_key=config.HISTORY_STORAGE_KEY,
        no_response_text=config.HISTORY_NO_RESPONSE_TEXT,
        logger=logger,
    )
    sidebar_view = SidebarView(
        history_repo,
        bridge,
        open_by_default=config.SIDEBAR_OPEN_BY_DEFAULT,
        logger=logger,
    )
    dismissal = OutsideClickDismissal(history_repo, bridge, logger=logger)

    history_repo.start()
    sidebar_view.start()
    dismissal.start()

    return {
        "bridge": bridge,
        "store": store,
        "history_repo": history_repo,
        "sidebar_view": sidebar_view,
        "dismissal": dismissal,
    }


def build_store(backend: str) -> PersistedStore:
    if backend == "tinydb":
        return TinyDbStore(Path(config.HISTORY_DB_PATH), logger=logger)
    if backend == "files":
        return FilesStore(Path(config.HISTORY_FILES_DIR), logger=logger)
    if backend == "memory":
        return MemoryStore()
    raise ValueError(f"unknown history backend {backend!r}")


def close_services(services: dict[str, Any]) -> None:
    services["dismissal"].close()
    services["sidebar_view"].close()
    services["history_repo"].close()

    close_store = getattr(services["store"], "close", None)
    if close_store is not None:
        close_store()
