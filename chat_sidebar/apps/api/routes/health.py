"""Basic health and readiness endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, FastAPI, Request

router: APIRouter = APIRouter()


def health() -> dict[str, str]:
    """Return liveness status."""

    return {"status": "ok"}


def ready(http_request: Request) -> dict[str, Any]:
    """Report readiness and the entry count once the history repository is wired."""

    services = getattr(http_request.app.state, "services", {})
    history_repo = services.get("history_repo")
    if history_repo is None:
        return {"status": "starting"}

    return {"status": "ready", "entries": len(history_repo)}


def register_health_routes(app: FastAPI) -> None:
    """Attach health routes to the provided application."""

    router.add_api_route("/healthz", health, methods=["GET"])
    router.add_api_route("/ready", ready, methods=["GET"])
    app.include_router(router)
