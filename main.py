"""Main entrypoint exposing the chat sidebar FastAPI application."""

from __future__ import annotations

from chat_sidebar.apps.api.app import create_app
from config import config

app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=config.API_HOST, port=config.API_PORT, reload=True)
