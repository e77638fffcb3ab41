"""FastAPI application for the Card Engine."""
from __future__ import annotations

from fastapi import FastAPI

from engines.card_engine.service.routes import router


def create_app() -> FastAPI:
    app = FastAPI(title="Card Engine", version="0.1.0")
    app.include_router(router)
    return app


app = create_app()
