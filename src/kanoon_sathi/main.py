"""
Kanoon Sathi Application Entry Point

This module defines the FastAPI application instance, registers all routers,
configures global exception handling, and provides a test-friendly application
factory.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from .config import settings
from .core.errors import (
    ChatNotFoundError,
    chat_not_found_handler,
    unhandled_exception_handler,
)
from .db.session import async_engine, init_models

from .api import (
    chat_routes,
    chats_routes,
    search_routes,
    health_routes,
)


logger = logging.getLogger("kanoon.app")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Fail fast on missing secrets, optionally create the schema, and dispose
    of the connection pool on shutdown.
    """
    logger.info("Starting kanoon-sathi")

    # Touch critical secrets to force validation now (not at first use)
    if not settings.openai_api_key.get_secret_value():
        raise RuntimeError("OPENAI_API_KEY is empty")
    if not settings.jwt_secret.get_secret_value():
        raise RuntimeError("JWT_SECRET is empty")

    if settings.db_auto_create:
        await init_models()

    logger.info("Configuration validated successfully")
    yield

    logger.info("Shutting down kanoon-sathi")
    await async_engine.dispose()


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns
    -------
    FastAPI
        Fully configured FastAPI application.
    """
    app = FastAPI(
        title="kanoon-sathi",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # --------------------------------------------------------------
    # Global Exception Handling
    # --------------------------------------------------------------

    app.add_exception_handler(ChatNotFoundError, chat_not_found_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --------------------------------------------------------------
    # Router Registration
    # --------------------------------------------------------------

    app.include_router(health_routes.router)
    app.include_router(chat_routes.router)
    app.include_router(chats_routes.router)
    app.include_router(search_routes.router)

    return app


# ---------------------------------------------------------------------
# Default Application Instance (for Uvicorn/Gunicorn)
# ---------------------------------------------------------------------

app = create_app()
