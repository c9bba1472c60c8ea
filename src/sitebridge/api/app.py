"""FastAPI app for sitebridge."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sitebridge import __version__
from sitebridge.api.errors import register_error_handlers
from sitebridge.api.routes import router, session_router
from sitebridge.settings import get_settings
from sitebridge.store import SessionStore


def create_app(store: SessionStore | None = None) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        store: Session store to serve; a fresh one is created when omitted.
    """
    settings = get_settings()
    session_store = store if store is not None else SessionStore(http_settings=settings.http)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        await session_store.aclose()

    application = FastAPI(
        title="sitebridge",
        description="Cookie-aware proxy sessions and page snapshots for any website.",
        version=__version__,
        lifespan=lifespan,
    )
    application.state.session_store = session_store

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(application)
    application.include_router(router)
    application.include_router(session_router)
    return application
