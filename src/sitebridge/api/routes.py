"""Session, proxy and snapshot endpoints."""

from __future__ import annotations

from typing import Any

import pydantic
from fastapi import APIRouter, Depends, Query, Request

from sitebridge.api.errors import format_validation_errors
from sitebridge.browser.cookies import cookie_to_info
from sitebridge.browser.proxy import proxy_request
from sitebridge.browser.snapshot import take_snapshot
from sitebridge.exceptions import ValidationError
from sitebridge.models import CookieInfo, CreateSessionRequest, ProxyRequest, ProxyResponse, SessionSummary, SnapshotResult
from sitebridge.store import SessionStore

router = APIRouter()
session_router = APIRouter(prefix="/api/sessions", tags=["sessions"])


def get_store(request: Request) -> SessionStore:
    """The store bound to the running application."""
    return request.app.state.session_store


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# Session lifecycle
# ---------------------------------------------------------------------------


@session_router.get("", response_model=list[SessionSummary])
def list_sessions(store: SessionStore = Depends(get_store)) -> list[SessionSummary]:
    return store.list_sessions()


@session_router.post("", response_model=SessionSummary, status_code=201)
def create_session(req: CreateSessionRequest, store: SessionStore = Depends(get_store)) -> SessionSummary:
    """Open a session bound to ``baseUrl``."""
    return store.create(req.base_url).summary()


@session_router.get("/{session_id}", response_model=SessionSummary)
def get_session(session_id: str, store: SessionStore = Depends(get_store)) -> SessionSummary:
    return store.require(session_id).summary()


@session_router.delete("/{session_id}")
async def delete_session(session_id: str, store: SessionStore = Depends(get_store)) -> dict[str, bool]:
    """Delete a session. Unknown ids succeed too."""
    session = store.delete(session_id)
    if session is not None:
        await session.aclose()
    return {"ok": True}


@session_router.get("/{session_id}/cookies", response_model=list[CookieInfo])
def list_cookies(session_id: str, store: SessionStore = Depends(get_store)) -> list[CookieInfo]:
    """Cookies the session currently holds for its base URL."""
    session = store.require(session_id)
    return [cookie_to_info(cookie) for cookie in session.jar.snapshot()]


# ---------------------------------------------------------------------------
# Proxy + snapshot
# ---------------------------------------------------------------------------


async def _read_proxy_request(request: Request) -> ProxyRequest:
    try:
        payload: Any = await request.json()
    except ValueError as exc:
        raise ValidationError("Invalid JSON payload") from exc
    try:
        return ProxyRequest.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise ValidationError(format_validation_errors(exc.errors())) from exc


@session_router.post("/{session_id}/request", response_model=ProxyResponse)
async def proxy(session_id: str, request: Request, store: SessionStore = Depends(get_store)) -> ProxyResponse:
    """Proxy one HTTP call through the session.

    The session is looked up before the payload is read, so an unknown id
    is a 404 even when the payload is malformed.
    """
    session = store.require(session_id)
    req = await _read_proxy_request(request)
    return await proxy_request(session, req.method, req.url, req.headers, req.body)


@session_router.get("/{session_id}/snapshot", response_model=SnapshotResult)
async def snapshot(
    session_id: str,
    url: str | None = Query(None, description="Page to snapshot; defaults to the base URL."),
    store: SessionStore = Depends(get_store),
) -> SnapshotResult:
    session = store.require(session_id)
    return await take_snapshot(session, url)
