"""Session store: base URL + cookie jar + bound HTTP client, keyed by id.

Usage::

    from sitebridge.store import SessionStore

    store = SessionStore()
    session = store.create("https://example.com")
    assert store.get(session.id) is session
    removed = store.delete(session.id)
    if removed:
        await removed.aclose()
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4

import httpx

from sitebridge.browser.cookies import SessionCookieJar
from sitebridge.browser.urls import is_absolute_url
from sitebridge.exceptions import NotFoundError, ValidationError
from sitebridge.models.session import SessionSummary
from sitebridge.settings.config import HTTPSettings

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES = ("http://", "https://")


def build_http_client(
    jar: SessionCookieJar,
    *,
    settings: HTTPSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Return an ``AsyncClient`` whose cookie store is *jar*.

    The client follows redirects and never raises for an HTTP status;
    every response, 4xx/5xx included, goes back to the caller.
    """
    if settings is None:
        from sitebridge.settings import get_settings

        settings = get_settings().http

    return httpx.AsyncClient(
        cookies=jar,
        headers={"User-Agent": settings.user_agent},
        timeout=httpx.Timeout(settings.timeout_seconds),
        follow_redirects=settings.follow_redirects,
        max_redirects=settings.max_redirects,
        verify=settings.verify_tls,
        transport=transport,
    )


@dataclass
class Session:
    """An isolated browsing context bound to one base URL."""

    base_url: str
    jar: SessionCookieJar
    client: httpx.AsyncClient
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def summary(self) -> SessionSummary:
        return SessionSummary(id=self.id, base_url=self.base_url, created_at=self.created_at)

    async def aclose(self) -> None:
        """Close the bound HTTP client."""
        await self.client.aclose()


class SessionStore:
    """Thread-safe registry of live sessions.

    Args:
        http_settings: Client settings for new sessions (defaults to
            ``get_settings().http``).
        transport: Optional ``httpx`` transport shared by every session's
            client, e.g. ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        *,
        http_settings: HTTPSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._http_settings = http_settings
        self._transport = transport
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def create(self, base_url: str) -> Session:
        """Open a new session for *base_url*.

        Raises:
            ValidationError: If *base_url* is empty or not an absolute
                http(s) URL.
        """
        base_url = (base_url or "").strip()
        if not base_url:
            raise ValidationError("Base URL is required")
        if not base_url.lower().startswith(_ALLOWED_SCHEMES) or not is_absolute_url(base_url):
            raise ValidationError(f"Base URL must be an absolute http(s) URL: {base_url}")

        jar = SessionCookieJar(base_url)
        client = build_http_client(jar, settings=self._http_settings, transport=self._transport)
        session = Session(base_url=base_url, jar=jar, client=client)
        with self._lock:
            while session.id in self._sessions:
                session.id = str(uuid4())
            self._sessions[session.id] = session
        logger.info("Created session %s for %s", session.id, base_url)
        return session

    def get(self, session_id: str) -> Session | None:
        """Return the session or ``None`` if unknown."""
        with self._lock:
            return self._sessions.get(session_id)

    def require(self, session_id: str) -> Session:
        """Return the session or raise :class:`NotFoundError`."""
        session = self.get(session_id)
        if session is None:
            raise NotFoundError(session_id)
        return session

    def delete(self, session_id: str) -> Session | None:
        """Remove a session; a no-op for unknown ids.

        Returns the removed session so the caller can close its client.
        """
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is not None:
            logger.info("Deleted session %s", session_id)
        return session

    def list_sessions(self) -> list[SessionSummary]:
        """Return summaries of all live sessions."""
        with self._lock:
            sessions = list(self._sessions.values())
        return [session.summary() for session in sessions]

    async def aclose(self) -> None:
        """Drop every session and close their clients."""
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            await session.aclose()
        if sessions:
            logger.info("Closed %d session(s)", len(sessions))

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions
