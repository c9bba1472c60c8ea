"""sitebridge exception hierarchy.

HTTP-level error statuses returned by a target site are *not* exceptions;
they travel back to the caller inside a normal response envelope.
"""

from __future__ import annotations


class SiteBridgeError(Exception):
    """Base exception for all sitebridge errors."""


class ValidationError(SiteBridgeError):
    """Raised for bad input: malformed payloads or URLs that are not absolute."""


class NotFoundError(SiteBridgeError):
    """Raised when a session id is unknown to the store.

    Attributes:
        session_id: The id that was looked up.
    """

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__("Session not found")


class NetworkError(SiteBridgeError):
    """Raised when a downstream fetch fails below the HTTP layer.

    Covers DNS failures, refused connections, TLS errors, timeouts and
    redirect loops. The originating ``httpx`` exception is chained.

    Attributes:
        url: The URL that was being fetched.
    """

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        super().__init__(message or "Request failed")
