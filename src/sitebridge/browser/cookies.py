"""Per-session cookie jar.

Parsing and storage come from :mod:`http.cookiejar` (the same jar type
``httpx`` uses internally); selection of cookies for an outgoing URL
follows RFC 6265 section 5.4. The jar's own re-entrant lock serialises
every read and write: header attach and extraction (which ``httpx`` runs
on each redirect hop) take it inside :mod:`http.cookiejar`, and iteration
takes it here, so copies of the jar see a consistent set of cookies.
"""

from __future__ import annotations

import logging
import time
import urllib.request
from collections.abc import Iterable, Iterator
from datetime import datetime, timezone
from email.message import Message
from http.cookiejar import Cookie, CookieJar, CookiePolicy, DefaultCookiePolicy
from urllib.parse import urlsplit

from sitebridge.models.session import CookieInfo

logger = logging.getLogger(__name__)

_SECURE_SCHEMES = frozenset({"https", "wss"})


class _SetCookieResponse:
    """Minimal response object exposing ``Set-Cookie`` headers to ``CookieJar``."""

    def __init__(self, set_cookie_headers: Iterable[str]) -> None:
        self._message = Message()
        for value in set_cookie_headers:
            self._message["Set-Cookie"] = value

    def info(self) -> Message:
        return self._message


def domain_matches(cookie: Cookie, host: str) -> bool:
    """RFC 6265 domain-match, honouring host-only cookies."""
    host = host.lower().rstrip(".")
    domain = cookie.domain.lower()
    if not cookie.domain_specified:
        # http.cookiejar stores dotless hosts as "<host>.local"
        return domain in (host, f"{host}.local")
    domain = domain.lstrip(".")
    return host == domain or host.endswith("." + domain)


def path_matches(cookie_path: str, request_path: str) -> bool:
    """RFC 6265 path-match."""
    request_path = request_path or "/"
    if request_path == cookie_path:
        return True
    if request_path.startswith(cookie_path):
        return cookie_path.endswith("/") or request_path[len(cookie_path)] == "/"
    return False


class SessionCookieJar(CookieJar):
    """Cookie store owned by exactly one session.

    Args:
        base_url: The owning session's base URL; :meth:`snapshot` lists
            the cookies that apply to it.
        policy: Optional cookie acceptance policy (defaults to
            :class:`http.cookiejar.DefaultCookiePolicy`).
    """

    def __init__(self, base_url: str, policy: CookiePolicy | None = None) -> None:
        super().__init__(policy or DefaultCookiePolicy())
        self.base_url = base_url

    def __iter__(self) -> Iterator[Cookie]:
        with self._cookies_lock:
            return iter(list(super().__iter__()))

    def cookies_for(self, url: str) -> list[Cookie]:
        """Return the cookies a request to *url* would carry, longest path first."""
        parts = urlsplit(url)
        host = parts.hostname or ""
        scheme = parts.scheme.lower()
        now = int(time.time())
        with self._cookies_lock:
            matched = [
                cookie
                for cookie in self
                if not cookie.is_expired(now)
                and (not cookie.secure or scheme in _SECURE_SCHEMES)
                and domain_matches(cookie, host)
                and path_matches(cookie.path, parts.path)
            ]
        matched.sort(key=lambda c: len(c.path), reverse=True)
        return matched

    def update(self, url: str, set_cookie_headers: Iterable[str]) -> None:
        """Merge ``Set-Cookie`` header values received from *url*.

        Missing ``Domain``/``Path`` attributes default from *url*; a
        ``Max-Age`` of zero or less, or an ``Expires`` in the past,
        deletes the matching cookie.
        """
        headers = [value for value in set_cookie_headers if value]
        if not headers:
            return
        self.extract_cookies(_SetCookieResponse(headers), urllib.request.Request(url))
        logger.debug("Merged %d Set-Cookie header(s) from %s", len(headers), url)

    def snapshot(self) -> list[Cookie]:
        """Return the current cookies relevant to the session's base URL."""
        return self.cookies_for(self.base_url)


def cookie_to_info(cookie: Cookie) -> CookieInfo:
    """Serialise a stored cookie for callers."""
    expires = None
    if cookie.expires is not None:
        expires = datetime.fromtimestamp(cookie.expires, tz=timezone.utc)
    return CookieInfo(
        key=cookie.name,
        value=cookie.value,
        domain=cookie.domain.lstrip("."),
        path=cookie.path,
        expires=expires,
        secure=cookie.secure,
        http_only=cookie.has_nonstandard_attr("HttpOnly") or cookie.has_nonstandard_attr("httponly"),
        host_only=not cookie.domain_specified,
    )
