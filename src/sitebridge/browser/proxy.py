"""Issue one HTTP call inside a session's cookie context."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import httpx

from sitebridge.browser.cookies import cookie_to_info
from sitebridge.browser.normalize import (
    decode_payload,
    flatten_headers,
    normalize_headers,
    normalize_method,
    prepare_body,
)
from sitebridge.browser.urls import resolve_target_url
from sitebridge.exceptions import NetworkError
from sitebridge.models.proxy import ProxyResponse

if TYPE_CHECKING:
    from sitebridge.store.session_store import Session

logger = logging.getLogger(__name__)


async def send(
    session: Session,
    method: str,
    url: str,
    *,
    headers: Mapping[str, str] | None = None,
    body_kwargs: Mapping[str, Any] | None = None,
) -> httpx.Response:
    """Send through the session client, mapping transport failures to :class:`NetworkError`."""
    try:
        response = await session.client.request(method, url, headers=headers, **(body_kwargs or {}))
    except httpx.HTTPError as exc:
        message = str(exc) or type(exc).__name__
        logger.warning("%s %s failed in session %s: %s", method, url, session.id, message)
        raise NetworkError(url, message) from exc
    logger.info("%s %s -> %d (session %s)", method, url, response.status_code, session.id)
    return response


def final_url(response: httpx.Response, fallback: str) -> str:
    """URL of the last response in the redirect chain."""
    return str(response.url) if response.url else fallback


async def proxy_request(
    session: Session,
    method: str | None = "GET",
    target_url: str | None = None,
    headers: Mapping[str, Any] | str | None = None,
    body: Any = None,
) -> ProxyResponse:
    """Proxy one request and wrap the result in a :class:`ProxyResponse`.

    Target-site error statuses come back as ordinary envelopes.

    Raises:
        ValidationError: If the target does not resolve to an absolute URL.
        NetworkError: On connection, DNS, TLS, timeout or redirect failures.
    """
    verb = normalize_method(method)
    resolved = resolve_target_url(session.base_url, target_url)
    request_body = prepare_body(verb, body)

    response = await send(
        session,
        verb,
        resolved,
        headers=normalize_headers(headers),
        body_kwargs=request_body.as_httpx_kwargs() if request_body is not None else None,
    )
    return ProxyResponse(
        url=final_url(response, resolved),
        status=response.status_code,
        status_text=response.reason_phrase,
        headers=flatten_headers(response.headers),
        data=decode_payload(response),
        cookies=[cookie_to_info(cookie) for cookie in session.jar.cookies_for(resolved)],
    )
