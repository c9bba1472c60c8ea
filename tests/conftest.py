"""sitebridge test configuration — shared fixtures for unit and integration tests.

``fake_site`` stands in for a target website via ``httpx.MockTransport``,
so nothing touches the network.
"""

from __future__ import annotations

import json

import httpx
import pytest

BASE_URL = "https://x.test"

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\xff\xfe\x00\x01"

PAGE_HTML = """<!doctype html>
<html>
<head><title>  Sign in  </title></head>
<body>
  <form id="login" action="/session" method="post">
    <label for="email">Email address</label>
    <input id="email" name="email" type="email">
    <label>Password <input name="password" type="password"></label>
    <input type="submit" value="Go">
    <select name="plan"><option value="free">Free</option><option value="pro" selected>Pro</option></select>
  </form>
  <form action="search">
    <textarea name="q">  hello  </textarea>
  </form>
  <a href="/about">About us</a>
  <a>no href</a>
  <a href="https://other.test/x"> Elsewhere </a>
</body>
</html>
"""

MINIMAL_FORM_HTML = '<form id="f1" action="/go" method="post"><input name="q" type="text"></form>'


def fake_site(request: httpx.Request) -> httpx.Response:
    """Route table for the pretend target site."""
    path = request.url.path
    if path == "/login":
        return httpx.Response(200, text="welcome", headers={"Set-Cookie": "a=1; Path=/"})
    if path == "/logout":
        return httpx.Response(200, text="bye", headers={"Set-Cookie": "a=gone; Max-Age=0; Path=/"})
    if path == "/echo":
        return httpx.Response(
            200,
            json={
                "method": request.method,
                "cookie": request.headers.get("cookie"),
                "accept": request.headers.get("accept"),
                "content_type": request.headers.get("content-type"),
                "body": request.content.decode("utf-8"),
            },
        )
    if path == "/redirect":
        return httpx.Response(302, headers={"Location": "/landing", "Set-Cookie": "r=2; Path=/"})
    if path == "/landing":
        return httpx.Response(200, html="<html><title>Landing</title></html>")
    if path == "/missing":
        return httpx.Response(404, html="<html><title>Not Found</title><a href='/'>home</a></html>")
    if path == "/image":
        return httpx.Response(200, content=PNG_BYTES, headers={"Content-Type": "image/png"})
    if path == "/page":
        return httpx.Response(200, html=PAGE_HTML)
    if path == "/form":
        return httpx.Response(200, html=MINIMAL_FORM_HTML)
    if path == "/boom":
        raise httpx.ConnectError("Connection refused", request=request)
    if path == "/slow":
        raise httpx.ReadTimeout("timed out", request=request)
    return httpx.Response(200, text=json.dumps({"path": path}), headers={"Content-Type": "application/json"})


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Clear the settings LRU cache between tests."""
    from sitebridge.settings.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


@pytest.fixture()
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture()
def transport() -> httpx.MockTransport:
    return httpx.MockTransport(fake_site)


@pytest.fixture()
def session_store(transport: httpx.MockTransport):
    """A ``SessionStore`` whose clients talk to ``fake_site``."""
    from sitebridge.store import SessionStore

    return SessionStore(transport=transport)


@pytest.fixture()
def session(session_store):
    return session_store.create(BASE_URL)


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests that exercise the HTTP surface end to end")
