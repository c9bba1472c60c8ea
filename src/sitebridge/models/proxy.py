"""Request/response envelopes for proxied HTTP calls."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from sitebridge.models.session import CookieInfo


class ProxyRequest(BaseModel):
    """Body of ``POST /api/sessions/{id}/request``.

    ``headers`` may be a mapping or a JSON-encoded string of one; ``body``
    may be a string (JSON is decoded when possible) or already-structured
    data. Both are normalised by :mod:`sitebridge.browser.normalize`.
    """

    method: str = "GET"
    url: str | None = None
    headers: dict[str, Any] | str | None = None
    body: Any = None


class BinaryPayload(BaseModel):
    """Stand-in for a response body that is not text."""

    encoding: Literal["base64"] = "base64"
    data: str


class ProxyResponse(BaseModel):
    """Uniform envelope returned for every proxied call, whatever its status."""

    model_config = ConfigDict(populate_by_name=True)

    url: str
    status: int
    status_text: str = Field("", alias="statusText")
    headers: dict[str, str | list[str]] = Field(default_factory=dict)
    data: Any = None
    cookies: list[CookieInfo] = Field(default_factory=list)
