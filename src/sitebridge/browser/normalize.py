"""Pure normalisation of caller-supplied headers, bodies and response payloads.

Callers may send headers as a mapping or as a JSON string, and bodies as
text or as structured data. Both are resolved here, once, into explicit
shapes the proxy can hand straight to ``httpx``.
"""

from __future__ import annotations

import base64
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from sitebridge.models.proxy import BinaryPayload

logger = logging.getLogger(__name__)

BODYLESS_METHODS = frozenset({"GET", "HEAD"})


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class JSONBody:
    """Structured data, serialised as JSON on the wire."""

    value: Any

    def as_httpx_kwargs(self) -> dict[str, Any]:
        return {"json": self.value}


@dataclass(frozen=True)
class RawBody:
    """Text or bytes sent verbatim."""

    content: str | bytes

    def as_httpx_kwargs(self) -> dict[str, Any]:
        return {"content": self.content}


RequestBody = JSONBody | RawBody | None


def _safe_json_loads(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        return None


def normalize_method(method: str | None) -> str:
    return (method or "GET").strip().upper() or "GET"


def normalize_headers(raw: Mapping[str, Any] | str | None) -> dict[str, str] | None:
    """Return a flat ``str -> str`` header mapping, or None for no headers.

    A string is decoded as JSON; if that fails, or does not yield an
    object, the headers are treated as absent. ``None`` values are
    dropped and list values are joined with ``", "``.
    """
    if isinstance(raw, str):
        decoded = _safe_json_loads(raw)
        if not isinstance(decoded, Mapping):
            if raw.strip():
                logger.debug("Ignoring header string that is not a JSON object")
            return None
        raw = decoded
    if not isinstance(raw, Mapping):
        return None

    headers: dict[str, str] = {}
    for key, value in raw.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            headers[str(key)] = ", ".join(str(item) for item in value)
        else:
            headers[str(key)] = str(value)
    return headers


def prepare_body(method: str, raw: Any) -> RequestBody:
    """Resolve the request body for *method*.

    ``GET``/``HEAD`` never carry a body. Strings are trimmed; an empty
    result means no body, JSON text becomes :class:`JSONBody` and any
    other text is sent as :class:`RawBody`. Non-string input is already
    structured and is passed through as :class:`JSONBody`.
    """
    if normalize_method(method) in BODYLESS_METHODS or raw is None:
        return None
    if isinstance(raw, bytes):
        return RawBody(raw)
    if isinstance(raw, str):
        trimmed = raw.strip()
        if not trimmed:
            return None
        decoded = _safe_json_loads(trimmed)
        if decoded is None:
            return RawBody(trimmed)
        return JSONBody(decoded)
    return JSONBody(raw)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

_BINARY_PREFIXES = ("image/", "audio/", "video/", "font/")
_BINARY_TYPES = frozenset(
    {
        "application/octet-stream",
        "application/pdf",
        "application/zip",
        "application/gzip",
        "application/x-gzip",
        "application/wasm",
    }
)
_TEXT_TYPES = frozenset(
    {
        "application/xml",
        "application/javascript",
        "application/x-javascript",
        "application/ecmascript",
        "application/x-www-form-urlencoded",
        "application/xhtml+xml",
    }
)


def _media_type(content_type: str | None) -> str:
    return (content_type or "").split(";", 1)[0].strip().lower()


def is_json_type(media_type: str) -> bool:
    return media_type == "application/json" or media_type.endswith("+json")


def is_text_type(media_type: str) -> bool:
    return media_type.startswith("text/") or media_type in _TEXT_TYPES or media_type.endswith("+xml")


def is_binary_type(media_type: str) -> bool:
    return media_type.startswith(_BINARY_PREFIXES) or media_type in _BINARY_TYPES


def encode_binary(content: bytes) -> dict[str, str]:
    return BinaryPayload(data=base64.b64encode(content).decode("ascii")).model_dump()


def decode_payload(response: httpx.Response) -> Any:
    """Turn a response body into caller-facing ``data``.

    JSON parses to structured data (text if it does not parse), text
    types decode to ``str`` and binary payloads become a base64 envelope.
    Unlabelled bodies are text when they decode as UTF-8.
    """
    content = response.content
    media_type = _media_type(response.headers.get("content-type"))
    if not content:
        return ""
    if is_binary_type(media_type):
        return encode_binary(content)
    if is_json_type(media_type):
        try:
            return json.loads(response.text)
        except ValueError:
            return response.text
    if is_text_type(media_type) or response.charset_encoding:
        return response.text
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        return encode_binary(content)


def flatten_headers(headers: httpx.Headers) -> dict[str, str | list[str]]:
    """Collapse response headers to one entry per lower-cased name.

    Repeated headers are joined with ``", "``; ``set-cookie`` keeps a list
    because cookie values may themselves contain commas.
    """
    flat: dict[str, str | list[str]] = {}
    set_cookies: list[str] = []
    for name, value in headers.multi_items():
        key = name.lower()
        if key == "set-cookie":
            set_cookies.append(value)
        elif key in flat:
            flat[key] = f"{flat[key]}, {value}"
        else:
            flat[key] = value
    if set_cookies:
        flat["set-cookie"] = set_cookies
    return flat
