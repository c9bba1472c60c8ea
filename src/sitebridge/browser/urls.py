"""Resolve caller-supplied targets against a session's base URL."""

from __future__ import annotations

import re
from urllib.parse import urljoin, urlsplit, urlunsplit

from sitebridge.exceptions import ValidationError

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")

# Schemes whose URLs are meaningless without a host.
_HIERARCHICAL_SCHEMES = frozenset({"http", "https", "ws", "wss", "ftp"})


def is_absolute_url(url: str | None) -> bool:
    """Return True if *url* has a scheme (and a host, for hierarchical schemes)."""
    if not url:
        return False
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    if not parts.scheme or not _SCHEME_RE.match(parts.scheme):
        return False
    if parts.scheme.lower() in _HIERARCHICAL_SCHEMES:
        try:
            return bool(parts.hostname)
        except ValueError:
            return False
    return True


def normalize_url(url: str) -> str:
    """Lower-case the scheme and host of a hierarchical URL; other parts are kept."""
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    if scheme not in _HIERARCHICAL_SCHEMES or not parts.netloc:
        return url
    userinfo, at, hostport = parts.netloc.rpartition("@")
    return urlunsplit((scheme, f"{userinfo}{at}{hostport.lower()}", parts.path, parts.query, parts.fragment))


def resolve_target_url(base: str, target: str | None = None) -> str:
    """Resolve *target* against *base* and return an absolute URL.

    An absent or blank target returns *base* unchanged. Absolute targets
    come back as-is apart from a lower-cased scheme and host; relative,
    path-absolute, protocol-relative and query/fragment-only forms follow
    RFC 3986 resolution.

    Raises:
        ValidationError: If the result is not an absolute URL.
    """
    if target is None or not target.strip():
        resolved = base
    else:
        try:
            resolved = normalize_url(urljoin(base, target.strip()))
        except ValueError as exc:
            raise ValidationError(f"Invalid URL: {target}") from exc
    if not is_absolute_url(resolved):
        raise ValidationError(f"Invalid URL: {resolved or target or base}")
    return resolved
