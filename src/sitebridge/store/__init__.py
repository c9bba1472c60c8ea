"""In-process session registry.

Sessions live only as long as the process; nothing is persisted.
"""

from __future__ import annotations

from sitebridge.store.session_store import Session, SessionStore, build_http_client

__all__ = ["Session", "SessionStore", "build_http_client"]
