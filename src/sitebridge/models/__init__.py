"""Pydantic models exchanged with callers of the session API."""

from __future__ import annotations

from sitebridge.models.proxy import BinaryPayload, ProxyRequest, ProxyResponse
from sitebridge.models.session import CookieInfo, CreateSessionRequest, SessionSummary
from sitebridge.models.snapshot import FieldDescriptor, FormDescriptor, LinkDescriptor, SnapshotResult

__all__ = [
    "BinaryPayload",
    "CookieInfo",
    "CreateSessionRequest",
    "FieldDescriptor",
    "FormDescriptor",
    "LinkDescriptor",
    "ProxyRequest",
    "ProxyResponse",
    "SessionSummary",
    "SnapshotResult",
]
