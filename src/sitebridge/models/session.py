"""Session and cookie models as seen by API callers."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CreateSessionRequest(BaseModel):
    """Body of ``POST /api/sessions``."""

    model_config = ConfigDict(populate_by_name=True)

    base_url: str = Field(..., alias="baseUrl", description="Absolute URL every relative target resolves against.")


class SessionSummary(BaseModel):
    """Public view of a session: no client, no cookies."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    base_url: str = Field(..., alias="baseUrl")
    created_at: datetime = Field(..., alias="createdAt")


class CookieInfo(BaseModel):
    """One stored cookie, serialised for listings and proxy responses."""

    model_config = ConfigDict(populate_by_name=True)

    key: str
    value: str | None = None
    domain: str
    path: str = "/"
    expires: datetime | None = None  # None for session cookies
    secure: bool = False
    http_only: bool = Field(False, alias="httpOnly")
    host_only: bool = Field(True, alias="hostOnly")
