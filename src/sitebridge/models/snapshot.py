"""Structured description of a fetched page: title, forms and links."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SerializerFunctionWrapHandler, model_serializer


class FieldDescriptor(BaseModel):
    """A named ``input``, ``textarea`` or ``select`` inside a form.

    ``label`` and ``value`` are left out of the serialised form when absent.
    """

    name: str
    type: str
    label: str | None = None
    value: str | None = None

    @model_serializer(mode="wrap")
    def _omit_absent(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        return {key: val for key, val in handler(self).items() if val is not None}


class FormDescriptor(BaseModel):
    id: str
    action: str
    method: str = "GET"
    fields: list[FieldDescriptor] = Field(default_factory=list)


class LinkDescriptor(BaseModel):
    href: str
    text: str = ""


class SnapshotResult(BaseModel):
    """Page snapshot plus the same status envelope a proxied call returns."""

    model_config = ConfigDict(populate_by_name=True)

    url: str
    status: int
    status_text: str = Field("", alias="statusText")
    title: str | None = None
    headers: dict[str, str | list[str]] = Field(default_factory=dict)
    html: str = ""
    forms: list[FormDescriptor] = Field(default_factory=list)
    links: list[LinkDescriptor] = Field(default_factory=list)
