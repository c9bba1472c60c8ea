"""Map sitebridge exceptions onto HTTP status codes.

Every error body has the shape ``{"message": "<text>"}``.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from sitebridge.exceptions import NetworkError, NotFoundError, SiteBridgeError, ValidationError

logger = logging.getLogger(__name__)


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"message": message}, status_code=status_code)


def format_validation_errors(errors: list[dict]) -> str:
    """Join pydantic error entries into one human-readable line."""
    parts = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        text = error.get("msg", "Invalid value")
        parts.append(f"{location}: {text}" if location else text)
    return ", ".join(parts) or "Invalid payload"


async def _validation_error(_request: Request, exc: ValidationError) -> JSONResponse:
    return _message(400, str(exc))


async def _request_validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
    return _message(400, format_validation_errors(list(exc.errors())))


async def _not_found(_request: Request, exc: NotFoundError) -> JSONResponse:
    return _message(404, str(exc))


async def _network_error(_request: Request, exc: NetworkError) -> JSONResponse:
    return _message(500, str(exc))


async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    if isinstance(exc, SiteBridgeError):
        return _message(500, str(exc))
    return _message(500, "Internal server error")


def register_error_handlers(application: FastAPI) -> None:
    application.add_exception_handler(ValidationError, _validation_error)
    application.add_exception_handler(RequestValidationError, _request_validation_error)
    application.add_exception_handler(NotFoundError, _not_found)
    application.add_exception_handler(NetworkError, _network_error)
    application.add_exception_handler(Exception, _unexpected_error)
