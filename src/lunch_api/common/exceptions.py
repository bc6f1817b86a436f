"""Centralized FastAPI exception handlers with structured logging.

Every failure leaves the application through one of these handlers and is
rendered in the standard envelope::

    {"success": false, "error": {"code": ..., "message": ...}, "timestamp": ...}
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from lunch_api.common.errors import (
    INTERNAL_ERROR,
    INVALID_INPUT,
    AppError,
    code_for_status,
    status_for_code,
)
from lunch_api.common.logging import log_context
from lunch_api.common.time import utc_now

_UNHANDLED_LOGGER = logging.getLogger("lunch_api.errors")
_HTTP_LOGGER = logging.getLogger("lunch_api.http")


def success_envelope(data: Any) -> dict[str, Any]:
    """Wrap ``data`` in the standard success envelope."""

    return {"success": True, "data": data, "timestamp": utc_now().isoformat()}


def error_envelope(
    code: str,
    message: str,
    *,
    details: Any = None,
) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return {"success": False, "error": error, "timestamp": utc_now().isoformat()}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Translate domain errors into their mapped HTTP status."""

    status_code = status_for_code(exc.code)
    log = _HTTP_LOGGER.error if status_code >= 500 else _HTTP_LOGGER.info
    log(
        "app_error",
        extra=log_context(
            path=str(request.url.path),
            method=request.method,
            code=exc.code,
            status_code=status_code,
        ),
    )
    return JSONResponse(
        status_code=status_code,
        content=error_envelope(exc.code, exc.message, details=exc.details),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handler for request payloads rejected by FastAPI/Pydantic."""

    details = [
        {
            "path": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=error_envelope(INVALID_INPUT, "Request validation failed", details=details),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for Starlette/FastAPI HTTPException instances.

    4xx responses are returned without logging; 5xx responses are logged at
    ERROR level with structured metadata.
    """
    if exc.status_code >= 500:
        _HTTP_LOGGER.error(
            "http_exception",
            extra=log_context(
                path=str(request.url.path),
                method=request.method,
                status_code=exc.status_code,
                detail=exc.detail,
            ),
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(code_for_status(exc.status_code), str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected exceptions.

    Ensures that any unhandled error results in an HTTP 500 envelope and a
    structured ERROR log including a stack trace.
    """
    _UNHANDLED_LOGGER.exception(
        "unhandled_exception",
        extra=log_context(
            path=str(request.url.path),
            method=request.method,
            exception_type=type(exc).__name__,
            detail=str(exc),
        ),
    )

    return JSONResponse(
        status_code=500,
        content=error_envelope(INTERNAL_ERROR, "An unexpected error occurred"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error boundary to ``app``."""

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = [
    "app_error_handler",
    "error_envelope",
    "http_exception_handler",
    "register_exception_handlers",
    "success_envelope",
    "unhandled_exception_handler",
    "validation_exception_handler",
]
