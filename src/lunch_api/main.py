"""Lunch API FastAPI application entry point."""

from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.routing import Lifespan

from .common.exceptions import register_exception_handlers, success_envelope
from .common.logging import bind_request_id, reset_request_id, setup_logging
from .db import DatabaseConfig, create_schema, db
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)
REQUEST_ID_HEADER = "X-Request-ID"


def create_application_lifespan(*, settings: Settings) -> Lifespan[FastAPI]:
    """Return the lifespan handler owning the process-wide database engine."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        db.init(DatabaseConfig.from_settings(settings))
        if settings.database_create_all:
            await create_schema(db.engine)
        logger.info("app.startup", extra={"database_backend": db.engine.url.get_backend_name()})
        try:
            yield
        finally:
            await db.dispose()
            logger.info("app.shutdown")

    return lifespan


def register_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def request_context(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = bind_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            reset_request_id(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def create_app(settings: Settings | None = None) -> FastAPI:
    """Return a configured FastAPI application."""

    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_application_lifespan(settings=settings),
    )
    app.state.settings = settings

    register_middleware(app)
    register_exception_handlers(app)

    @app.get("/health", include_in_schema=False)
    async def health() -> dict:
        return success_envelope({"status": "ok", "version": settings.app_version})

    return app


__all__ = ["REQUEST_ID_HEADER", "create_app", "create_application_lifespan"]
