"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from audit_trail.api.error_handlers import register_exception_handlers
from audit_trail.api.routers import get_api_router
from audit_trail.core.config import AppSettings, get_settings
from audit_trail.core.database import create_schema
from audit_trail.core.logging import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: D401
    """Application lifespan context for startup/shutdown hooks."""

    settings = get_settings()
    if settings.auto_create_schema:
        create_schema()

    yield


def create_app(settings: AppSettings | None = None) -> FastAPI:
    """Application factory."""

    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Audit Trail Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    register_exception_handlers(app)
    app.include_router(get_api_router())
    return app


app = create_app()
