"""Exception handlers for the FastAPI app."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from audit_trail.services.audit_events import (
    AuditEventNotFoundError,
    AuditEventValidationError,
    StorageUnavailableError,
)

logger = logging.getLogger("audit_trail.api")


def _format_request_error(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    return f"{location} {error.get('msg', 'is invalid')}".strip()


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuditEventValidationError)
    async def audit_event_validation_handler(request: Request, exc: AuditEventValidationError) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(
            status_code=422,
            content={"error": "Validation Error", "message": exc.message, "details": exc.details},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(
            status_code=422,
            content={
                "error": "Validation Error",
                "message": "Request payload is invalid",
                "details": [_format_request_error(error) for error in exc.errors()],
            },
        )

    @app.exception_handler(AuditEventNotFoundError)
    async def audit_event_not_found_handler(request: Request, exc: AuditEventNotFoundError) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(status_code=404, content={"error": "Not Found", "message": str(exc)})

    @app.exception_handler(StorageUnavailableError)
    async def storage_unavailable_handler(request: Request, exc: StorageUnavailableError) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(
            status_code=503,
            content={"error": "Service Unavailable", "message": "Audit event storage is unavailable"},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # noqa: WPS430
        logger.exception(
            "unhandled_exception",
            extra={"path": request.url.path, "method": request.method, "error": str(exc)},
        )
        return JSONResponse(
            status_code=500,
            content={"error": "Internal Server Error", "message": "An unexpected error occurred"},
        )
