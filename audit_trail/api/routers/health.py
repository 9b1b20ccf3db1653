"""Health check endpoints."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends

from audit_trail.api.dependencies import get_audit_event_store
from audit_trail.core.config import AppSettings, get_settings
from audit_trail.services.audit_events import AuditEventStore

router = APIRouter()


@router.get("/healthz", summary="Liveness probe")
def health_check() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health", summary="Service and database status")
def service_health(
    store: AuditEventStore = Depends(get_audit_event_store),
    settings: AppSettings = Depends(get_settings),
) -> dict[str, Any]:
    return {
        "status": "ok",
        "service": settings.service_name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "connected" if store.ping() else "disconnected",
    }
