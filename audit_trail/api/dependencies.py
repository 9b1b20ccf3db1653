"""Dependency injection helpers for FastAPI routes."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from audit_trail.core.config import AppSettings, get_settings
from audit_trail.core.database import get_session
from audit_trail.services.audit_events import AuditEventStore
from audit_trail.services.audit_queries import AuditEventQueryService


def get_db_session() -> Session:
    yield from get_session()


def get_audit_event_store(session: Session = Depends(get_db_session)) -> AuditEventStore:
    return AuditEventStore(session)


def get_audit_query_service(
    store: AuditEventStore = Depends(get_audit_event_store),
    settings: AppSettings = Depends(get_settings),
) -> AuditEventQueryService:
    return AuditEventQueryService(
        store,
        default_per_page=settings.default_per_page,
        max_per_page=settings.max_per_page,
    )
