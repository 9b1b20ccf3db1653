"""Pydantic schemas for API payloads."""

from audit_trail.schemas.audit_event import (
    AuditEventCreate,
    AuditEventCreateRequest,
    AuditEventEnvelope,
    AuditEventListResponse,
    AuditEventResponse,
    PaginationMeta,
)

__all__ = [
    "AuditEventCreate",
    "AuditEventCreateRequest",
    "AuditEventEnvelope",
    "AuditEventListResponse",
    "AuditEventResponse",
    "PaginationMeta",
]
