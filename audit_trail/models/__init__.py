"""SQLAlchemy ORM models for the audit trail service."""

from audit_trail.models.base import Base  # noqa: F401
from audit_trail.models.audit_event import AuditEvent, EntityType, EventAction, EventStatus  # noqa: F401
