"""Audit events recorded against clients, invoices and the system itself."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from sqlalchemy import BigInteger, Index, Integer, String
from sqlalchemy import Enum as SqlEnum
from sqlalchemy.orm import Mapped, mapped_column

from audit_trail.models.base import Base, TimestampMixin
from audit_trail.models.types import GUID, JSONType, UTCDateTime


class EntityType(str, Enum):
    CLIENT = "client"
    INVOICE = "invoice"
    SYSTEM = "system"


class EventAction(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    ERROR = "error"


class EventStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


def _enum_column(enum_cls: type[Enum], name: str) -> SqlEnum:
    return SqlEnum(
        enum_cls,
        name=name,
        native_enum=False,
        length=16,
        values_callable=lambda members: [member.value for member in members],
    )


class AuditEvent(TimestampMixin, Base):
    """Immutable record of a single action taken against an entity.

    ``sequence`` is an internal insertion counter used to break ties between
    events sharing the same ``occurred_at``; ``id`` is the public identifier.
    """

    __tablename__ = "audit_events"

    sequence: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    id: Mapped[uuid.UUID] = mapped_column(GUID(), nullable=False, default=uuid.uuid4)
    event_type: Mapped[str] = mapped_column(String(length=128), nullable=False)
    entity_type: Mapped[EntityType] = mapped_column(_enum_column(EntityType, "audit_entity_type"), nullable=False)
    entity_id: Mapped[Optional[str]] = mapped_column(String(length=128), nullable=True)
    action: Mapped[EventAction] = mapped_column(_enum_column(EventAction, "audit_event_action"), nullable=False)
    status: Mapped[EventStatus] = mapped_column(_enum_column(EventStatus, "audit_event_status"), nullable=False)
    # "metadata" is reserved on declarative classes, hence the trailing underscore.
    metadata_: Mapped[Optional[Any]] = mapped_column("metadata", JSONType, nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(length=512), nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(length=64), nullable=True)
    occurred_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)


Index("ix_audit_events_id", AuditEvent.id, unique=True)
Index("ix_audit_events_entity_id", AuditEvent.entity_id)
Index("ix_audit_events_entity_type", AuditEvent.entity_type)
Index("ix_audit_events_event_type", AuditEvent.event_type)
Index("ix_audit_events_occurred_at", AuditEvent.occurred_at.desc())
Index("ix_audit_events_created_at", AuditEvent.created_at.desc())
Index("ix_audit_events_entity", AuditEvent.entity_type, AuditEvent.entity_id)
