"""Audit event store: validated writes, lookups and filtered scans."""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Iterator, List, Optional, Sequence, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from audit_trail.core.database import ping as ping_database
from audit_trail.models.audit_event import AuditEvent, EntityType, EventAction, EventStatus
from audit_trail.models.types import ensure_utc
from audit_trail.schemas.audit_event import AuditEventCreate

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventServiceError(Exception):
    """Base class for audit event errors."""


class AuditEventValidationError(AuditEventServiceError):
    """Raised when a write candidate or query parameters fail validation."""

    def __init__(self, message: str, details: Sequence[str], fields: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.details = list(details)
        self.fields = list(fields)


class AuditEventNotFoundError(AuditEventServiceError):
    """Raised when no audit event matches the requested identifier."""


class StorageUnavailableError(AuditEventServiceError):
    """Raised when the database cannot serve a request."""


class ScanOrder(str, Enum):
    RECENT = "recent"
    OLDEST = "oldest"


@dataclass(frozen=True)
class AuditEventFilters:
    """Conjunction of optional predicates applied by :meth:`AuditEventStore.scan`."""

    entity_id: Optional[str] = None
    entity_type: Optional[str] = None
    event_type: Optional[str] = None
    status: Optional[str] = None
    occurred_from: Optional[datetime] = None
    occurred_to: Optional[datetime] = None

    def conditions(self) -> List[Any]:
        clauses: List[Any] = []
        if self.entity_id is not None:
            clauses.append(AuditEvent.entity_id == self.entity_id)
        if self.entity_type is not None:
            clauses.append(AuditEvent.entity_type == self.entity_type)
        if self.event_type is not None:
            clauses.append(AuditEvent.event_type == self.event_type)
        if self.status is not None:
            clauses.append(AuditEvent.status == self.status)
        # A lone bound is not an open-ended range; both ends are required.
        if self.occurred_from is not None and self.occurred_to is not None:
            clauses.append(AuditEvent.occurred_at >= self.occurred_from)
            clauses.append(AuditEvent.occurred_at <= self.occurred_to)
        return clauses


_ORDERINGS = {
    ScanOrder.RECENT: (AuditEvent.occurred_at.desc(), AuditEvent.sequence.desc()),
    ScanOrder.OLDEST: (AuditEvent.occurred_at.asc(), AuditEvent.sequence.asc()),
}

_REQUIRED_FIELDS = ("event_type", "entity_type", "action", "status", "occurred_at")

_VOCABULARIES = {
    "entity_type": frozenset(member.value for member in EntityType),
    "action": frozenset(member.value for member in EventAction),
    "status": frozenset(member.value for member in EventStatus),
}


def _humanize(field: str) -> str:
    return field.replace("_", " ").capitalize()


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def normalize_candidate(candidate: AuditEventCreate, clock: Clock = utcnow) -> AuditEventCreate:
    """Fill defaults that must exist before validation runs.

    ``occurred_at`` falls back to the clock only when the producer left it out.
    """

    if candidate.occurred_at is None:
        candidate.occurred_at = ensure_utc(clock())
    return candidate


def validate_candidate(candidate: AuditEventCreate) -> List[Tuple[str, str]]:
    """Return ``(field, message)`` pairs, one per violated field."""

    violations: List[Tuple[str, str]] = []
    for field in _REQUIRED_FIELDS:
        value = getattr(candidate, field)
        if _is_blank(value):
            violations.append((field, f"{_humanize(field)} can't be blank"))
            continue
        allowed = _VOCABULARIES.get(field)
        if allowed is not None and value not in allowed:
            violations.append((field, f"{_humanize(field)} is not included in the list"))
    return violations


class AuditEventStore:
    """Append-only persistence for audit events.

    Events are written once by :meth:`create` and only read afterwards.
    """

    def __init__(self, session: Session, *, clock: Clock = utcnow) -> None:
        self._session = session
        self._clock = clock
        self._logger = logging.getLogger("audit_trail.services.audit_events")

    def create(self, candidate: AuditEventCreate) -> AuditEvent:
        normalize_candidate(candidate, self._clock)
        violations = validate_candidate(candidate)
        if violations:
            self._logger.info(
                "audit_event_rejected",
                extra={"fields": [field for field, _ in violations], "event_type": candidate.event_type},
            )
            raise AuditEventValidationError(
                "Failed to create audit event",
                details=[message for _, message in violations],
                fields=[field for field, _ in violations],
            )

        persisted_at = ensure_utc(self._clock())
        event = AuditEvent(
            id=uuid.uuid4(),
            event_type=candidate.event_type,
            entity_type=EntityType(candidate.entity_type),
            entity_id=candidate.entity_id,
            action=EventAction(candidate.action),
            status=EventStatus(candidate.status),
            metadata_=candidate.metadata,
            user_agent=candidate.user_agent,
            ip_address=candidate.ip_address,
            occurred_at=candidate.occurred_at,
            created_at=persisted_at,
            updated_at=persisted_at,
        )

        with self._storage_errors("create", event_type=candidate.event_type):
            self._session.add(event)
            self._session.flush()

        self._logger.info(
            "audit_event_recorded",
            extra={
                "audit_event_id": str(event.id),
                "event_type": event.event_type,
                "entity_type": event.entity_type.value,
                "entity_id": event.entity_id,
                "action": event.action.value,
                "status": event.status.value,
            },
        )
        return event

    def find_by_id(self, event_id: uuid.UUID | str) -> AuditEvent:
        # Identifiers that are not UUIDs cannot match any event.
        try:
            parsed = event_id if isinstance(event_id, uuid.UUID) else uuid.UUID(str(event_id))
        except ValueError as exc:
            raise AuditEventNotFoundError(f"Audit event {event_id} not found") from exc

        with self._storage_errors("find_by_id", audit_event_id=str(parsed)):
            record = self._session.scalar(select(AuditEvent).where(AuditEvent.id == parsed))
        if record is None:
            raise AuditEventNotFoundError(f"Audit event {event_id} not found")
        return record

    def scan(
        self,
        filters: AuditEventFilters,
        *,
        order: ScanOrder = ScanOrder.RECENT,
        offset: int = 0,
        limit: int = 25,
    ) -> Tuple[List[AuditEvent], int]:
        """Return one window of matching events plus the total match count."""

        if offset < 0 or limit < 0:
            raise ValueError("offset and limit must be non-negative")

        conditions = filters.conditions()
        count_stmt = select(func.count()).select_from(AuditEvent).where(*conditions)
        page_stmt = (
            select(AuditEvent)
            .where(*conditions)
            .order_by(*_ORDERINGS[order])
            .offset(offset)
            .limit(limit)
        )

        with self._storage_errors("scan"):
            total_count = int(self._session.scalar(count_stmt) or 0)
            records = list(self._session.scalars(page_stmt))
        return records, total_count

    def ping(self) -> bool:
        try:
            ping_database(self._session)
        except SQLAlchemyError as exc:
            self._session.rollback()
            self._logger.warning("audit_store_ping_failed", extra={"error": str(exc)})
            return False
        return True

    @contextmanager
    def _storage_errors(self, operation: str, **context: Any) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self._logger.exception(
                "audit_event_storage_failure",
                extra={"operation": operation, "error": str(exc), **context},
            )
            raise StorageUnavailableError("Audit event storage is unavailable") from exc
