"""Schemas for audit event writes and query responses."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, field_validator

from audit_trail.models.audit_event import EntityType, EventAction, EventStatus
from audit_trail.models.types import ensure_utc

USER_AGENT_MAX_LENGTH = 512


class AuditEventCreate(BaseModel):
    """Candidate event submitted by a producer.

    Every field is optional at this layer: required fields and closed
    vocabularies are checked by the store so that all violations are reported
    together.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    event_type: Optional[str] = Field(default=None, max_length=128)
    entity_type: Optional[str] = Field(default=None, max_length=64)
    entity_id: Optional[str] = Field(default=None, max_length=128)
    action: Optional[str] = Field(default=None, max_length=64)
    status: Optional[str] = Field(default=None, max_length=64)
    metadata: Optional[Any] = Field(default=None)
    user_agent: Optional[str] = Field(default=None, max_length=USER_AGENT_MAX_LENGTH)
    ip_address: Optional[str] = Field(default=None, max_length=64)
    occurred_at: Optional[datetime] = Field(
        default=None,
        description="When the action happened; defaults to the time of the write.",
    )

    @field_validator("occurred_at")
    @classmethod
    def _ensure_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        return ensure_utc(value)


class AuditEventCreateRequest(BaseModel):
    """Inbound body for ``POST /api/v1/audit_events``."""

    audit_event: AuditEventCreate


class AuditEventResponse(BaseModel):
    """Serialized audit event."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    event_type: str
    entity_type: EntityType
    entity_id: Optional[str]
    action: EventAction
    status: EventStatus
    metadata: Optional[Any] = Field(
        default=None,
        validation_alias=AliasChoices("metadata_", "metadata"),
    )
    user_agent: Optional[str]
    ip_address: Optional[str]
    occurred_at: datetime
    created_at: datetime
    updated_at: datetime

    @field_serializer("id")
    def _serialize_id(self, value: UUID) -> str:
        return str(value)


class PaginationMeta(BaseModel):
    current_page: int
    total_pages: int
    total_count: int
    per_page: int


class AuditEventEnvelope(BaseModel):
    data: AuditEventResponse


class AuditEventListResponse(BaseModel):
    data: List[AuditEventResponse]
    meta: PaginationMeta
