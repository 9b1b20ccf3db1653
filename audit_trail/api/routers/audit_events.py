"""Audit event ingestion and query endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from audit_trail.api.dependencies import get_audit_event_store, get_audit_query_service
from audit_trail.schemas.audit_event import (
    AuditEventCreateRequest,
    AuditEventEnvelope,
    AuditEventListResponse,
    AuditEventResponse,
    PaginationMeta,
    USER_AGENT_MAX_LENGTH,
)
from audit_trail.services.audit_events import AuditEventStore
from audit_trail.services.audit_queries import AuditEventPage, AuditEventQueryService

router = APIRouter()


def _list_response(result: AuditEventPage) -> AuditEventListResponse:
    return AuditEventListResponse(
        data=[AuditEventResponse.model_validate(record, from_attributes=True) for record in result.items],
        meta=PaginationMeta(
            current_page=result.page,
            total_pages=result.total_pages,
            total_count=result.total_count,
            per_page=result.per_page,
        ),
    )


@router.get(
    "",
    response_model=AuditEventListResponse,
)
def list_audit_events(
    entity_id: Optional[str] = Query(default=None, max_length=128),
    entity_type: Optional[str] = Query(default=None, max_length=64),
    event_type: Optional[str] = Query(default=None, max_length=128),
    event_status: Optional[str] = Query(default=None, alias="status", max_length=64),
    start_date: Optional[str] = Query(default=None),
    end_date: Optional[str] = Query(default=None),
    page: Optional[str] = Query(default=None),
    per_page: Optional[str] = Query(default=None),
    service: AuditEventQueryService = Depends(get_audit_query_service),
) -> AuditEventListResponse:
    result = service.search(
        entity_id=entity_id,
        entity_type=entity_type,
        event_type=event_type,
        status=event_status,
        start_date=start_date,
        end_date=end_date,
        page=page,
        per_page=per_page,
    )
    return _list_response(result)


@router.get(
    "/entity/{entity_id}",
    response_model=AuditEventListResponse,
)
def list_entity_audit_events(
    entity_id: str,
    entity_type: Optional[str] = Query(default=None, max_length=64),
    page: Optional[str] = Query(default=None),
    per_page: Optional[str] = Query(default=None),
    service: AuditEventQueryService = Depends(get_audit_query_service),
) -> AuditEventListResponse:
    result = service.for_entity(entity_id, entity_type=entity_type, page=page, per_page=per_page)
    return _list_response(result)


@router.get(
    "/{event_id}",
    response_model=AuditEventEnvelope,
)
def get_audit_event(
    event_id: str,
    store: AuditEventStore = Depends(get_audit_event_store),
) -> AuditEventEnvelope:
    record = store.find_by_id(event_id)
    return AuditEventEnvelope(data=AuditEventResponse.model_validate(record, from_attributes=True))


@router.post(
    "",
    response_model=AuditEventEnvelope,
    status_code=status.HTTP_201_CREATED,
)
def create_audit_event(
    payload: AuditEventCreateRequest,
    request: Request,
    store: AuditEventStore = Depends(get_audit_event_store),
) -> AuditEventEnvelope:
    candidate = payload.audit_event
    # Network context always wins over whatever the body claims.
    candidate.ip_address = request.client.host if request.client else None
    user_agent = request.headers.get("user-agent")
    candidate.user_agent = user_agent[:USER_AGENT_MAX_LENGTH] if user_agent is not None else None
    record = store.create(candidate)
    return AuditEventEnvelope(data=AuditEventResponse.model_validate(record, from_attributes=True))
