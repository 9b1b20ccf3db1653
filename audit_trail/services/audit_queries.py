"""Query engine composing audit event filters and page windows."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from audit_trail.models.audit_event import AuditEvent
from audit_trail.models.types import ensure_utc
from audit_trail.services.audit_events import (
    AuditEventFilters,
    AuditEventStore,
    AuditEventValidationError,
    ScanOrder,
)

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 25
MAX_PER_PAGE = 100

_DATETIME_ADAPTER = TypeAdapter(datetime)
_BASIC_DATE = re.compile(r"^\d{8}$")
_NUMERIC = re.compile(r"^[+-]?\d+(\.\d*)?$")

# Largest row offset a 64-bit SQL integer can carry.
MAX_OFFSET = 2**63 - 1


@dataclass(frozen=True)
class PageRequest:
    page: int
    per_page: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


@dataclass
class AuditEventPage:
    """One window of query results plus the pagination metadata."""

    items: List[AuditEvent]
    page: int
    per_page: int
    total_count: int
    total_pages: int


def _coerce_int(value: int | str | None, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def parse_page_request(
    page: int | str | None,
    per_page: int | str | None,
    *,
    default_per_page: int = DEFAULT_PER_PAGE,
    max_per_page: int = MAX_PER_PAGE,
) -> PageRequest:
    """Coerce raw page inputs; missing or non-numeric values fall back to defaults.

    ``page`` is clamped to at least 1 and ``per_page`` to ``[1, max_per_page]``.
    """

    page_number = max(_coerce_int(page, DEFAULT_PAGE), 1)
    size = _coerce_int(per_page, default_per_page)
    size = min(max(size, 1), max_per_page)
    return PageRequest(page=page_number, per_page=size)


def total_pages_for(total_count: int, per_page: int) -> int:
    if total_count <= 0:
        return 0
    return -(-total_count // per_page)


def parse_timestamp(value: str, field: str) -> datetime:
    """Parse an ISO 8601 style date or date/time string into a UTC datetime.

    ``YYYYMMDD`` is read as a basic-format calendar date. Any other bare
    number is rejected rather than taken as epoch seconds.
    """

    text = value.strip()
    error = AuditEventValidationError(
        "Invalid query parameters",
        details=[f"{field} is not a valid date/time: {value!r}"],
        fields=[field],
    )
    if _BASIC_DATE.match(text):
        try:
            return datetime.strptime(text, "%Y%m%d").replace(tzinfo=timezone.utc)
        except ValueError as exc:
            raise error from exc
    if _NUMERIC.match(text):
        raise error

    try:
        parsed = _DATETIME_ADAPTER.validate_python(text)
    except PydanticValidationError as exc:
        raise error from exc
    return ensure_utc(parsed)


def _present(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class AuditEventQueryService:
    """Translates caller filters into a store scan and computes page metadata."""

    def __init__(
        self,
        store: AuditEventStore,
        *,
        default_per_page: int = DEFAULT_PER_PAGE,
        max_per_page: int = MAX_PER_PAGE,
    ) -> None:
        self._store = store
        self._default_per_page = default_per_page
        self._max_per_page = max_per_page
        self._logger = logging.getLogger("audit_trail.services.audit_queries")

    def search(
        self,
        *,
        entity_id: Optional[str] = None,
        entity_type: Optional[str] = None,
        event_type: Optional[str] = None,
        status: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        page: int | str | None = None,
        per_page: int | str | None = None,
    ) -> AuditEventPage:
        occurred_from = occurred_to = None
        start_date, end_date = _present(start_date), _present(end_date)
        if start_date and end_date:
            occurred_from = parse_timestamp(start_date, "start_date")
            occurred_to = parse_timestamp(end_date, "end_date")

        filters = AuditEventFilters(
            entity_id=_present(entity_id),
            entity_type=_present(entity_type),
            event_type=_present(event_type),
            status=_present(status),
            occurred_from=occurred_from,
            occurred_to=occurred_to,
        )
        return self._run(filters, page, per_page)

    def for_entity(
        self,
        entity_id: str,
        *,
        entity_type: Optional[str] = None,
        page: int | str | None = None,
        per_page: int | str | None = None,
    ) -> AuditEventPage:
        """Events recorded against one entity, optionally narrowed by entity type."""

        filters = AuditEventFilters(entity_id=entity_id, entity_type=_present(entity_type))
        return self._run(filters, page, per_page)

    def _run(
        self,
        filters: AuditEventFilters,
        page: int | str | None,
        per_page: int | str | None,
    ) -> AuditEventPage:
        page_request = parse_page_request(
            page,
            per_page,
            default_per_page=self._default_per_page,
            max_per_page=self._max_per_page,
        )
        if page_request.offset > MAX_OFFSET:
            # No table holds that many rows; count only.
            _, total_count = self._store.scan(filters, limit=0)
            items = []
        else:
            items, total_count = self._store.scan(
                filters,
                order=ScanOrder.RECENT,
                offset=page_request.offset,
                limit=page_request.per_page,
            )
        self._logger.debug(
            "audit_event_query",
            extra={
                "filters": {key: value for key, value in vars(filters).items() if value is not None},
                "page": page_request.page,
                "per_page": page_request.per_page,
                "total_count": total_count,
            },
        )
        return AuditEventPage(
            items=items,
            page=page_request.page,
            per_page=page_request.per_page,
            total_count=total_count,
            total_pages=total_pages_for(total_count, page_request.per_page),
        )
