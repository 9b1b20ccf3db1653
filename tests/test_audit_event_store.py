from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from audit_trail.models.audit_event import AuditEvent, EntityType, EventAction, EventStatus
from audit_trail.schemas.audit_event import AuditEventCreate
from audit_trail.services.audit_events import (
    AuditEventFilters,
    AuditEventNotFoundError,
    AuditEventStore,
    AuditEventValidationError,
    ScanOrder,
    StorageUnavailableError,
    normalize_candidate,
    validate_candidate,
)

BASE_TIME = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _count(session) -> int:
    return session.scalar(select(func.count()).select_from(AuditEvent))


def test_create_populates_identifier_and_timestamps(store, build_candidate) -> None:
    event = store.create(build_candidate())

    assert isinstance(event.id, uuid.UUID)
    assert event.entity_type is EntityType.CLIENT
    assert event.action is EventAction.CREATE
    assert event.status is EventStatus.SUCCESS
    assert event.created_at is not None
    assert event.updated_at == event.created_at
    assert event.metadata_ == {"amount": 1000.5, "notes": "Test event"}


def test_create_defaults_occurred_at_to_now(store, build_candidate) -> None:
    before = datetime.now(timezone.utc)
    event = store.create(build_candidate(occurred_at=None))

    assert event.occurred_at is not None
    assert abs(event.occurred_at - before) < timedelta(seconds=2)


def test_create_keeps_supplied_occurred_at(session, build_candidate) -> None:
    supplied = datetime(2023, 1, 15, 8, 30, 15, 123456, tzinfo=timezone.utc)
    created = AuditEventStore(session).create(build_candidate(occurred_at=supplied))
    session.commit()
    session.expire_all()

    reloaded = AuditEventStore(session).find_by_id(created.id)
    assert reloaded.occurred_at == supplied


def test_create_converts_offset_timestamps_to_utc(store, build_candidate) -> None:
    event = store.create(build_candidate(occurred_at="2024-03-10T10:00:00+02:00"))

    assert event.occurred_at == datetime(2024, 3, 10, 8, 0, tzinfo=timezone.utc)


def test_normalize_candidate_uses_injected_clock() -> None:
    fixed = datetime(2020, 2, 2, 2, 2, tzinfo=timezone.utc)
    candidate = AuditEventCreate(event_type="system.tick", entity_type="system", action="read", status="success")

    normalize_candidate(candidate, clock=lambda: fixed)

    assert candidate.occurred_at == fixed


def test_normalize_candidate_never_overwrites_supplied_value() -> None:
    candidate = AuditEventCreate(occurred_at=BASE_TIME)

    normalize_candidate(candidate, clock=lambda: BASE_TIME + timedelta(days=1))

    assert candidate.occurred_at == BASE_TIME


def test_store_uses_clock_for_persistence_timestamps(session, build_candidate) -> None:
    fixed = datetime(2025, 1, 1, tzinfo=timezone.utc)
    event = AuditEventStore(session, clock=lambda: fixed).create(build_candidate(occurred_at=None))

    assert event.occurred_at == fixed
    assert event.created_at == fixed
    assert event.updated_at == fixed


@pytest.mark.parametrize(
    ("field", "message"),
    [
        ("event_type", "Event type can't be blank"),
        ("entity_type", "Entity type can't be blank"),
        ("action", "Action can't be blank"),
        ("status", "Status can't be blank"),
    ],
)
def test_missing_required_field_is_rejected(session, store, build_candidate, field, message) -> None:
    with pytest.raises(AuditEventValidationError) as excinfo:
        store.create(build_candidate(**{field: None}))

    assert excinfo.value.fields == [field]
    assert excinfo.value.details == [message]
    assert _count(session) == 0


def test_blank_strings_count_as_missing(store, build_candidate) -> None:
    with pytest.raises(AuditEventValidationError) as excinfo:
        store.create(build_candidate(event_type="   "))

    assert excinfo.value.details == ["Event type can't be blank"]


def test_every_violation_is_reported_together(store) -> None:
    with pytest.raises(AuditEventValidationError) as excinfo:
        store.create(AuditEventCreate(event_type="test.event"))

    assert excinfo.value.fields == ["entity_type", "action", "status"]
    assert excinfo.value.message == "Failed to create audit event"


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("entity_type", "invalid"),
        ("entity_type", "CLIENT"),
        ("action", "invalid"),
        ("action", "archive"),
        ("status", "invalid"),
        ("status", "pending"),
    ],
)
def test_values_outside_closed_vocabulary_are_rejected(session, store, build_candidate, field, value) -> None:
    with pytest.raises(AuditEventValidationError) as excinfo:
        store.create(build_candidate(**{field: value}))

    assert excinfo.value.fields == [field]
    assert excinfo.value.details[0].endswith("is not included in the list")
    assert _count(session) == 0


@pytest.mark.parametrize("entity_type", ["client", "invoice", "system"])
@pytest.mark.parametrize("action", ["create", "read", "update", "delete", "error"])
def test_every_vocabulary_member_is_accepted(build_candidate, entity_type, action) -> None:
    candidate = build_candidate(entity_type=entity_type, action=action, status="failed")

    assert validate_candidate(candidate) == []


def test_metadata_is_stored_opaquely(session, build_candidate) -> None:
    metadata = [{"nested": {"deep": [1, 2, None]}}, "scalar", 3.5]
    created = AuditEventStore(session).create(build_candidate(metadata=metadata))
    session.commit()
    session.expire_all()

    assert AuditEventStore(session).find_by_id(str(created.id)).metadata_ == metadata


def test_find_by_id_accepts_string_identifier(store, build_candidate) -> None:
    created = store.create(build_candidate())

    assert store.find_by_id(str(created.id)) is created


def test_find_by_id_unknown_identifier_raises_not_found(store, build_candidate) -> None:
    store.create(build_candidate())

    with pytest.raises(AuditEventNotFoundError):
        store.find_by_id(uuid.uuid4())


def test_find_by_id_malformed_identifier_raises_not_found(store) -> None:
    with pytest.raises(AuditEventNotFoundError):
        store.find_by_id("not-a-uuid")


def test_scan_orders_by_recency(store, build_candidate) -> None:
    for offset in (3, 1, 5, 2, 4):
        store.create(build_candidate(occurred_at=BASE_TIME + timedelta(hours=offset)))

    records, total = store.scan(AuditEventFilters(), limit=10)

    occurred = [record.occurred_at for record in records]
    assert total == 5
    assert occurred == sorted(occurred, reverse=True)


def test_scan_breaks_ties_by_insertion_order(store, build_candidate) -> None:
    first = store.create(build_candidate(event_type="tie.first"))
    second = store.create(build_candidate(event_type="tie.second"))
    third = store.create(build_candidate(event_type="tie.third"))

    recent, _ = store.scan(AuditEventFilters(), limit=10)
    oldest, _ = store.scan(AuditEventFilters(), order=ScanOrder.OLDEST, limit=10)

    assert [record.id for record in recent] == [third.id, second.id, first.id]
    assert [record.id for record in oldest] == [first.id, second.id, third.id]


def test_scan_total_count_ignores_window(create_events, store) -> None:
    create_events(12)

    records, total = store.scan(AuditEventFilters(), offset=10, limit=5)

    assert total == 12
    assert len(records) == 2


def test_scan_empty_result_is_not_an_error(store) -> None:
    records, total = store.scan(AuditEventFilters(entity_id="nobody"))

    assert records == []
    assert total == 0


def test_scan_single_date_bound_is_ignored(create_events, store) -> None:
    create_events(3)

    _, total = store.scan(AuditEventFilters(occurred_from=BASE_TIME + timedelta(days=1)))

    assert total == 3


def test_scan_rejects_negative_window(store) -> None:
    with pytest.raises(ValueError):
        store.scan(AuditEventFilters(), offset=-1)


def test_store_exposes_no_mutation_operations(store) -> None:
    for name in ("update", "delete", "save", "remove"):
        assert not hasattr(store, name)


def test_storage_failure_is_logged_and_wrapped(session, build_candidate, monkeypatch, caplog) -> None:
    def broken_flush(*args, **kwargs):
        raise OperationalError("INSERT INTO audit_events", {}, Exception("database is locked"))

    monkeypatch.setattr(session, "flush", broken_flush)

    with pytest.raises(StorageUnavailableError) as excinfo:
        AuditEventStore(session).create(build_candidate())

    assert "database is locked" not in str(excinfo.value)
    assert any(record.getMessage() == "audit_event_storage_failure" for record in caplog.records)
    session.rollback()


def test_ping_reports_reachability(session, monkeypatch) -> None:
    store = AuditEventStore(session)
    assert store.ping() is True

    def broken_execute(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    monkeypatch.setattr(session, "execute", broken_execute)
    assert store.ping() is False
