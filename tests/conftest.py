import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("AUDIT_ENVIRONMENT", "test")
os.environ.setdefault("AUDIT_DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("AUDIT_AUTO_CREATE_SCHEMA", "false")

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from audit_trail.core.config import get_settings

get_settings.cache_clear()

from audit_trail.core.database import engine, session_scope  # noqa: E402
from audit_trail.main import create_app  # noqa: E402
from audit_trail.models import Base  # noqa: E402
from audit_trail.schemas.audit_event import AuditEventCreate  # noqa: E402
from audit_trail.services.audit_events import AuditEventStore  # noqa: E402

BASE_TIME = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client() -> TestClient:  # noqa: ANN001
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def session():
    with session_scope() as db_session:
        yield db_session


@pytest.fixture()
def store(session) -> AuditEventStore:
    return AuditEventStore(session)


@pytest.fixture()
def build_candidate():
    """Factory for valid candidates; keyword overrides replace the defaults."""

    def _build(**overrides) -> AuditEventCreate:
        fields = {
            "event_type": "client.created",
            "entity_type": "client",
            "entity_id": "12345",
            "action": "create",
            "status": "success",
            "metadata": {"amount": 1000.5, "notes": "Test event"},
            "user_agent": "Mozilla/5.0",
            "ip_address": "192.168.1.1",
            "occurred_at": BASE_TIME,
        }
        fields.update(overrides)
        return AuditEventCreate(**fields)

    return _build


@pytest.fixture()
def create_events(store, build_candidate):
    """Persist ``count`` events spaced one minute apart, newest last."""

    def _create(count: int, **overrides):
        start = overrides.pop("occurred_at", BASE_TIME)
        return [
            store.create(build_candidate(occurred_at=start + timedelta(minutes=index), **overrides))
            for index in range(count)
        ]

    return _create
