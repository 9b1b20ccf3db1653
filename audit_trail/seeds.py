"""Sample audit history for local development and demos."""

from __future__ import annotations

import random
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from audit_trail.schemas.audit_event import AuditEventCreate
from audit_trail.services.audit_events import AuditEventFilters, AuditEventStore, utcnow

CLIENT_IDS = ["CLI-001", "CLI-002", "CLI-003", "CLI-004", "CLI-005"]
INVOICE_IDS = ["INV-001", "INV-002", "INV-003", "INV-004", "INV-005"]

_DESKTOP_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64)",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7)",
    "Mozilla/5.0 (iPhone; CPU iPhone OS 16_0 like Mac OS X)",
]


@dataclass
class SeedSummary:
    total: int
    client: int
    invoice: int
    system: int
    success: int
    failed: int


def seed_sample_events(
    store: AuditEventStore,
    *,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> SeedSummary:
    """Write a realistic mix of client, invoice and system events through ``store``."""

    now = now or utcnow()
    rng = rng or random.Random()

    def record(occurred_at: datetime, **fields: Any) -> None:
        store.create(AuditEventCreate(occurred_at=occurred_at, **fields))

    for index, client_id in enumerate(CLIENT_IDS):
        created_at = now - timedelta(days=index + 1)
        record(
            created_at,
            event_type="client.created",
            entity_type="client",
            entity_id=client_id,
            action="create",
            status="success",
            metadata={
                "name": f"Client {index + 1}",
                "email": f"client{index + 1}@example.com",
                "tax_id": f"TAX-{rng.randint(10000, 99999)}",
            },
            user_agent="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
            ip_address=f"192.168.1.{100 + index}",
        )
        for read_index in range(3):
            record(
                created_at + timedelta(hours=read_index + 1),
                event_type="client.read",
                entity_type="client",
                entity_id=client_id,
                action="read",
                status="success",
                metadata={"accessed_fields": ["name", "email", "tax_id"], "purpose": "view_details"},
                user_agent=_DESKTOP_AGENTS[1],
                ip_address=f"192.168.1.{110 + read_index}",
            )
        if index % 2 == 0:
            record(
                now - timedelta(hours=index),
                event_type="client.updated",
                entity_type="client",
                entity_id=client_id,
                action="update",
                status="success",
                metadata={
                    "updated_fields": ["email", "phone"],
                    "previous_email": f"old{index + 1}@example.com",
                    "new_email": f"client{index + 1}@example.com",
                },
                user_agent=_DESKTOP_AGENTS[0],
                ip_address=f"192.168.1.{120 + index}",
            )

    for index, invoice_id in enumerate(INVOICE_IDS):
        created_at = now - timedelta(days=index + 2)
        record(
            created_at,
            event_type="invoice.created",
            entity_type="invoice",
            entity_id=invoice_id,
            action="create",
            status="success",
            metadata={
                "client_id": rng.choice(CLIENT_IDS),
                "amount": round(rng.uniform(100.0, 10000.0), 2),
                "currency": "USD",
                "items_count": rng.randint(1, 10),
            },
            user_agent="PostmanRuntime/7.32.0",
            ip_address=f"192.168.2.{100 + index}",
        )
        for read_index in range(5):
            record(
                created_at + timedelta(hours=read_index + 1),
                event_type="invoice.read",
                entity_type="invoice",
                entity_id=invoice_id,
                action="read",
                status="success",
                metadata={"accessed_by": f"user_{rng.randint(1, 5)}", "purpose": "review"},
                user_agent=_DESKTOP_AGENTS[2],
                ip_address=f"192.168.2.{110 + read_index}",
            )
        if index % 2 == 1:
            record(
                now - timedelta(hours=index),
                event_type="invoice.updated",
                entity_type="invoice",
                entity_id=invoice_id,
                action="update",
                status="success",
                metadata={"updated_fields": ["status"], "previous_status": "draft", "new_status": "sent"},
                user_agent="curl/7.88.0",
                ip_address=f"192.168.2.{120 + index}",
            )
        if index == len(INVOICE_IDS) - 1:
            record(
                now - timedelta(hours=1),
                event_type="invoice.deleted",
                entity_type="invoice",
                entity_id=invoice_id,
                action="delete",
                status="success",
                metadata={"reason": "duplicate", "deleted_by": "admin_user"},
                user_agent="Mozilla/5.0 (X11; Linux x86_64)",
                ip_address="192.168.2.130",
            )

    for index in range(5):
        record(
            now - timedelta(hours=index + 1),
            event_type="error.occurred",
            entity_type="system",
            entity_id=f"SYS-{index + 1}",
            action="error",
            status="failed",
            metadata={
                "error_type": rng.choice(
                    ["ValidationError", "ConnectionError", "TimeoutError", "AuthenticationError"]
                ),
                "error_message": "An error occurred during processing",
                "severity": rng.choice(["low", "medium", "high", "critical"]),
            },
            user_agent="InternalService/1.0",
            ip_address=f"10.0.0.{10 + index}",
        )

    for _ in range(10):
        entity_id = rng.choice(CLIENT_IDS + INVOICE_IDS)
        entity_type = "client" if entity_id.startswith("CLI") else "invoice"
        action = rng.choice(["read", "update"])
        record(
            now - timedelta(minutes=rng.randint(1, 60)),
            event_type=f"{entity_type}.{'read' if action == 'read' else 'updated'}",
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            status="success",
            metadata={"session_id": str(uuid.UUID(int=rng.getrandbits(128), version=4))},
            user_agent=rng.choice(_DESKTOP_AGENTS),
            ip_address=f"192.168.3.{rng.randint(1, 255)}",
        )

    return summarize(store)


def summarize(store: AuditEventStore) -> SeedSummary:
    def count(**filters: str) -> int:
        _, total = store.scan(AuditEventFilters(**filters), limit=0)
        return total

    counts: Dict[str, int] = {
        "total": count(),
        "client": count(entity_type="client"),
        "invoice": count(entity_type="invoice"),
        "system": count(entity_type="system"),
        "success": count(status="success"),
        "failed": count(status="failed"),
    }
    return SeedSummary(**counts)
