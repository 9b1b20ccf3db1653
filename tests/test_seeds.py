from __future__ import annotations

import random

from audit_trail.seeds import CLIENT_IDS, seed_sample_events
from audit_trail.services.audit_events import AuditEventFilters
from audit_trail.services.audit_queries import AuditEventQueryService


def test_seed_sample_events_builds_mixed_history(store) -> None:
    summary = seed_sample_events(store, rng=random.Random(7))

    assert summary.total == 71
    assert summary.system == 5
    assert summary.failed == 5
    assert summary.success == summary.total - summary.failed
    assert summary.client + summary.invoice + summary.system == summary.total
    assert summary.client >= 23
    assert summary.invoice >= 33


def test_seeded_history_is_queryable_per_entity(store) -> None:
    seed_sample_events(store, rng=random.Random(7))
    queries = AuditEventQueryService(store)

    result = queries.for_entity(CLIENT_IDS[0], entity_type="client", per_page="100")

    assert result.total_count >= 5
    assert result.items[0].occurred_at >= result.items[-1].occurred_at
    _, deletions = store.scan(AuditEventFilters(event_type="invoice.deleted"), limit=0)
    assert deletions == 1


def test_seed_script_entrypoint() -> None:
    from scripts.seed_audit_events import main

    assert main(["--random-seed", "3"]) == 0
