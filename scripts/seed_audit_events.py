#!/usr/bin/env python
"""CLI utility to load sample audit events into the configured database."""

from __future__ import annotations

import argparse
import logging
import random
import sys
from typing import Optional

from audit_trail.core.database import create_schema, session_scope
from audit_trail.seeds import seed_sample_events
from audit_trail.services.audit_events import AuditEventServiceError, AuditEventStore


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the audit trail with sample events.")
    parser.add_argument("--create-schema", action="store_true", help="Create tables before seeding.")
    parser.add_argument("--random-seed", type=int, default=None, help="Seed for reproducible sample data.")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging.")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.create_schema:
        create_schema()

    try:
        with session_scope() as session:
            summary = seed_sample_events(AuditEventStore(session), rng=random.Random(args.random_seed))
    except AuditEventServiceError as exc:
        logging.error("Seeding failed: %s", exc)
        return 1

    logging.info(
        "Audit trail now holds %s events (client=%s invoice=%s system=%s success=%s failed=%s)",
        summary.total,
        summary.client,
        summary.invoice,
        summary.system,
        summary.success,
        summary.failed,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
