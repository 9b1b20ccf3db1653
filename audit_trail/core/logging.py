"""Structured logging for the audit trail service.

Log messages are snake_case event names scoped by subject, for example
``audit_event_recorded``, ``audit_event_rejected``,
``audit_event_storage_failure`` or ``audit_store_ping_failed``. Context goes
in ``extra`` and is emitted under the ``extra`` key. ``audit_event_id`` is
lifted to the top level so a single event can be followed across lines.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from audit_trail.core.config import AppSettings

_PROMOTED_KEYS = ("audit_event_id",)


class JsonFormatter(logging.Formatter):
    """Renders each record as one JSON line tagged with service and environment."""

    _RESERVED_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", None, None).__dict__) | {
        "asctime",
        "message",
        "taskName",
    }

    def __init__(self, service_name: str, environment: str) -> None:
        super().__init__()
        self.service_name = service_name
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
            "service": self.service_name,
            "environment": self.environment,
        }

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in self._RESERVED_ATTRS
        }
        for key in _PROMOTED_KEYS:
            if key in extra:
                log_entry[key] = extra.pop(key)
        if extra:
            log_entry["extra"] = extra

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def configure_logging(settings: AppSettings) -> None:
    """Install one stdout handler on the root logger and fold uvicorn's loggers into it."""

    level = getattr(logging, settings.log_level, logging.INFO)

    handler = logging.StreamHandler(stream=sys.stdout)
    if settings.log_json:
        handler.setFormatter(JsonFormatter(settings.service_name, settings.environment))
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # Statement logging only when sql_echo is on.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.sql_echo else logging.WARNING)

    for logger_name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        logging.getLogger(logger_name).handlers = []
        logging.getLogger(logger_name).propagate = True
