"""Business logic service layer."""

from audit_trail.services.audit_events import AuditEventStore  # noqa: F401
from audit_trail.services.audit_queries import AuditEventQueryService  # noqa: F401
