"""Router registrations."""

from fastapi import APIRouter

from audit_trail.api.routers import audit_events, health


def get_api_router() -> APIRouter:
    router = APIRouter()
    router.include_router(health.router, tags=["health"])
    router.include_router(audit_events.router, prefix="/api/v1/audit_events", tags=["audit_events"])
    return router
