"""Declarative base and mixins."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from audit_trail.models.types import UTCDateTime


class Base(DeclarativeBase):
    """Declarative base class for all ORM models."""


class TimestampMixin:
    """Adds created_at/updated_at columns.

    Rows using this mixin are written once, so there is no ``onupdate`` hook:
    ``updated_at`` is stamped alongside ``created_at`` and never moves.
    """

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=None,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=None,
        server_default=func.now(),
        nullable=False,
    )
