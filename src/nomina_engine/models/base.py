"""Declarative base and shared column mixins."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models.

    UUID columns map to the portable ``Uuid`` type (native on PostgreSQL,
    CHAR(32) on SQLite) and every datetime is timezone-aware.
    """

    type_annotation_map = {
        UUID: Uuid(as_uuid=True),
        datetime: DateTime(timezone=True),
    }


class TenantMixin:
    """Every payroll table is partitioned by tenant; queries must filter on it."""

    tenant_id: Mapped[UUID] = mapped_column(nullable=False, index=True)


class TimestampMixin:
    """Row bookkeeping timestamps, maintained by the database."""

    created_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
