"""
SQLAlchemy Declarative Base
All ORM models inherit from this
"""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, true
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from turnos.shared.domain.lifecycle import LifecycleStatus


def utcnow() -> datetime:
    """Current time as naive UTC (the storage convention for every timestamp)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    type_annotation_map = {
        datetime: DateTime(timezone=False),
    }

    def __repr__(self) -> str:
        pk = [getattr(self, c.key, None) for c in self.__mapper__.primary_key]
        return f"<{self.__class__.__name__}({', '.join(map(str, pk))})>"


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow, nullable=False)


class SoftDeleteMixin:
    """
    Adds the ``is_active`` flag used for soft delete.

    Rows are never removed; ``deactivate()`` hides them from non-privileged
    reads and ``reactivate()`` brings them back.
    """

    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default=true(), nullable=False, index=True
    )

    @property
    def status(self) -> LifecycleStatus:
        return LifecycleStatus.from_flag(self.is_active)

    def deactivate(self) -> None:
        self.is_active = False

    def reactivate(self) -> None:
        self.is_active = True
