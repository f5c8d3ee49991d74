"""Lifecycle status shared by every soft-deletable record."""
from __future__ import annotations

from enum import Enum


class LifecycleStatus(str, Enum):
    """
    ACTIVE rows are visible to everyone; INACTIVE rows are soft-deleted and
    only visible (and restorable) for privileged callers.
    """
    ACTIVE = "active"
    INACTIVE = "inactive"

    @classmethod
    def from_flag(cls, is_active: bool) -> "LifecycleStatus":
        return cls.ACTIVE if is_active else cls.INACTIVE

    @property
    def is_active(self) -> bool:
        return self is LifecycleStatus.ACTIVE
