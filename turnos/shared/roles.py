# turnos/shared/roles.py

from enum import Enum
from typing import FrozenSet, Iterable, Optional


class Role(str, Enum):
    """
    User roles in the system.

    - ADMIN: manages everything, sees soft-deleted records
    - SECRETARIA: front desk; books and manages appointments for anyone
    - DOCTOR: linked to a doctor id; sees and transitions own appointments
    - PACIENTE: linked to a patient DNI; books and cancels own appointments
    """
    ADMIN = "admin"
    DOCTOR = "doctor"
    SECRETARIA = "secretaria"
    PACIENTE = "paciente"

    @classmethod
    def from_string(cls, value: Optional[str]) -> "Role":
        if value is None:
            raise ValueError("Role is required")
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Invalid role: {value}") from None

    @property
    def requires_reference(self) -> bool:
        return self in (Role.DOCTOR, Role.PACIENTE)


# Roles that bypass per-resource ownership checks
STAFF_ROLES: FrozenSet[Role] = frozenset({Role.ADMIN, Role.SECRETARIA})


def roles(*items: Role) -> FrozenSet[Role]:
    """Declare a static role requirement, e.g. ``roles(Role.ADMIN, Role.SECRETARIA)``."""
    return frozenset(items)


def role_names(items: Iterable[Role]) -> list:
    return sorted(r.value for r in items)
