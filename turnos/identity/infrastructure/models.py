# turnos/identity/infrastructure/models.py
"""
Identity store.
- One row per login account
- password_hash never leaves the identity context
- Accounts are soft-deleted only (is_active)
"""
from typing import Optional

from sqlalchemy import Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from turnos.shared.database import Base, SoftDeleteMixin, TimestampMixin
from turnos.shared.roles import Role


class UsuarioModel(Base, TimestampMixin, SoftDeleteMixin):
    """Login account linked (for doctors and patients) to a clinic actor."""
    __tablename__ = "usuario"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    nombre: Mapped[str] = mapped_column(String(100), nullable=False, default="Usuario")
    rol: Mapped[Role] = mapped_column(
        Enum(Role, name="user_role", native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=Role.PACIENTE,
    )
    # doctor id (as text) or patient DNI; NULL for admin/secretaria
    id_referencia: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
