from __future__ import annotations

from typing import Optional

from sqlalchemy import func

from turnos.identity.infrastructure.models import UsuarioModel
from turnos.shared.database import SQLAlchemyRepository


class IdentityRepository(SQLAlchemyRepository[UsuarioModel]):
    model_class = UsuarioModel
    conflict_message = "Email already registered"
    sort_fields = {
        "id": UsuarioModel.id,
        "email": UsuarioModel.email,
        "nombre": UsuarioModel.nombre,
        "rol": UsuarioModel.rol,
        "fechaCreacion": UsuarioModel.created_at,
        "createdAt": UsuarioModel.created_at,
    }
    default_sort = "id"
    search_columns = (UsuarioModel.email, UsuarioModel.nombre)

    async def find_by_email(self, email: str) -> Optional[UsuarioModel]:
        return await self.find_one(func.lower(UsuarioModel.email) == email.strip().lower())

    async def email_taken(self, email: str, *, exclude_id: Optional[int] = None) -> bool:
        criteria = [func.lower(UsuarioModel.email) == email.strip().lower()]
        if exclude_id is not None:
            criteria.append(UsuarioModel.id != exclude_id)
        return await self.exists(*criteria)
