"""Account administration for admins (/usuarios)."""
from __future__ import annotations

from typing import Any, Dict, Optional

from turnos.identity.application.credential_service import (
    DEFAULT_DISPLAY_NAME,
    ActorDirectory,
    CredentialService,
    resolve_reference,
)
from turnos.identity.infrastructure.models import UsuarioModel
from turnos.identity.infrastructure.repositories import IdentityRepository
from turnos.shared.application.crud import SoftDeleteService
from turnos.shared.exceptions import ConflictError
from turnos.shared.logging import log_security_event
from turnos.shared.roles import Role
from turnos.shared.security import PasswordService


class UserService(SoftDeleteService[UsuarioModel]):
    entity_label = "User"

    def __init__(
        self,
        identities: IdentityRepository,
        credentials: CredentialService,
        passwords: PasswordService,
        directory: ActorDirectory,
    ) -> None:
        super().__init__(identities)
        self._identities = identities
        self._credentials = credentials
        self._passwords = passwords
        self._directory = directory

    async def create(
        self,
        email: str,
        password: str,
        rol: Role,
        nombre: Optional[str] = None,
        id_referencia: Optional[str] = None,
    ) -> UsuarioModel:
        """Same rules as registration, without issuing a token."""
        user = await self._credentials.create_identity(email, password, rol, nombre, id_referencia)
        log_security_event("identity_created", user_id=str(user.id), role=user.rol.value)
        return user

    async def update_user(self, user_id: int, fields: Dict[str, Any]) -> UsuarioModel:
        """
        Partial update. Role and reference are re-validated together; a new
        password is re-hashed; email must stay unique.
        """
        user = await self.get(user_id, include_inactive=True)
        changes: Dict[str, Any] = {}

        if "email" in fields and fields["email"] is not None:
            email = fields["email"].strip().lower()
            if await self._identities.email_taken(email, exclude_id=user.id):
                raise ConflictError("Email already registered", details={"field": "email"})
            changes["email"] = email

        if "nombre" in fields:
            changes["nombre"] = (fields["nombre"] or "").strip() or DEFAULT_DISPLAY_NAME

        if "rol" in fields or "id_referencia" in fields:
            rol = fields.get("rol") or user.rol
            reference = fields["id_referencia"] if "id_referencia" in fields else user.id_referencia
            changes["rol"] = rol
            changes["id_referencia"] = await resolve_reference(self._directory, rol, reference)

        if fields.get("password"):
            changes["password_hash"] = self._passwords.hash(fields["password"])

        self._apply(user, changes)
        saved = await self.repository.save(user)
        if "rol" in changes or "password_hash" in changes:
            log_security_event("identity_updated", user_id=str(user.id), fields=sorted(changes))
        return saved
