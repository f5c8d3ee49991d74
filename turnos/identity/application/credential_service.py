"""
Credential Service
Account registration, login and token issuance.
"""
from __future__ import annotations

from typing import Optional, Protocol

from turnos.identity.domain.entities import AuthResult
from turnos.identity.infrastructure.models import UsuarioModel
from turnos.identity.infrastructure.repositories import IdentityRepository
from turnos.shared.exceptions import (
    ConflictError,
    InvalidCredentialsError,
    InvalidInputError,
    NotFoundError,
)
from turnos.shared.logging import get_logger, log_security_event
from turnos.shared.roles import Role
from turnos.shared.security import PasswordService, TokenService

logger = get_logger(__name__)

DEFAULT_DISPLAY_NAME = "Usuario"
INVALID_CREDENTIALS = "Invalid credentials"


class ActorDirectory(Protocol):
    """Resolves the clinic actor an account is linked to."""

    async def doctor_exists(self, doctor_id: int) -> bool: ...

    async def patient_exists(self, dni: str) -> bool: ...


async def resolve_reference(directory: ActorDirectory, role: Role, reference: Optional[str]) -> Optional[str]:
    """
    Validate and normalize the actor reference for ``role``.

    Doctor accounts need an existing doctor id, patient accounts an existing
    patient DNI. Admin and secretaria accounts carry no reference.

    Raises:
        InvalidInputError: reference missing, malformed or unresolvable
    """
    if not role.requires_reference:
        return None

    reference = (reference or "").strip()
    if not reference:
        raise InvalidInputError(
            f"Role '{role.value}' requires idReferencia",
            details={"field": "idReferencia"},
        )

    if role is Role.DOCTOR:
        try:
            doctor_id = int(reference)
        except ValueError:
            raise InvalidInputError(
                "idReferencia must be a doctor id",
                details={"field": "idReferencia", "value": reference},
            ) from None
        if not await directory.doctor_exists(doctor_id):
            raise InvalidInputError(
                f"Doctor {doctor_id} does not exist",
                details={"field": "idReferencia", "value": reference},
            )
        return str(doctor_id)

    if not await directory.patient_exists(reference):
        raise InvalidInputError(
            f"Patient {reference} does not exist",
            details={"field": "idReferencia", "value": reference},
        )
    return reference


class CredentialService:
    """
    Registers and authenticates identities; issues signed access tokens.

    Collaborators are passed in explicitly:
        identities: identity store
        passwords: argon2 hasher
        tokens: JWT signer/verifier
        directory: lookup of doctors/patients for reference validation
    """

    def __init__(
        self,
        identities: IdentityRepository,
        passwords: PasswordService,
        tokens: TokenService,
        directory: ActorDirectory,
    ) -> None:
        self._identities = identities
        self._passwords = passwords
        self._tokens = tokens
        self._directory = directory
        self._dummy_hash: Optional[str] = None

    def issue_token(self, user: UsuarioModel) -> str:
        return self._tokens.issue(
            subject=user.id,
            email=user.email,
            role=user.rol.value,
            reference=user.id_referencia,
        )

    async def register(
        self,
        email: str,
        password: str,
        rol: Role,
        nombre: Optional[str] = None,
        id_referencia: Optional[str] = None,
    ) -> AuthResult:
        """
        Create an account and return a token for it.

        Raises:
            ConflictError: email already registered
            InvalidInputError: doctor/patient reference missing or unknown
        """
        user = await self.create_identity(email, password, rol, nombre, id_referencia)
        log_security_event("identity_registered", user_id=str(user.id), role=user.rol.value)
        return AuthResult(access_token=self.issue_token(user), user=user)

    async def create_identity(
        self,
        email: str,
        password: str,
        rol: Role,
        nombre: Optional[str] = None,
        id_referencia: Optional[str] = None,
    ) -> UsuarioModel:
        email = email.strip().lower()
        if await self._identities.email_taken(email):
            logger.warning("Registration refused: email already registered")
            raise ConflictError("Email already registered", details={"field": "email"})

        reference = await resolve_reference(self._directory, rol, id_referencia)
        user = UsuarioModel(
            email=email,
            password_hash=self._passwords.hash(password),
            nombre=(nombre or "").strip() or DEFAULT_DISPLAY_NAME,
            rol=rol,
            id_referencia=reference,
            is_active=True,
        )
        return await self._identities.save(user)

    async def login(self, email: str, password: str) -> AuthResult:
        """
        Authenticate with email and password.

        Unknown email, wrong password and inactive account all fail with the
        same InvalidCredentialsError message.
        """
        user = await self._identities.find_by_email(email)
        if user is None:
            # keep timing comparable to a real verification
            self._passwords.verify(password, self._get_dummy_hash())
            log_security_event("login_failed", reason="unknown_email")
            raise InvalidCredentialsError(INVALID_CREDENTIALS)

        if not self._passwords.verify(password, user.password_hash):
            log_security_event("login_failed", user_id=str(user.id), reason="bad_password")
            raise InvalidCredentialsError(INVALID_CREDENTIALS)

        if not user.is_active:
            log_security_event("login_failed", user_id=str(user.id), reason="inactive")
            raise InvalidCredentialsError(INVALID_CREDENTIALS)

        if self._passwords.needs_rehash(user.password_hash):
            user.password_hash = self._passwords.hash(password)
            await self._identities.save(user)

        log_security_event("login_succeeded", user_id=str(user.id), role=user.rol.value)
        return AuthResult(access_token=self.issue_token(user), user=user)

    async def validate(self, identity_id: int) -> UsuarioModel:
        """
        Re-fetch the identity behind a token.

        Raises:
            NotFoundError: missing or deactivated
        """
        user = await self._identities.find_by_id(identity_id, include_inactive=False)
        if user is None:
            raise NotFoundError("Identity not found", details={"id": str(identity_id)})
        return user

    async def profile(self, identity_id: int) -> UsuarioModel:
        return await self.validate(identity_id)

    def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = self._passwords.hash("not-a-real-password")
        return self._dummy_hash
