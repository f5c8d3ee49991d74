# turnos/dependencies.py
"""
FastAPI providers. They only assemble: every service receives its
repositories and collaborators through its constructor, built here from the
request-scoped session and the singletons stored on ``app.state``.
"""
from __future__ import annotations

from typing import AsyncGenerator, Callable, Optional

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from turnos.clinic.application.services import (
    ClinicDirectory,
    CoberturaService,
    ConsultorioService,
    DoctorService,
    EspecialidadService,
    ObraSocialService,
    PacienteService,
)
from turnos.clinic.infrastructure.repositories import (
    CoberturaRepository,
    ConsultorioRepository,
    DoctorRepository,
    EspecialidadRepository,
    ObraSocialRepository,
    PacienteRepository,
)
from turnos.config import Settings
from turnos.identity.application.access_control import AccessControl
from turnos.identity.application.credential_service import CredentialService
from turnos.identity.application.user_service import UserService
from turnos.identity.domain.entities import TokenClaims
from turnos.identity.infrastructure.repositories import IdentityRepository
from turnos.scheduling.application.appointment_service import AppointmentService
from turnos.scheduling.application.schedule_service import ScheduleService
from turnos.scheduling.infrastructure.repositories import AppointmentRepository, ScheduleRepository
from turnos.shared.exceptions import NotFoundError, UnauthorizedError
from turnos.shared.logging import bind_context
from turnos.shared.pagination import PageRequest
from turnos.shared.roles import Role, roles
from turnos.shared.security import PasswordService, TokenService

bearer_scheme = HTTPBearer(auto_error=False, description="JWT issued by /auth/login")


# --- App-level singletons ---
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


def get_password_service(request: Request) -> PasswordService:
    return request.app.state.passwords


# --- DB session ---
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """One session per request: commit when the handler succeeds, roll back otherwise."""
    session: AsyncSession = request.app.state.db.session()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


# --- Services ---
def get_clinic_directory(session: AsyncSession = Depends(get_db_session)) -> ClinicDirectory:
    return ClinicDirectory(DoctorRepository(session), PacienteRepository(session))


def get_credential_service(
    session: AsyncSession = Depends(get_db_session),
    passwords: PasswordService = Depends(get_password_service),
    tokens: TokenService = Depends(get_token_service),
    directory: ClinicDirectory = Depends(get_clinic_directory),
) -> CredentialService:
    return CredentialService(IdentityRepository(session), passwords, tokens, directory)


def get_user_service(
    session: AsyncSession = Depends(get_db_session),
    credentials: CredentialService = Depends(get_credential_service),
    passwords: PasswordService = Depends(get_password_service),
    directory: ClinicDirectory = Depends(get_clinic_directory),
) -> UserService:
    return UserService(IdentityRepository(session), credentials, passwords, directory)


def get_appointment_service(
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> AppointmentService:
    return AppointmentService(
        AppointmentRepository(session),
        PacienteRepository(session),
        DoctorRepository(session),
        ConsultorioRepository(session),
        strict_slot_exclusivity=settings.STRICT_SLOT_EXCLUSIVITY,
        strict_transitions=settings.STRICT_STATE_TRANSITIONS,
    )


def get_schedule_service(session: AsyncSession = Depends(get_db_session)) -> ScheduleService:
    return ScheduleService(ScheduleRepository(session), DoctorRepository(session), ConsultorioRepository(session))


def get_doctor_service(session: AsyncSession = Depends(get_db_session)) -> DoctorService:
    return DoctorService(DoctorRepository(session), EspecialidadRepository(session))


def get_paciente_service(session: AsyncSession = Depends(get_db_session)) -> PacienteService:
    return PacienteService(PacienteRepository(session), ObraSocialRepository(session), CoberturaRepository(session))


def get_consultorio_service(session: AsyncSession = Depends(get_db_session)) -> ConsultorioService:
    return ConsultorioService(ConsultorioRepository(session))


def get_especialidad_service(session: AsyncSession = Depends(get_db_session)) -> EspecialidadService:
    return EspecialidadService(EspecialidadRepository(session))


def get_cobertura_service(session: AsyncSession = Depends(get_db_session)) -> CoberturaService:
    return CoberturaService(CoberturaRepository(session))


def get_obra_social_service(session: AsyncSession = Depends(get_db_session)) -> ObraSocialService:
    return ObraSocialService(ObraSocialRepository(session), CoberturaRepository(session))


# --- Current caller & role guard ---
async def get_current_claims(
    request: Request,
    _credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    credential_service: CredentialService = Depends(get_credential_service),
) -> TokenClaims:
    """
    Claims decoded by JwtContextMiddleware, re-checked against the identity
    store so deactivated accounts stop working immediately. Role and actor
    reference come from the stored account, not from the token.
    """
    claims: Optional[TokenClaims] = getattr(request.state, "user_claims", None)
    if claims is None:
        raise UnauthorizedError("Missing or invalid bearer token")
    try:
        user = await credential_service.validate(claims.identity_id)
    except NotFoundError:
        raise UnauthorizedError("Account is inactive or no longer exists") from None
    claims = claims.model_copy(update={"email": user.email, "rol": user.rol, "id_referencia": user.id_referencia})
    bind_context(user_id=claims.sub, role=claims.rol.value)
    return claims


def require_roles(*allowed: Role) -> Callable[..., TokenClaims]:
    """
    Dependency factory for a static role requirement.

    Usage:
        @router.get("", dependencies=[Depends(require_roles(Role.ADMIN))])
        async def handler(claims: TokenClaims = Depends(require_roles(Role.ADMIN, Role.DOCTOR))): ...
    """
    allowed_roles = roles(*allowed)

    def _enforce(claims: TokenClaims = Depends(get_current_claims)) -> TokenClaims:
        return AccessControl.require_role(claims, allowed_roles)

    return _enforce


# --- Query parameters ---
def _to_int(value: Optional[str]) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


def page_params(
    page: Optional[str] = Query(None, description="1-based page number"),
    limit: Optional[str] = Query(None, description="Page size (max 100)"),
    sortBy: Optional[str] = Query(None, description="Sort field"),
    sort: Optional[str] = Query(None, description="Alias of sortBy"),
    sortOrder: Optional[str] = Query(None, description="ASC or DESC"),
    order: Optional[str] = Query(None, description="Alias of sortOrder"),
    filter: Optional[str] = Query(None, description="Case-insensitive substring filter"),
) -> PageRequest:
    """Permissive: invalid values fall back to defaults instead of failing."""
    return PageRequest.build(
        page=_to_int(page),
        limit=_to_int(limit),
        sort=sortBy or sort,
        order=sortOrder or order,
        filter=filter,
    )


# --- JWT parsing middleware helper (used in main.py) ---
def extract_bearer_token(request: Request) -> Optional[str]:
    auth = request.headers.get("Authorization", "")
    if not auth.lower().startswith("bearer "):
        return None
    return auth.split(" ", 1)[1].strip()
