# turnos/identity/api/routes.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from turnos.dependencies import (
    get_credential_service,
    get_current_claims,
    get_user_service,
    page_params,
    require_roles,
)
from turnos.identity.api.schemas import AuthResponse, LoginRequest, RegisterRequest, UserRead, UserUpdate
from turnos.identity.application.credential_service import CredentialService
from turnos.identity.application.user_service import UserService
from turnos.identity.domain.entities import AuthResult, TokenClaims
from turnos.shared.http.schemas import ERROR_RESPONSES
from turnos.shared.pagination import Page, PageRequest
from turnos.shared.roles import Role

auth_router = APIRouter(prefix="/auth", tags=["Auth"], responses=ERROR_RESPONSES)
users_router = APIRouter(
    prefix="/usuarios",
    tags=["Usuarios"],
    responses=ERROR_RESPONSES,
    dependencies=[Depends(require_roles(Role.ADMIN))],
)


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        access_token=result.access_token,
        token_type=result.token_type,
        user=UserRead.model_validate(result.user),
    )


# ─────────────────────────────── /auth ───────────────────────────────


@auth_router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    credentials: CredentialService = Depends(get_credential_service),
) -> AuthResponse:
    result = await credentials.register(
        email=payload.email,
        password=payload.password,
        rol=payload.rol,
        nombre=payload.nombre,
        id_referencia=payload.id_referencia,
    )
    return _auth_response(result)


@auth_router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    credentials: CredentialService = Depends(get_credential_service),
) -> AuthResponse:
    return _auth_response(await credentials.login(payload.email, payload.password))


@auth_router.get("/me", response_model=UserRead)
async def me(
    claims: TokenClaims = Depends(get_current_claims),
    credentials: CredentialService = Depends(get_credential_service),
) -> UserRead:
    return UserRead.model_validate(await credentials.profile(claims.identity_id))


# ───────────────────────────── /usuarios ─────────────────────────────


@users_router.get("", response_model=Page[UserRead])
async def list_users(
    page: PageRequest = Depends(page_params),
    users: UserService = Depends(get_user_service),
):
    # admin-only router, so inactive accounts are always listed
    result = await users.list(page, include_inactive=True)
    return result.to(UserRead)


@users_router.get("/inactivos", response_model=Page[UserRead])
async def list_inactive_users(
    page: PageRequest = Depends(page_params),
    users: UserService = Depends(get_user_service),
):
    return (await users.list_inactive(page)).to(UserRead)


@users_router.get("/{user_id}", response_model=UserRead)
async def get_user(user_id: int, users: UserService = Depends(get_user_service)):
    return UserRead.model_validate(await users.get(user_id, include_inactive=True))


@users_router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_user(payload: RegisterRequest, users: UserService = Depends(get_user_service)):
    user = await users.create(
        email=payload.email,
        password=payload.password,
        rol=payload.rol,
        nombre=payload.nombre,
        id_referencia=payload.id_referencia,
    )
    return UserRead.model_validate(user)


@users_router.patch("/{user_id}", response_model=UserRead)
async def update_user(user_id: int, payload: UserUpdate, users: UserService = Depends(get_user_service)):
    return UserRead.model_validate(await users.update_user(user_id, payload.changes()))


@users_router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_user(user_id: int, users: UserService = Depends(get_user_service)) -> Response:
    await users.soft_delete(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@users_router.patch("/{user_id}/restaurar", response_model=UserRead)
async def restore_user(user_id: int, users: UserService = Depends(get_user_service)):
    return UserRead.model_validate(await users.restore(user_id))
