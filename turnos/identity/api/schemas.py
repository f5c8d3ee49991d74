"""
Identity API Schemas
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from turnos.shared.http.schemas import ApiModel, ApiRequest
from turnos.shared.roles import Role


def _role(value):
    if isinstance(value, Role) or value is None:
        return value
    return Role.from_string(value)


class RegisterRequest(ApiRequest):
    """Registration / admin account creation."""

    email: EmailStr = Field(..., description="Login email")
    password: str = Field(..., min_length=6, description="At least 6 characters")
    nombre: Optional[str] = Field(None, max_length=100, description="Display name (default 'Usuario')")
    rol: Role = Field(..., description="admin | doctor | secretaria | paciente")
    id_referencia: Optional[str] = Field(
        None, max_length=20, description="Doctor id for doctor accounts, DNI for patient accounts"
    )

    normalize_role = field_validator("rol", mode="before")(_role)


class LoginRequest(ApiRequest):
    """Login request schema"""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")


class UserUpdate(ApiRequest):
    nullable_fields = frozenset({"id_referencia"})

    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    nombre: Optional[str] = Field(None, max_length=100)
    rol: Optional[Role] = None
    id_referencia: Optional[str] = Field(None, max_length=20)

    normalize_role = field_validator("rol", mode="before")(_role)


class UserRead(ApiModel):
    """Account projection; the password hash is never part of it."""

    id: int
    email: str
    nombre: str
    rol: Role
    id_referencia: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AuthResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    user: UserRead
