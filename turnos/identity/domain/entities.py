from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from turnos.shared.roles import STAFF_ROLES, Role


class TokenClaims(BaseModel):
    """Decoded access-token payload: who is calling and as which actor."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sub: str
    email: str
    rol: Role
    id_referencia: Optional[str] = Field(default=None, alias="idReferencia")

    @field_validator("sub", mode="before")
    @classmethod
    def numeric_subject(cls, value: Any) -> str:
        value = str(value)
        if not value.isdigit():
            raise ValueError("sub must be an identity id")
        return value

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "TokenClaims":
        return cls.model_validate(dict(payload))

    @property
    def identity_id(self) -> int:
        return int(self.sub)

    @property
    def is_admin(self) -> bool:
        return self.rol is Role.ADMIN

    @property
    def is_staff(self) -> bool:
        return self.rol in STAFF_ROLES

    @property
    def doctor_id(self) -> Optional[int]:
        if self.rol is not Role.DOCTOR or self.id_referencia is None:
            return None
        return int(self.id_referencia)

    @property
    def patient_dni(self) -> Optional[str]:
        return self.id_referencia if self.rol is Role.PACIENTE else None


class AuthResult(BaseModel):
    """Returned by register and login: signed token plus the account (no hash)."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    access_token: str
    token_type: str = "bearer"
    user: Any
