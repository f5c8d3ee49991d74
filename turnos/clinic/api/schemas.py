"""
Clinic API Schemas
Doctors, patients, offices and the insurer/coverage/specialty lookups.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import EmailStr, Field

from turnos.shared.http.schemas import ApiModel, ApiRequest


# ─────────────────────────────── Lookups ───────────────────────────────


class EspecialidadRead(ApiModel):
    id: int
    nombre: str


class EspecialidadWrite(ApiRequest):
    nombre: str = Field(..., min_length=1, max_length=100)


class CoberturaRead(ApiModel):
    id: int
    nombre: str


class CoberturaWrite(ApiRequest):
    nombre: str = Field(..., min_length=1, max_length=100)


class ObraSocialSummary(ApiModel):
    """Insurer as embedded in patients."""

    codigo: str
    nombre: str


class ObraSocialRead(ObraSocialSummary):
    telefono: Optional[str] = None
    email: Optional[str] = None
    id_cobertura: Optional[int] = None
    is_active: bool
    cobertura: Optional[CoberturaRead] = None


class ObraSocialCreate(ApiRequest):
    codigo: str = Field(..., min_length=1, max_length=6)
    nombre: str = Field(..., min_length=1, max_length=100)
    telefono: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    id_cobertura: Optional[int] = None


class ObraSocialUpdate(ApiRequest):
    nullable_fields = frozenset({"telefono", "email", "id_cobertura"})

    nombre: Optional[str] = Field(None, min_length=1, max_length=100)
    telefono: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    id_cobertura: Optional[int] = None


# ─────────────────────────────── Doctors ───────────────────────────────


class DoctorSummary(ApiModel):
    """Doctor as embedded in appointments and schedules."""

    id: int
    nombre: str
    apellido: str
    matricula: str


class DoctorRead(DoctorSummary):
    telefono: Optional[str] = None
    email: str
    is_active: bool
    fecha_registro: datetime
    especialidades: List[EspecialidadRead] = Field(default_factory=list)


class DoctorCreate(ApiRequest):
    nombre: str = Field(..., min_length=1, max_length=50)
    apellido: str = Field(..., min_length=1, max_length=50)
    telefono: Optional[str] = Field(None, max_length=15)
    email: EmailStr
    matricula: str = Field(..., min_length=1, max_length=20)
    especialidades: Optional[List[int]] = Field(None, description="Specialty ids")


class DoctorUpdate(ApiRequest):
    nullable_fields = frozenset({"telefono"})

    nombre: Optional[str] = Field(None, min_length=1, max_length=50)
    apellido: Optional[str] = Field(None, min_length=1, max_length=50)
    telefono: Optional[str] = Field(None, max_length=15)
    email: Optional[EmailStr] = None
    matricula: Optional[str] = Field(None, min_length=1, max_length=20)
    especialidades: Optional[List[int]] = Field(None, description="Replaces the assigned specialties")


# ─────────────────────────────── Patients ──────────────────────────────


class PacienteSummary(ApiModel):
    """Patient as embedded in appointments."""

    dni: str
    nombre: str
    apellido: str


class PacienteRead(PacienteSummary):
    fecha_nacimiento: date
    direccion: Optional[str] = None
    telefono: str
    email: Optional[str] = None
    is_active: bool
    fecha_registro: datetime
    codigo_obra_social: Optional[str] = None
    numero_afiliado: Optional[str] = None
    id_cobertura: int
    obra_social: Optional[ObraSocialSummary] = None
    cobertura: Optional[CoberturaRead] = None


class PacienteCreate(ApiRequest):
    dni: str = Field(..., min_length=1, max_length=9, description="National id, the patient key")
    nombre: str = Field(..., min_length=1, max_length=50)
    apellido: str = Field(..., min_length=1, max_length=50)
    fecha_nacimiento: date
    direccion: Optional[str] = Field(None, max_length=200)
    telefono: str = Field(..., min_length=1, max_length=15)
    email: Optional[EmailStr] = None
    codigo_obra_social: Optional[str] = Field(None, max_length=6)
    numero_afiliado: Optional[str] = Field(None, max_length=50)
    id_cobertura: Optional[int] = Field(None, description="Defaults to coverage plan 1")


class PacienteUpdate(ApiRequest):
    nullable_fields = frozenset({"direccion", "email", "codigo_obra_social", "numero_afiliado"})

    nombre: Optional[str] = Field(None, min_length=1, max_length=50)
    apellido: Optional[str] = Field(None, min_length=1, max_length=50)
    fecha_nacimiento: Optional[date] = None
    direccion: Optional[str] = Field(None, max_length=200)
    telefono: Optional[str] = Field(None, min_length=1, max_length=15)
    email: Optional[EmailStr] = None
    codigo_obra_social: Optional[str] = Field(None, max_length=6)
    numero_afiliado: Optional[str] = Field(None, max_length=50)
    id_cobertura: Optional[int] = None


# ─────────────────────────────── Offices ───────────────────────────────


class ConsultorioRead(ApiModel):
    id: int
    nombre: str
    is_active: bool


class ConsultorioWrite(ApiRequest):
    nombre: str = Field(..., min_length=1, max_length=100)
