"""
Scheduling API Schemas
Instants and states arrive as plain strings; the service parses them so bad
values surface as invalid_input (400) like every other domain rule.
"""
from __future__ import annotations

from datetime import datetime, time
from typing import Optional

from pydantic import Field

from turnos.clinic.api.schemas import ConsultorioRead, DoctorSummary, PacienteSummary
from turnos.scheduling.domain.entities import AppointmentState, DayOfWeek
from turnos.shared.http.schemas import ApiModel, ApiRequest


class TurnoCreate(ApiRequest):
    dni_paciente: str = Field(..., min_length=1, max_length=9)
    id_doctor: int
    id_consultorio: int
    fecha_hora: str = Field(..., description="ISO-8601 instant, e.g. 2025-03-10T09:30:00Z")
    duracion_minutos: Optional[int] = Field(None, description="Defaults to 30")
    estado: Optional[str] = Field(None, description="pendiente | confirmado | cancelado | completado")


class TurnoUpdate(ApiRequest):
    dni_paciente: Optional[str] = Field(None, min_length=1, max_length=9)
    id_doctor: Optional[int] = None
    id_consultorio: Optional[int] = None
    fecha_hora: Optional[str] = None
    duracion_minutos: Optional[int] = None
    estado: Optional[str] = None


class TurnoRead(ApiModel):
    id: int
    dni_paciente: str
    id_doctor: int
    id_consultorio: int
    fecha_hora: datetime
    fecha_solicitud: datetime
    duracion_minutos: int
    estado: AppointmentState
    is_active: bool
    paciente: Optional[PacienteSummary] = None
    doctor: Optional[DoctorSummary] = None
    consultorio: Optional[ConsultorioRead] = None


class HorarioCreate(ApiRequest):
    id_doctor: int
    id_consultorio: int
    dia_semana: str = Field(..., description="lunes ... domingo")
    hora_inicio: time
    hora_fin: time
    duracion_turno: Optional[int] = Field(None, description="Slot length in minutes (default 30)")


class HorarioUpdate(ApiRequest):
    id_doctor: Optional[int] = None
    id_consultorio: Optional[int] = None
    dia_semana: Optional[str] = None
    hora_inicio: Optional[time] = None
    hora_fin: Optional[time] = None
    duracion_turno: Optional[int] = None


class HorarioRead(ApiModel):
    id: int
    id_doctor: int
    id_consultorio: int
    dia_semana: DayOfWeek
    hora_inicio: time
    hora_fin: time
    duracion_turno: int
    doctor: Optional[DoctorSummary] = None
    consultorio: Optional[ConsultorioRead] = None
