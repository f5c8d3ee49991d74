from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Select

from turnos.clinic.infrastructure.models import ConsultorioModel, DoctorModel, PacienteModel
from turnos.scheduling.domain.entities import AppointmentState
from turnos.scheduling.infrastructure.models import HorarioDisponibleModel, TurnoModel
from turnos.shared.database import SQLAlchemyRepository
from turnos.shared.exceptions import SlotTakenError


class AppointmentRepository(SQLAlchemyRepository[TurnoModel]):
    model_class = TurnoModel
    conflict_message = "There is already a confirmed appointment in that slot"
    conflict_error = SlotTakenError
    sort_fields = {
        "id": TurnoModel.id,
        "fechaHora": TurnoModel.fecha_hora,
        "fecha_hora": TurnoModel.fecha_hora,
        "fechaSolicitud": TurnoModel.fecha_solicitud,
        "estado": TurnoModel.estado,
        "duracionMinutos": TurnoModel.duracion_minutos,
    }
    default_sort = "fechaHora"
    search_columns = (PacienteModel.nombre, DoctorModel.nombre, ConsultorioModel.nombre)

    def _search_joins(self, stmt: Select) -> Select:
        return (
            stmt.outerjoin(PacienteModel, TurnoModel.dni_paciente == PacienteModel.dni)
            .outerjoin(DoctorModel, TurnoModel.id_doctor == DoctorModel.id)
            .outerjoin(ConsultorioModel, TurnoModel.id_consultorio == ConsultorioModel.id)
        )

    async def find_confirmed_at(self, doctor_id: int, office_id: int, instant: datetime) -> Optional[TurnoModel]:
        """The confirmed appointment holding (doctor, office, instant), if any."""
        return await self.find_one(
            TurnoModel.id_doctor == doctor_id,
            TurnoModel.id_consultorio == office_id,
            TurnoModel.fecha_hora == instant,
            TurnoModel.estado == AppointmentState.CONFIRMADO,
        )

    async def find_open_at(self, doctor_id: int, office_id: int, instant: datetime) -> Optional[TurnoModel]:
        """Any active pending or confirmed appointment at (doctor, office, instant)."""
        return await self.find_one(
            TurnoModel.id_doctor == doctor_id,
            TurnoModel.id_consultorio == office_id,
            TurnoModel.fecha_hora == instant,
            TurnoModel.estado.in_([s for s in AppointmentState if s.is_open]),
            TurnoModel.is_active.is_(True),
        )


class ScheduleRepository(SQLAlchemyRepository[HorarioDisponibleModel]):
    model_class = HorarioDisponibleModel
    sort_fields = {
        "id": HorarioDisponibleModel.id,
        "diaSemana": HorarioDisponibleModel.dia_semana,
        "horaInicio": HorarioDisponibleModel.hora_inicio,
        "horaFin": HorarioDisponibleModel.hora_fin,
    }
    default_sort = "id"
    search_columns = (DoctorModel.nombre, DoctorModel.apellido, ConsultorioModel.nombre)

    def _search_joins(self, stmt: Select) -> Select:
        return stmt.outerjoin(DoctorModel, HorarioDisponibleModel.id_doctor == DoctorModel.id).outerjoin(
            ConsultorioModel, HorarioDisponibleModel.id_consultorio == ConsultorioModel.id
        )
