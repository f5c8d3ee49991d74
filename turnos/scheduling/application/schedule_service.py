"""Weekly availability templates (horarios disponibles)."""
from __future__ import annotations

from typing import Any, Dict, Union

from turnos.clinic.infrastructure.repositories import ConsultorioRepository, DoctorRepository
from turnos.scheduling.domain.entities import DayOfWeek, check_window
from turnos.scheduling.infrastructure.models import HorarioDisponibleModel
from turnos.scheduling.infrastructure.repositories import ScheduleRepository
from turnos.shared.application.crud import CrudService
from turnos.shared.exceptions import NotFoundError
from turnos.shared.pagination import Page, PageRequest


class ScheduleService(CrudService[HorarioDisponibleModel]):
    entity_label = "Schedule"
    relations = ("doctor", "consultorio")

    def __init__(
        self,
        schedules: ScheduleRepository,
        doctors: DoctorRepository,
        offices: ConsultorioRepository,
    ) -> None:
        super().__init__(schedules)
        self._doctors = doctors
        self._offices = offices

    async def _check_owners(self, fields: Dict[str, Any]) -> None:
        doctor_id = fields.get("id_doctor")
        if doctor_id is not None and await self._doctors.find_by_id(doctor_id, include_inactive=False) is None:
            raise NotFoundError(f"Doctor {doctor_id} not found", details={"field": "idDoctor"})
        office_id = fields.get("id_consultorio")
        if office_id is not None and await self._offices.find_by_id(office_id, include_inactive=False) is None:
            raise NotFoundError(f"Office {office_id} not found", details={"field": "idConsultorio"})

    async def create(self, fields: Dict[str, Any]) -> HorarioDisponibleModel:
        fields = dict(fields)
        fields["dia_semana"] = DayOfWeek.parse(fields["dia_semana"])
        if fields.get("duracion_turno") is None:
            fields["duracion_turno"] = 30
        check_window(fields["hora_inicio"], fields["hora_fin"], fields["duracion_turno"])
        await self._check_owners(fields)
        return await self._store(HorarioDisponibleModel(**fields))

    async def update_schedule(self, schedule_id: int, fields: Dict[str, Any]) -> HorarioDisponibleModel:
        horario = await self.get(schedule_id)
        changes = {k: v for k, v in fields.items() if v is not None}
        if "dia_semana" in changes:
            changes["dia_semana"] = DayOfWeek.parse(changes["dia_semana"])
        check_window(
            changes.get("hora_inicio", horario.hora_inicio),
            changes.get("hora_fin", horario.hora_fin),
            changes.get("duracion_turno", horario.duracion_turno),
        )
        await self._check_owners(changes)
        self._apply(horario, changes)
        return await self._store(horario)

    async def find_by_doctor(self, doctor_id: int, page: PageRequest) -> Page:
        return await self.list(page, criteria=[HorarioDisponibleModel.id_doctor == doctor_id])

    async def find_by_office(self, office_id: int, page: PageRequest) -> Page:
        return await self.list(page, criteria=[HorarioDisponibleModel.id_consultorio == office_id])

    async def find_by_day(self, dia: Union[str, DayOfWeek], page: PageRequest) -> Page:
        day = DayOfWeek.parse(dia)
        return await self.list(page.with_default_sort("horaInicio"), criteria=[HorarioDisponibleModel.dia_semana == day])
