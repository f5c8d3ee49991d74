"""
Appointment Lifecycle Service

Booking, state transitions, rescheduling, soft delete and the query
operations over appointments (turnos).

Rules:
- A new booking fails with a conflict when a CONFIRMADO appointment already
  holds the same (doctor, office, instant). Pending bookings do not block
  unless strict slot exclusivity is enabled.
- confirm/cancel/complete overwrite the state; a transition table is only
  enforced when strict transitions are enabled.
- Reads hide soft-deleted appointments unless include_inactive is set
  (admin callers).
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Union

from turnos.clinic.infrastructure.repositories import (
    ConsultorioRepository,
    DoctorRepository,
    PacienteRepository,
)
from turnos.scheduling.domain.entities import (
    AppointmentState,
    check_transition,
    day_bounds,
    normalize_instant,
)
from turnos.scheduling.infrastructure.models import TurnoModel
from turnos.scheduling.infrastructure.repositories import AppointmentRepository
from turnos.shared.application.crud import SoftDeleteService
from turnos.shared.exceptions import InvalidInputError, NotFoundError, SlotTakenError
from turnos.shared.logging import get_logger
from turnos.shared.pagination import Page, PageRequest

logger = get_logger(__name__)

DEFAULT_DURATION_MINUTES = 30


class AppointmentService(SoftDeleteService[TurnoModel]):
    entity_label = "Appointment"
    relations = ("paciente", "doctor", "consultorio")

    def __init__(
        self,
        appointments: AppointmentRepository,
        patients: PacienteRepository,
        doctors: DoctorRepository,
        offices: ConsultorioRepository,
        *,
        strict_slot_exclusivity: bool = False,
        strict_transitions: bool = False,
    ) -> None:
        super().__init__(appointments)
        self.appointments = appointments
        self._patients = patients
        self._doctors = doctors
        self._offices = offices
        self.strict_slot_exclusivity = strict_slot_exclusivity
        self.strict_transitions = strict_transitions

    # ------------------------------------------------------------------
    # Booking
    # ------------------------------------------------------------------
    async def create(
        self,
        dni_paciente: str,
        id_doctor: int,
        id_consultorio: int,
        fecha_hora: Union[str, datetime],
        duracion_minutos: Optional[int] = None,
        estado: Optional[Union[str, AppointmentState]] = None,
    ) -> TurnoModel:
        """
        Book an appointment.

        Args:
            dni_paciente: patient DNI
            id_doctor: doctor id
            id_consultorio: office id
            fecha_hora: slot instant (aware values are converted to UTC)
            duracion_minutos: defaults to 30
            estado: initial state, defaults to pendiente

        Returns:
            The stored appointment with paciente/doctor/consultorio loaded

        Raises:
            InvalidInputError: bad instant, state or duration
            NotFoundError: unknown or inactive patient, doctor or office
            SlotTakenError: slot already confirmed (or already booked in strict mode)
        """
        instant = normalize_instant(fecha_hora)
        state = AppointmentState.parse(estado) if estado is not None else AppointmentState.PENDIENTE
        duration = self._duration(duracion_minutos)

        await self._check_participants(dni_paciente, id_doctor, id_consultorio)
        await self._check_slot(id_doctor, id_consultorio, instant)

        turno = TurnoModel(
            dni_paciente=dni_paciente,
            id_doctor=id_doctor,
            id_consultorio=id_consultorio,
            fecha_hora=instant,
            duracion_minutos=duration,
            estado=state,
            is_active=True,
        )
        saved = await self._store(turno)
        logger.info(
            "Turno created",
            turno_id=saved.id,
            doctor_id=id_doctor,
            consultorio_id=id_consultorio,
            fecha_hora=instant.isoformat(),
            estado=state.value,
        )
        return saved

    @staticmethod
    def _duration(value: Optional[int]) -> int:
        if value is None:
            return DEFAULT_DURATION_MINUTES
        if value <= 0:
            raise InvalidInputError("duracionMinutos must be positive", details={"duracionMinutos": value})
        return value

    async def _check_participants(
        self,
        dni_paciente: Optional[str] = None,
        id_doctor: Optional[int] = None,
        id_consultorio: Optional[int] = None,
    ) -> None:
        if dni_paciente is not None and await self._patients.find_by_id(dni_paciente, include_inactive=False) is None:
            raise NotFoundError(f"Patient {dni_paciente} not found", details={"field": "dniPaciente"})
        if id_doctor is not None and await self._doctors.find_by_id(id_doctor, include_inactive=False) is None:
            raise NotFoundError(f"Doctor {id_doctor} not found", details={"field": "idDoctor"})
        if id_consultorio is not None and await self._offices.find_by_id(id_consultorio, include_inactive=False) is None:
            raise NotFoundError(f"Office {id_consultorio} not found", details={"field": "idConsultorio"})

    async def _check_slot(self, id_doctor: int, id_consultorio: int, instant: datetime) -> None:
        slot = {"idDoctor": id_doctor, "idConsultorio": id_consultorio, "fechaHora": instant.isoformat()}
        confirmed = await self.appointments.find_confirmed_at(id_doctor, id_consultorio, instant)
        if confirmed is not None:
            logger.warning("Duplicate booking refused", turno_id=confirmed.id, **slot)
            raise SlotTakenError(
                "There is already a confirmed appointment in that slot",
                details={**slot, "turnoId": confirmed.id},
            )
        if self.strict_slot_exclusivity:
            booked = await self.appointments.find_open_at(id_doctor, id_consultorio, instant)
            if booked is not None:
                logger.warning("Booking refused: slot already booked", turno_id=booked.id, **slot)
                raise SlotTakenError(
                    "There is already an appointment booked in that slot",
                    details={**slot, "turnoId": booked.id},
                )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    async def transition(self, turno_id: int, target: AppointmentState) -> TurnoModel:
        turno = await self.get(turno_id)
        previous = turno.estado
        check_transition(previous, target, strict=self.strict_transitions)
        turno.estado = target
        saved = await self._store(turno)
        logger.info("Turno state changed", turno_id=turno_id, previous=previous.value, estado=target.value)
        return saved

    async def confirm(self, turno_id: int) -> TurnoModel:
        return await self.transition(turno_id, AppointmentState.CONFIRMADO)

    async def cancel(self, turno_id: int) -> TurnoModel:
        return await self.transition(turno_id, AppointmentState.CANCELADO)

    async def complete(self, turno_id: int) -> TurnoModel:
        return await self.transition(turno_id, AppointmentState.COMPLETADO)

    # ------------------------------------------------------------------
    # Edit
    # ------------------------------------------------------------------
    async def update_appointment(
        self,
        turno_id: int,
        fields: Dict[str, Any],
        *,
        include_inactive: bool = False,
    ) -> TurnoModel:
        """
        Field-level overwrite. fecha_hora is normalized like on create; the
        confirmed-slot check is not repeated here (the storage index still
        rejects a second confirmed row for the same slot).
        """
        turno = await self.get(turno_id, include_inactive=include_inactive)
        changes = dict(fields)

        if changes.get("fecha_hora") is not None:
            changes["fecha_hora"] = normalize_instant(changes["fecha_hora"])
        if changes.get("estado") is not None:
            changes["estado"] = AppointmentState.parse(changes["estado"])
            check_transition(turno.estado, changes["estado"], strict=self.strict_transitions)
        if "duracion_minutos" in changes:
            changes["duracion_minutos"] = self._duration(changes["duracion_minutos"])

        await self._check_participants(
            changes.get("dni_paciente"),
            changes.get("id_doctor"),
            changes.get("id_consultorio"),
        )
        self._apply(turno, {k: v for k, v in changes.items() if v is not None})
        saved = await self._store(turno)
        logger.info("Turno updated", turno_id=turno_id, fields=sorted(changes))
        return saved

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    async def find_all(self, page: PageRequest, *, include_inactive: bool = False) -> Page:
        return await self.list(page.with_default_sort("fechaHora"), include_inactive=include_inactive)

    async def find_inactive(self, page: PageRequest) -> Page:
        return await self.list_inactive(page.with_default_sort("fechaHora"))

    async def find_by_patient(self, dni: str, page: PageRequest, *, include_inactive: bool = False) -> Page:
        return await self.list(
            page.with_default_sort("fechaHora", "DESC"),
            include_inactive=include_inactive,
            criteria=[TurnoModel.dni_paciente == dni],
        )

    async def find_by_doctor(self, doctor_id: int, page: PageRequest, *, include_inactive: bool = False) -> Page:
        return await self.list(
            page.with_default_sort("fechaHora"),
            include_inactive=include_inactive,
            criteria=[TurnoModel.id_doctor == doctor_id],
        )

    async def find_by_state(
        self,
        estado: Union[str, AppointmentState],
        page: PageRequest,
        *,
        include_inactive: bool = False,
    ) -> Page:
        state = AppointmentState.parse(estado)
        return await self.list(
            page.with_default_sort("fechaHora"),
            include_inactive=include_inactive,
            criteria=[TurnoModel.estado == state],
        )

    async def find_by_date(self, day: Any, page: PageRequest, *, include_inactive: bool = False) -> Page:
        """Every appointment on one calendar day."""
        start, end = day_bounds(day)
        return await self.list(
            page.with_default_sort("fechaHora"),
            include_inactive=include_inactive,
            criteria=[TurnoModel.fecha_hora >= start, TurnoModel.fecha_hora < end],
        )

    async def find_by_date_range(
        self,
        desde: Union[str, datetime],
        hasta: Union[str, datetime],
        page: PageRequest,
        *,
        include_inactive: bool = False,
    ) -> Page:
        """Appointments with desde <= fecha_hora <= hasta."""
        start, end = normalize_instant(desde), normalize_instant(hasta)
        if start > end:
            raise InvalidInputError(
                "desde must not be after hasta",
                details={"desde": start.isoformat(), "hasta": end.isoformat()},
            )
        return await self.list(
            page.with_default_sort("fechaHora"),
            include_inactive=include_inactive,
            criteria=[TurnoModel.fecha_hora >= start, TurnoModel.fecha_hora <= end],
        )
