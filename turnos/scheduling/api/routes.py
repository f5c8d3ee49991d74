# turnos/scheduling/api/routes.py
"""
Appointment (turno) and weekly availability endpoints.

Role requirements are static per route; doctor and paciente callers are
additionally limited to their own appointments (doctor id / patient DNI
from the token's idReferencia). Admins see soft-deleted appointments.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from turnos.dependencies import (
    get_appointment_service,
    get_current_claims,
    get_schedule_service,
    page_params,
    require_roles,
)
from turnos.identity.application.access_control import AccessControl
from turnos.identity.domain.entities import TokenClaims
from turnos.scheduling.api.schemas import (
    HorarioCreate,
    HorarioRead,
    HorarioUpdate,
    TurnoCreate,
    TurnoRead,
    TurnoUpdate,
)
from turnos.scheduling.application.appointment_service import AppointmentService
from turnos.scheduling.application.schedule_service import ScheduleService
from turnos.scheduling.infrastructure.models import TurnoModel
from turnos.shared.exceptions import ForbiddenError
from turnos.shared.http.schemas import ERROR_RESPONSES
from turnos.shared.pagination import Page, PageRequest
from turnos.shared.roles import Role

turnos_router = APIRouter(prefix="/turnos", tags=["Turnos"], responses=ERROR_RESPONSES)
horarios_router = APIRouter(prefix="/horarios-disponibles", tags=["Horarios disponibles"], responses=ERROR_RESPONSES)

ANY_ROLE = require_roles(Role.ADMIN, Role.SECRETARIA, Role.DOCTOR, Role.PACIENTE)
ADMIN_ONLY = require_roles(Role.ADMIN)
STAFF = require_roles(Role.ADMIN, Role.SECRETARIA)
STAFF_AND_DOCTOR = require_roles(Role.ADMIN, Role.SECRETARIA, Role.DOCTOR)
STAFF_AND_PATIENT = require_roles(Role.ADMIN, Role.SECRETARIA, Role.PACIENTE)
OWN_ONLY = require_roles(Role.DOCTOR, Role.PACIENTE)


def check_turno_owner(claims: TokenClaims, turno: TurnoModel) -> None:
    """Doctors own appointments by doctor id, patients by DNI; staff own everything."""
    if claims.rol is Role.DOCTOR:
        AccessControl.require_ownership(claims, turno.id_doctor)
    elif claims.rol is Role.PACIENTE:
        AccessControl.require_ownership(claims, turno.dni_paciente)


async def _owned_turno(turno_id: int, claims: TokenClaims, appointments: AppointmentService) -> TurnoModel:
    turno = await appointments.get(turno_id, include_inactive=AccessControl.is_privileged(claims))
    check_turno_owner(claims, turno)
    return turno


# ─────────────────────────────── /turnos ───────────────────────────────


@turnos_router.post("", response_model=TurnoRead, status_code=status.HTTP_201_CREATED)
async def create_turno(
    payload: TurnoCreate,
    claims: TokenClaims = Depends(STAFF_AND_PATIENT),
    appointments: AppointmentService = Depends(get_appointment_service),
):
    if claims.rol is Role.PACIENTE:
        AccessControl.require_ownership(claims, payload.dni_paciente)
    turno = await appointments.create(
        dni_paciente=payload.dni_paciente,
        id_doctor=payload.id_doctor,
        id_consultorio=payload.id_consultorio,
        fecha_hora=payload.fecha_hora,
        duracion_minutos=payload.duracion_minutos,
        estado=payload.estado,
    )
    return TurnoRead.model_validate(turno)


@turnos_router.get("", response_model=Page[TurnoRead])
async def list_turnos(
    page: PageRequest = Depends(page_params),
    claims: TokenClaims = Depends(STAFF),
    appointments: AppointmentService = Depends(get_appointment_service),
):
    result = await appointments.find_all(page, include_inactive=AccessControl.is_privileged(claims))
    return result.to(TurnoRead)


@turnos_router.get("/inactivos", response_model=Page[TurnoRead], dependencies=[Depends(ADMIN_ONLY)])
async def list_inactive_turnos(
    page: PageRequest = Depends(page_params),
    appointments: AppointmentService = Depends(get_appointment_service),
):
    return (await appointments.find_inactive(page)).to(TurnoRead)


@turnos_router.get("/mis-turnos", response_model=Page[TurnoRead])
async def my_turnos(
    page: PageRequest = Depends(page_params),
    claims: TokenClaims = Depends(OWN_ONLY),
    appointments: AppointmentService = Depends(get_appointment_service),
):
    if claims.id_referencia is None:
        raise ForbiddenError("Account is not linked to a doctor or patient")
    if claims.rol is Role.DOCTOR:
        result = await appointments.find_by_doctor(claims.doctor_id, page)
    else:
        result = await appointments.find_by_patient(claims.patient_dni, page)
    return result.to(TurnoRead)


@turnos_router.get("/estado/{estado}", response_model=Page[TurnoRead])
async def turnos_by_state(
    estado: str,
    page: PageRequest = Depends(page_params),
    claims: TokenClaims = Depends(STAFF_AND_DOCTOR),
    appointments: AppointmentService = Depends(get_appointment_service),
):
    result = await appointments.find_by_state(estado, page, include_inactive=AccessControl.is_privileged(claims))
    return result.to(TurnoRead)


@turnos_router.get("/paciente/{dni}", response_model=Page[TurnoRead])
async def turnos_by_patient(
    dni: str,
    page: PageRequest = Depends(page_params),
    claims: TokenClaims = Depends(STAFF_AND_PATIENT),
    appointments: AppointmentService = Depends(get_appointment_service),
):
    AccessControl.require_ownership(claims, dni)
    result = await appointments.find_by_patient(dni, page, include_inactive=AccessControl.is_privileged(claims))
    return result.to(TurnoRead)


@turnos_router.get("/doctor/{doctor_id}", response_model=Page[TurnoRead])
async def turnos_by_doctor(
    doctor_id: int,
    page: PageRequest = Depends(page_params),
    claims: TokenClaims = Depends(STAFF_AND_DOCTOR),
    appointments: AppointmentService = Depends(get_appointment_service),
):
    AccessControl.require_ownership(claims, doctor_id)
    result = await appointments.find_by_doctor(doctor_id, page, include_inactive=AccessControl.is_privileged(claims))
    return result.to(TurnoRead)


@turnos_router.get("/fecha", response_model=Page[TurnoRead])
async def turnos_by_date(
    fecha: str = Query(..., description="Calendar day, YYYY-MM-DD"),
    page: PageRequest = Depends(page_params),
    claims: TokenClaims = Depends(STAFF_AND_DOCTOR),
    appointments: AppointmentService = Depends(get_appointment_service),
):
    result = await appointments.find_by_date(fecha, page, include_inactive=AccessControl.is_privileged(claims))
    return result.to(TurnoRead)


@turnos_router.get("/rango", response_model=Page[TurnoRead])
async def turnos_by_range(
    desde: str = Query(..., description="Inclusive lower bound (ISO-8601)"),
    hasta: str = Query(..., description="Inclusive upper bound (ISO-8601)"),
    page: PageRequest = Depends(page_params),
    claims: TokenClaims = Depends(STAFF_AND_DOCTOR),
    appointments: AppointmentService = Depends(get_appointment_service),
):
    result = await appointments.find_by_date_range(
        desde, hasta, page, include_inactive=AccessControl.is_privileged(claims)
    )
    return result.to(TurnoRead)


@turnos_router.get("/{turno_id}", response_model=TurnoRead)
async def get_turno(
    turno_id: int,
    claims: TokenClaims = Depends(ANY_ROLE),
    appointments: AppointmentService = Depends(get_appointment_service),
):
    return TurnoRead.model_validate(await _owned_turno(turno_id, claims, appointments))


@turnos_router.patch("/{turno_id}", response_model=TurnoRead)
async def update_turno(
    turno_id: int,
    payload: TurnoUpdate,
    claims: TokenClaims = Depends(STAFF),
    appointments: AppointmentService = Depends(get_appointment_service),
):
    turno = await appointments.update_appointment(
        turno_id, payload.changes(), include_inactive=AccessControl.is_privileged(claims)
    )
    return TurnoRead.model_validate(turno)


@turnos_router.patch("/{turno_id}/confirmar", response_model=TurnoRead)
async def confirm_turno(
    turno_id: int,
    claims: TokenClaims = Depends(STAFF_AND_DOCTOR),
    appointments: AppointmentService = Depends(get_appointment_service),
):
    await _owned_turno(turno_id, claims, appointments)
    return TurnoRead.model_validate(await appointments.confirm(turno_id))


@turnos_router.patch("/{turno_id}/cancelar", response_model=TurnoRead)
async def cancel_turno(
    turno_id: int,
    claims: TokenClaims = Depends(ANY_ROLE),
    appointments: AppointmentService = Depends(get_appointment_service),
):
    await _owned_turno(turno_id, claims, appointments)
    return TurnoRead.model_validate(await appointments.cancel(turno_id))


@turnos_router.patch("/{turno_id}/completar", response_model=TurnoRead)
async def complete_turno(
    turno_id: int,
    claims: TokenClaims = Depends(STAFF_AND_DOCTOR),
    appointments: AppointmentService = Depends(get_appointment_service),
):
    await _owned_turno(turno_id, claims, appointments)
    return TurnoRead.model_validate(await appointments.complete(turno_id))


@turnos_router.delete("/{turno_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(STAFF)])
async def delete_turno(turno_id: int, appointments: AppointmentService = Depends(get_appointment_service)) -> Response:
    await appointments.soft_delete(turno_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@turnos_router.patch("/{turno_id}/restaurar", response_model=TurnoRead, dependencies=[Depends(ADMIN_ONLY)])
async def restore_turno(turno_id: int, appointments: AppointmentService = Depends(get_appointment_service)):
    return TurnoRead.model_validate(await appointments.restore(turno_id))


# ───────────────────────── /horarios-disponibles ───────────────────────


@horarios_router.post("", response_model=HorarioRead, status_code=status.HTTP_201_CREATED,
                      dependencies=[Depends(STAFF)])
async def create_horario(payload: HorarioCreate, schedules: ScheduleService = Depends(get_schedule_service)):
    return HorarioRead.model_validate(await schedules.create(payload.model_dump()))


@horarios_router.get("", response_model=Page[HorarioRead], dependencies=[Depends(get_current_claims)])
async def list_horarios(
    page: PageRequest = Depends(page_params),
    schedules: ScheduleService = Depends(get_schedule_service),
):
    return (await schedules.list(page)).to(HorarioRead)


@horarios_router.get("/doctor/{doctor_id}", response_model=Page[HorarioRead], dependencies=[Depends(get_current_claims)])
async def horarios_by_doctor(
    doctor_id: int,
    page: PageRequest = Depends(page_params),
    schedules: ScheduleService = Depends(get_schedule_service),
):
    return (await schedules.find_by_doctor(doctor_id, page)).to(HorarioRead)


@horarios_router.get(
    "/consultorio/{office_id}", response_model=Page[HorarioRead], dependencies=[Depends(get_current_claims)]
)
async def horarios_by_office(
    office_id: int,
    page: PageRequest = Depends(page_params),
    schedules: ScheduleService = Depends(get_schedule_service),
):
    return (await schedules.find_by_office(office_id, page)).to(HorarioRead)


@horarios_router.get("/dia", response_model=Page[HorarioRead], dependencies=[Depends(get_current_claims)])
async def horarios_by_day(
    dia: str = Query(..., description="lunes ... domingo"),
    page: PageRequest = Depends(page_params),
    schedules: ScheduleService = Depends(get_schedule_service),
):
    return (await schedules.find_by_day(dia, page)).to(HorarioRead)


@horarios_router.get("/{horario_id}", response_model=HorarioRead, dependencies=[Depends(get_current_claims)])
async def get_horario(horario_id: int, schedules: ScheduleService = Depends(get_schedule_service)):
    return HorarioRead.model_validate(await schedules.get(horario_id))


@horarios_router.patch("/{horario_id}", response_model=HorarioRead, dependencies=[Depends(STAFF)])
async def update_horario(
    horario_id: int,
    payload: HorarioUpdate,
    schedules: ScheduleService = Depends(get_schedule_service),
):
    return HorarioRead.model_validate(await schedules.update_schedule(horario_id, payload.changes()))


@horarios_router.delete("/{horario_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(STAFF)])
async def delete_horario(horario_id: int, schedules: ScheduleService = Depends(get_schedule_service)) -> Response:
    await schedules.delete(horario_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
