# turnos/clinic/api/routes.py
"""
Clinic reference data endpoints.

Role gates:
- doctores: write admin/secretaria, read admin/secretaria/doctor, delete/restore admin
- pacientes: create/read/update admin/doctor/secretaria, delete/restore admin
- consultorios, obras-sociales: write admin, read any authenticated user
- especialidades, coberturas: write admin (hard delete), read any authenticated user
Admins also see soft-deleted rows on list and get.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from turnos.clinic.api.schemas import (
    CoberturaRead,
    CoberturaWrite,
    ConsultorioRead,
    ConsultorioWrite,
    DoctorCreate,
    DoctorRead,
    DoctorUpdate,
    EspecialidadRead,
    EspecialidadWrite,
    ObraSocialCreate,
    ObraSocialRead,
    ObraSocialUpdate,
    PacienteCreate,
    PacienteRead,
    PacienteUpdate,
)
from turnos.clinic.application.services import (
    CoberturaService,
    ConsultorioService,
    DoctorService,
    EspecialidadService,
    ObraSocialService,
    PacienteService,
)
from turnos.dependencies import (
    get_cobertura_service,
    get_consultorio_service,
    get_current_claims,
    get_doctor_service,
    get_especialidad_service,
    get_obra_social_service,
    get_paciente_service,
    page_params,
    require_roles,
)
from turnos.identity.application.access_control import AccessControl
from turnos.identity.domain.entities import TokenClaims
from turnos.shared.http.schemas import ERROR_RESPONSES
from turnos.shared.pagination import Page, PageRequest
from turnos.shared.roles import Role

ADMIN_ONLY = require_roles(Role.ADMIN)
ADMIN_SECRETARIA = require_roles(Role.ADMIN, Role.SECRETARIA)
DOCTOR_READERS = require_roles(Role.ADMIN, Role.SECRETARIA, Role.DOCTOR)
PATIENT_STAFF = require_roles(Role.ADMIN, Role.DOCTOR, Role.SECRETARIA)

doctors_router = APIRouter(prefix="/doctores", tags=["Doctores"], responses=ERROR_RESPONSES)
patients_router = APIRouter(prefix="/pacientes", tags=["Pacientes"], responses=ERROR_RESPONSES)
offices_router = APIRouter(prefix="/consultorios", tags=["Consultorios"], responses=ERROR_RESPONSES)
specialties_router = APIRouter(prefix="/especialidades", tags=["Especialidades"], responses=ERROR_RESPONSES)
coverages_router = APIRouter(prefix="/coberturas", tags=["Coberturas"], responses=ERROR_RESPONSES)
insurers_router = APIRouter(prefix="/obras-sociales", tags=["Obras sociales"], responses=ERROR_RESPONSES)


def _no_content() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ─────────────────────────────── /doctores ─────────────────────────────


@doctors_router.post("", response_model=DoctorRead, status_code=status.HTTP_201_CREATED,
                     dependencies=[Depends(ADMIN_SECRETARIA)])
async def create_doctor(payload: DoctorCreate, doctors: DoctorService = Depends(get_doctor_service)):
    fields = payload.model_dump(exclude={"especialidades"})
    return DoctorRead.model_validate(await doctors.create(fields, payload.especialidades))


@doctors_router.get("", response_model=Page[DoctorRead])
async def list_doctors(
    nombre: Optional[str] = Query(None),
    apellido: Optional[str] = Query(None),
    matricula: Optional[str] = Query(None),
    page: PageRequest = Depends(page_params),
    claims: TokenClaims = Depends(DOCTOR_READERS),
    doctors: DoctorService = Depends(get_doctor_service),
):
    result = await doctors.list(
        page,
        include_inactive=AccessControl.is_privileged(claims),
        criteria=DoctorService.exact_filters(nombre, apellido, matricula),
    )
    return result.to(DoctorRead)


@doctors_router.get("/activos", response_model=Page[DoctorRead], dependencies=[Depends(DOCTOR_READERS)])
async def list_active_doctors(
    nombre: Optional[str] = Query(None),
    apellido: Optional[str] = Query(None),
    matricula: Optional[str] = Query(None),
    page: PageRequest = Depends(page_params),
    doctors: DoctorService = Depends(get_doctor_service),
):
    result = await doctors.list(page, criteria=DoctorService.exact_filters(nombre, apellido, matricula))
    return result.to(DoctorRead)


@doctors_router.get("/inactivos", response_model=Page[DoctorRead], dependencies=[Depends(ADMIN_ONLY)])
async def list_inactive_doctors(
    page: PageRequest = Depends(page_params),
    doctors: DoctorService = Depends(get_doctor_service),
):
    return (await doctors.list_inactive(page)).to(DoctorRead)


@doctors_router.get("/{doctor_id}", response_model=DoctorRead)
async def get_doctor(
    doctor_id: int,
    claims: TokenClaims = Depends(DOCTOR_READERS),
    doctors: DoctorService = Depends(get_doctor_service),
):
    doctor = await doctors.get(doctor_id, include_inactive=AccessControl.is_privileged(claims))
    return DoctorRead.model_validate(doctor)


@doctors_router.patch("/{doctor_id}", response_model=DoctorRead)
async def update_doctor(
    doctor_id: int,
    payload: DoctorUpdate,
    claims: TokenClaims = Depends(ADMIN_SECRETARIA),
    doctors: DoctorService = Depends(get_doctor_service),
):
    fields = payload.changes()
    especialidades = fields.pop("especialidades", None)
    doctor = await doctors.update_doctor(
        doctor_id, fields, especialidades, include_inactive=AccessControl.is_privileged(claims)
    )
    return DoctorRead.model_validate(doctor)


@doctors_router.delete("/{doctor_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(ADMIN_ONLY)])
async def delete_doctor(doctor_id: int, doctors: DoctorService = Depends(get_doctor_service)) -> Response:
    await doctors.soft_delete(doctor_id)
    return _no_content()


@doctors_router.patch("/{doctor_id}/restaurar", response_model=DoctorRead, dependencies=[Depends(ADMIN_ONLY)])
async def restore_doctor(doctor_id: int, doctors: DoctorService = Depends(get_doctor_service)):
    return DoctorRead.model_validate(await doctors.restore(doctor_id))


# ─────────────────────────────── /pacientes ────────────────────────────


@patients_router.post("", response_model=PacienteRead, status_code=status.HTTP_201_CREATED,
                      dependencies=[Depends(PATIENT_STAFF)])
async def create_patient(payload: PacienteCreate, patients: PacienteService = Depends(get_paciente_service)):
    return PacienteRead.model_validate(await patients.create(payload.model_dump()))


@patients_router.get("", response_model=Page[PacienteRead])
async def list_patients(
    page: PageRequest = Depends(page_params),
    claims: TokenClaims = Depends(PATIENT_STAFF),
    patients: PacienteService = Depends(get_paciente_service),
):
    result = await patients.list(page, include_inactive=AccessControl.is_privileged(claims))
    return result.to(PacienteRead)


@patients_router.get("/activos", response_model=Page[PacienteRead], dependencies=[Depends(PATIENT_STAFF)])
async def list_active_patients(
    page: PageRequest = Depends(page_params),
    patients: PacienteService = Depends(get_paciente_service),
):
    return (await patients.list(page)).to(PacienteRead)


@patients_router.get("/inactivos", response_model=Page[PacienteRead], dependencies=[Depends(ADMIN_ONLY)])
async def list_inactive_patients(
    page: PageRequest = Depends(page_params),
    patients: PacienteService = Depends(get_paciente_service),
):
    return (await patients.list_inactive(page)).to(PacienteRead)


@patients_router.get("/{dni}", response_model=PacienteRead)
async def get_patient(
    dni: str,
    claims: TokenClaims = Depends(PATIENT_STAFF),
    patients: PacienteService = Depends(get_paciente_service),
):
    return PacienteRead.model_validate(await patients.get(dni, include_inactive=AccessControl.is_privileged(claims)))


@patients_router.patch("/{dni}", response_model=PacienteRead)
async def update_patient(
    dni: str,
    payload: PacienteUpdate,
    claims: TokenClaims = Depends(PATIENT_STAFF),
    patients: PacienteService = Depends(get_paciente_service),
):
    patient = await patients.update_patient(
        dni, payload.changes(), include_inactive=AccessControl.is_privileged(claims)
    )
    return PacienteRead.model_validate(patient)


@patients_router.delete("/{dni}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(ADMIN_ONLY)])
async def delete_patient(dni: str, patients: PacienteService = Depends(get_paciente_service)) -> Response:
    await patients.soft_delete(dni)
    return _no_content()


@patients_router.patch("/{dni}/restaurar", response_model=PacienteRead, dependencies=[Depends(ADMIN_ONLY)])
async def restore_patient(dni: str, patients: PacienteService = Depends(get_paciente_service)):
    return PacienteRead.model_validate(await patients.restore(dni))


# ───────────────────────────── /consultorios ───────────────────────────


@offices_router.post("", response_model=ConsultorioRead, status_code=status.HTTP_201_CREATED,
                     dependencies=[Depends(ADMIN_ONLY)])
async def create_office(payload: ConsultorioWrite, offices: ConsultorioService = Depends(get_consultorio_service)):
    return ConsultorioRead.model_validate(await offices.create(payload.nombre))


@offices_router.get("", response_model=Page[ConsultorioRead])
async def list_offices(
    page: PageRequest = Depends(page_params),
    claims: TokenClaims = Depends(get_current_claims),
    offices: ConsultorioService = Depends(get_consultorio_service),
):
    result = await offices.list(page, include_inactive=AccessControl.is_privileged(claims))
    return result.to(ConsultorioRead)


@offices_router.get("/activos", response_model=Page[ConsultorioRead], dependencies=[Depends(get_current_claims)])
async def list_active_offices(
    page: PageRequest = Depends(page_params),
    offices: ConsultorioService = Depends(get_consultorio_service),
):
    return (await offices.list(page)).to(ConsultorioRead)


@offices_router.get("/{office_id}", response_model=ConsultorioRead)
async def get_office(
    office_id: int,
    claims: TokenClaims = Depends(get_current_claims),
    offices: ConsultorioService = Depends(get_consultorio_service),
):
    office = await offices.get(office_id, include_inactive=AccessControl.is_privileged(claims))
    return ConsultorioRead.model_validate(office)


@offices_router.patch("/{office_id}", response_model=ConsultorioRead, dependencies=[Depends(ADMIN_ONLY)])
async def update_office(
    office_id: int,
    payload: ConsultorioWrite,
    offices: ConsultorioService = Depends(get_consultorio_service),
):
    office = await offices.update(office_id, payload.changes(), include_inactive=True)
    return ConsultorioRead.model_validate(office)


@offices_router.delete("/{office_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(ADMIN_ONLY)])
async def delete_office(office_id: int, offices: ConsultorioService = Depends(get_consultorio_service)) -> Response:
    await offices.soft_delete(office_id)
    return _no_content()


@offices_router.patch("/{office_id}/restaurar", response_model=ConsultorioRead, dependencies=[Depends(ADMIN_ONLY)])
async def restore_office(office_id: int, offices: ConsultorioService = Depends(get_consultorio_service)):
    return ConsultorioRead.model_validate(await offices.restore(office_id))


# ─────────────────────────── /especialidades ───────────────────────────


@specialties_router.post("", response_model=EspecialidadRead, status_code=status.HTTP_201_CREATED,
                         dependencies=[Depends(ADMIN_ONLY)])
async def create_specialty(
    payload: EspecialidadWrite,
    specialties: EspecialidadService = Depends(get_especialidad_service),
):
    return EspecialidadRead.model_validate(await specialties.create(payload.nombre))


@specialties_router.get("", response_model=Page[EspecialidadRead], dependencies=[Depends(get_current_claims)])
async def list_specialties(
    page: PageRequest = Depends(page_params),
    specialties: EspecialidadService = Depends(get_especialidad_service),
):
    return (await specialties.list(page)).to(EspecialidadRead)


@specialties_router.get("/{specialty_id}", response_model=EspecialidadRead, dependencies=[Depends(get_current_claims)])
async def get_specialty(specialty_id: int, specialties: EspecialidadService = Depends(get_especialidad_service)):
    return EspecialidadRead.model_validate(await specialties.get(specialty_id))


@specialties_router.patch("/{specialty_id}", response_model=EspecialidadRead, dependencies=[Depends(ADMIN_ONLY)])
async def update_specialty(
    specialty_id: int,
    payload: EspecialidadWrite,
    specialties: EspecialidadService = Depends(get_especialidad_service),
):
    return EspecialidadRead.model_validate(await specialties.update(specialty_id, payload.changes()))


@specialties_router.delete("/{specialty_id}", status_code=status.HTTP_204_NO_CONTENT,
                           dependencies=[Depends(ADMIN_ONLY)])
async def delete_specialty(
    specialty_id: int,
    specialties: EspecialidadService = Depends(get_especialidad_service),
) -> Response:
    await specialties.delete(specialty_id)
    return _no_content()


# ───────────────────────────── /coberturas ─────────────────────────────


@coverages_router.post("", response_model=CoberturaRead, status_code=status.HTTP_201_CREATED,
                       dependencies=[Depends(ADMIN_ONLY)])
async def create_coverage(payload: CoberturaWrite, coverages: CoberturaService = Depends(get_cobertura_service)):
    return CoberturaRead.model_validate(await coverages.create(payload.nombre))


@coverages_router.get("", response_model=Page[CoberturaRead], dependencies=[Depends(get_current_claims)])
async def list_coverages(
    page: PageRequest = Depends(page_params),
    coverages: CoberturaService = Depends(get_cobertura_service),
):
    return (await coverages.list(page)).to(CoberturaRead)


@coverages_router.get("/{coverage_id}", response_model=CoberturaRead, dependencies=[Depends(get_current_claims)])
async def get_coverage(coverage_id: int, coverages: CoberturaService = Depends(get_cobertura_service)):
    return CoberturaRead.model_validate(await coverages.get(coverage_id))


@coverages_router.patch("/{coverage_id}", response_model=CoberturaRead, dependencies=[Depends(ADMIN_ONLY)])
async def update_coverage(
    coverage_id: int,
    payload: CoberturaWrite,
    coverages: CoberturaService = Depends(get_cobertura_service),
):
    return CoberturaRead.model_validate(await coverages.update(coverage_id, payload.changes()))


@coverages_router.delete("/{coverage_id}", status_code=status.HTTP_204_NO_CONTENT,
                         dependencies=[Depends(ADMIN_ONLY)])
async def delete_coverage(coverage_id: int, coverages: CoberturaService = Depends(get_cobertura_service)) -> Response:
    await coverages.delete(coverage_id)
    return _no_content()


# ─────────────────────────── /obras-sociales ───────────────────────────


@insurers_router.post("", response_model=ObraSocialRead, status_code=status.HTTP_201_CREATED,
                      dependencies=[Depends(ADMIN_ONLY)])
async def create_insurer(payload: ObraSocialCreate, insurers: ObraSocialService = Depends(get_obra_social_service)):
    return ObraSocialRead.model_validate(await insurers.create(payload.model_dump()))


@insurers_router.get("", response_model=Page[ObraSocialRead])
async def list_insurers(
    page: PageRequest = Depends(page_params),
    claims: TokenClaims = Depends(get_current_claims),
    insurers: ObraSocialService = Depends(get_obra_social_service),
):
    result = await insurers.list(page, include_inactive=AccessControl.is_privileged(claims))
    return result.to(ObraSocialRead)


@insurers_router.get("/activas", response_model=Page[ObraSocialRead], dependencies=[Depends(get_current_claims)])
async def list_active_insurers(
    page: PageRequest = Depends(page_params),
    insurers: ObraSocialService = Depends(get_obra_social_service),
):
    return (await insurers.list(page)).to(ObraSocialRead)


@insurers_router.get("/{codigo}", response_model=ObraSocialRead)
async def get_insurer(
    codigo: str,
    claims: TokenClaims = Depends(get_current_claims),
    insurers: ObraSocialService = Depends(get_obra_social_service),
):
    insurer = await insurers.get(codigo, include_inactive=AccessControl.is_privileged(claims))
    return ObraSocialRead.model_validate(insurer)


@insurers_router.patch("/{codigo}", response_model=ObraSocialRead, dependencies=[Depends(ADMIN_ONLY)])
async def update_insurer(
    codigo: str,
    payload: ObraSocialUpdate,
    insurers: ObraSocialService = Depends(get_obra_social_service),
):
    return ObraSocialRead.model_validate(await insurers.update_insurer(codigo, payload.changes()))


@insurers_router.delete("/{codigo}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(ADMIN_ONLY)])
async def delete_insurer(codigo: str, insurers: ObraSocialService = Depends(get_obra_social_service)) -> Response:
    await insurers.soft_delete(codigo)
    return _no_content()


@insurers_router.patch("/{codigo}/restaurar", response_model=ObraSocialRead, dependencies=[Depends(ADMIN_ONLY)])
async def restore_insurer(codigo: str, insurers: ObraSocialService = Depends(get_obra_social_service)):
    return ObraSocialRead.model_validate(await insurers.restore(codigo))
