"""
Clinic reference data services.

Thin rules over the generic CRUD/soft-delete services: reference checks on
create (patient -> insurer/coverage) and natural-key conflicts.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from turnos.clinic.infrastructure.models import (
    CoberturaModel,
    ConsultorioModel,
    DoctorModel,
    EspecialidadModel,
    ObraSocialModel,
    PacienteModel,
)
from turnos.clinic.infrastructure.repositories import (
    CoberturaRepository,
    DoctorRepository,
    EspecialidadRepository,
    ObraSocialRepository,
    PacienteRepository,
)
from turnos.shared.application.crud import CrudService, SoftDeleteService
from turnos.shared.exceptions import ConflictError, NotFoundError
from turnos.shared.logging import get_logger

logger = get_logger(__name__)


class ClinicDirectory:
    """Answers 'does this doctor / patient exist' for account linking."""

    def __init__(self, doctors: DoctorRepository, patients: PacienteRepository) -> None:
        self._doctors = doctors
        self._patients = patients

    async def doctor_exists(self, doctor_id: int) -> bool:
        return await self._doctors.exists(id=doctor_id)

    async def patient_exists(self, dni: str) -> bool:
        return await self._patients.exists(dni=dni)


# ─────────────────────────────── Doctors ───────────────────────────────


class DoctorService(SoftDeleteService[DoctorModel]):
    entity_label = "Doctor"
    relations = ("especialidades",)

    def __init__(self, doctors: DoctorRepository, specialties: EspecialidadRepository) -> None:
        super().__init__(doctors)
        self._specialties = specialties

    async def _resolve_specialties(self, ids: Sequence[int]) -> List[EspecialidadModel]:
        found = await self._specialties.find_by_ids(ids)
        missing = sorted(set(ids) - {s.id for s in found})
        if missing:
            raise NotFoundError("Unknown specialties", details={"especialidades": missing})
        return found

    async def create(self, fields: Dict[str, Any], especialidades: Optional[Sequence[int]] = None) -> DoctorModel:
        doctor = DoctorModel(**fields)
        doctor.especialidades = await self._resolve_specialties(especialidades or [])
        saved = await self._store(doctor)
        logger.info("Doctor created", doctor_id=saved.id)
        return saved

    async def update_doctor(
        self,
        doctor_id: int,
        fields: Dict[str, Any],
        especialidades: Optional[Sequence[int]] = None,
        *,
        include_inactive: bool = False,
    ) -> DoctorModel:
        doctor = await self.get(doctor_id, include_inactive=include_inactive)
        self._apply(doctor, fields)
        if especialidades is not None:
            doctor.especialidades = await self._resolve_specialties(especialidades)
        return await self._store(doctor)

    @staticmethod
    def exact_filters(nombre: Optional[str], apellido: Optional[str], matricula: Optional[str]) -> list:
        criteria = []
        if nombre:
            criteria.append(DoctorModel.nombre == nombre)
        if apellido:
            criteria.append(DoctorModel.apellido == apellido)
        if matricula:
            criteria.append(DoctorModel.matricula == matricula)
        return criteria


# ─────────────────────────────── Patients ──────────────────────────────


class PacienteService(SoftDeleteService[PacienteModel]):
    entity_label = "Patient"
    relations = ("obra_social", "cobertura")

    def __init__(
        self,
        patients: PacienteRepository,
        insurers: ObraSocialRepository,
        coverages: CoberturaRepository,
    ) -> None:
        super().__init__(patients)
        self._insurers = insurers
        self._coverages = coverages

    async def _check_references(self, fields: Dict[str, Any]) -> None:
        codigo = fields.get("codigo_obra_social")
        if codigo is not None and await self._insurers.find_by_id(codigo, include_inactive=False) is None:
            raise NotFoundError(f"Insurer {codigo} not found", details={"field": "codigoObraSocial"})
        cobertura = fields.get("id_cobertura")
        if cobertura is not None and await self._coverages.find_by_id(cobertura) is None:
            raise NotFoundError(f"Coverage plan {cobertura} not found", details={"field": "idCobertura"})

    async def create(self, fields: Dict[str, Any]) -> PacienteModel:
        fields = dict(fields)
        if fields.get("id_cobertura") is None:
            fields["id_cobertura"] = 1
        if await self.repository.exists(dni=fields["dni"]):
            raise ConflictError("A patient with that DNI already exists", details={"dni": fields["dni"]})
        await self._check_references(fields)
        patient = await self._store(PacienteModel(**fields))
        logger.info("Patient created", dni=patient.dni)
        return patient

    async def update_patient(self, dni: str, fields: Dict[str, Any], *, include_inactive: bool = False) -> PacienteModel:
        await self._check_references(fields)
        return await self.update(dni, fields, include_inactive=include_inactive)


# ─────────────────────────────── Offices ───────────────────────────────


class ConsultorioService(SoftDeleteService[ConsultorioModel]):
    entity_label = "Office"

    async def create(self, nombre: str) -> ConsultorioModel:
        return await self._store(ConsultorioModel(nombre=nombre))


# ─────────────────────────────── Lookups ───────────────────────────────


class EspecialidadService(CrudService[EspecialidadModel]):
    entity_label = "Specialty"

    async def create(self, nombre: str) -> EspecialidadModel:
        return await self._store(EspecialidadModel(nombre=nombre))


class CoberturaService(CrudService[CoberturaModel]):
    entity_label = "Coverage plan"

    async def create(self, nombre: str) -> CoberturaModel:
        return await self._store(CoberturaModel(nombre=nombre))


class ObraSocialService(SoftDeleteService[ObraSocialModel]):
    entity_label = "Insurer"
    relations = ("cobertura",)

    def __init__(self, insurers: ObraSocialRepository, coverages: CoberturaRepository) -> None:
        super().__init__(insurers)
        self._coverages = coverages

    async def _check_coverage(self, fields: Dict[str, Any]) -> None:
        cobertura = fields.get("id_cobertura")
        if cobertura is not None and await self._coverages.find_by_id(cobertura) is None:
            raise NotFoundError(f"Coverage plan {cobertura} not found", details={"field": "idCobertura"})

    async def create(self, fields: Dict[str, Any]) -> ObraSocialModel:
        if await self.repository.exists(codigo=fields["codigo"]):
            raise ConflictError("An insurer with that code already exists", details={"codigo": fields["codigo"]})
        await self._check_coverage(fields)
        return await self._store(ObraSocialModel(**fields))

    async def update_insurer(self, codigo: str, fields: Dict[str, Any]) -> ObraSocialModel:
        await self._check_coverage(fields)
        return await self.update(codigo, fields)

