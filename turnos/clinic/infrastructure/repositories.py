from __future__ import annotations

from typing import List, Sequence

from sqlalchemy import select

from turnos.clinic.infrastructure.models import (
    CoberturaModel,
    ConsultorioModel,
    DoctorModel,
    EspecialidadModel,
    ObraSocialModel,
    PacienteModel,
)
from turnos.shared.database import SQLAlchemyRepository


class DoctorRepository(SQLAlchemyRepository[DoctorModel]):
    model_class = DoctorModel
    conflict_message = "A doctor with that email or matricula already exists"
    sort_fields = {
        "id": DoctorModel.id,
        "nombre": DoctorModel.nombre,
        "apellido": DoctorModel.apellido,
        "matricula": DoctorModel.matricula,
        "email": DoctorModel.email,
        "fechaRegistro": DoctorModel.fecha_registro,
    }
    default_sort = "apellido"
    search_columns = (DoctorModel.nombre, DoctorModel.apellido, DoctorModel.matricula)


class PacienteRepository(SQLAlchemyRepository[PacienteModel]):
    model_class = PacienteModel
    conflict_message = "A patient with that DNI already exists"
    sort_fields = {
        "dni": PacienteModel.dni,
        "nombre": PacienteModel.nombre,
        "apellido": PacienteModel.apellido,
        "fechaNacimiento": PacienteModel.fecha_nacimiento,
        "fechaRegistro": PacienteModel.fecha_registro,
    }
    default_sort = "apellido"
    search_columns = (PacienteModel.nombre, PacienteModel.apellido, PacienteModel.dni)


class ConsultorioRepository(SQLAlchemyRepository[ConsultorioModel]):
    model_class = ConsultorioModel
    sort_fields = {"id": ConsultorioModel.id, "nombre": ConsultorioModel.nombre}
    default_sort = "nombre"
    search_columns = (ConsultorioModel.nombre,)


class EspecialidadRepository(SQLAlchemyRepository[EspecialidadModel]):
    model_class = EspecialidadModel
    conflict_message = "Specialty already exists"
    sort_fields = {"id": EspecialidadModel.id, "nombre": EspecialidadModel.nombre}
    default_sort = "nombre"
    search_columns = (EspecialidadModel.nombre,)

    async def find_by_ids(self, ids: Sequence[int]) -> List[EspecialidadModel]:
        if not ids:
            return []
        result = await self.session.execute(
            select(EspecialidadModel).where(EspecialidadModel.id.in_(set(ids))).order_by(EspecialidadModel.id)
        )
        return list(result.scalars().all())


class CoberturaRepository(SQLAlchemyRepository[CoberturaModel]):
    model_class = CoberturaModel
    conflict_message = "Coverage plan already exists"
    sort_fields = {"id": CoberturaModel.id, "nombre": CoberturaModel.nombre}
    default_sort = "nombre"
    search_columns = (CoberturaModel.nombre,)


class ObraSocialRepository(SQLAlchemyRepository[ObraSocialModel]):
    model_class = ObraSocialModel
    conflict_message = "An insurer with that code or email already exists"
    sort_fields = {"codigo": ObraSocialModel.codigo, "nombre": ObraSocialModel.nombre}
    default_sort = "nombre"
    search_columns = (ObraSocialModel.nombre, ObraSocialModel.codigo)
