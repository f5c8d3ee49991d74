from datetime import date, time

import pytest

from turnos.clinic.application.services import (
    CoberturaService,
    DoctorService,
    EspecialidadService,
    ObraSocialService,
    PacienteService,
)
from turnos.clinic.infrastructure.repositories import (
    CoberturaRepository,
    ConsultorioRepository,
    DoctorRepository,
    EspecialidadRepository,
    ObraSocialRepository,
    PacienteRepository,
)
from turnos.scheduling.application.schedule_service import ScheduleService
from turnos.scheduling.domain.entities import DayOfWeek
from turnos.scheduling.infrastructure.repositories import ScheduleRepository
from turnos.shared.exceptions import ConflictError, InvalidInputError, NotFoundError
from turnos.shared.pagination import PageRequest


@pytest.fixture
def doctors(session, seed):
    return DoctorService(DoctorRepository(session), EspecialidadRepository(session))


@pytest.fixture
def specialties(session, seed):
    return EspecialidadService(EspecialidadRepository(session))


@pytest.fixture
def patients(session, seed):
    return PacienteService(PacienteRepository(session), ObraSocialRepository(session), CoberturaRepository(session))


@pytest.fixture
def schedules(session, seed):
    return ScheduleService(ScheduleRepository(session), DoctorRepository(session), ConsultorioRepository(session))


def patient_fields(**overrides):
    fields = {
        "dni": "50123456",
        "nombre": "Carla",
        "apellido": "Suarez",
        "fecha_nacimiento": date(2000, 1, 20),
        "telefono": "1144443333",
        "codigo_obra_social": "OS001",
    }
    fields.update(overrides)
    return fields


async def test_doctor_with_specialties(doctors, specialties):
    cardio = await specialties.create("Cardiologia")
    clinica = await specialties.create("Clinica medica")
    doctor = await doctors.create(
        {"nombre": "Eva", "apellido": "Ruiz", "email": "eva@clinica.com.ar", "matricula": "MP-2001"},
        [clinica.id, cardio.id],
    )
    assert [e.nombre for e in doctor.especialidades] == ["Cardiologia", "Clinica medica"]

    updated = await doctors.update_doctor(doctor.id, {"telefono": "115555"}, [cardio.id])
    assert [e.id for e in updated.especialidades] == [cardio.id]
    assert updated.telefono == "115555"

    with pytest.raises(NotFoundError):
        await doctors.update_doctor(doctor.id, {}, [999])


async def test_doctor_unique_matricula(doctors):
    with pytest.raises(ConflictError):
        await doctors.create({"nombre": "X", "apellido": "Y", "email": "nuevo@clinica.com.ar", "matricula": "MP-1001"})


async def test_doctor_exact_filters_and_soft_delete(doctors, seed):
    page = PageRequest.build()
    found = await doctors.list(page, criteria=DoctorService.exact_filters(None, "Perez", None))
    assert [d.id for d in found.data] == [seed.other_doctor_id]

    await doctors.soft_delete(seed.other_doctor_id)
    assert (await doctors.list(page)).total == 1
    assert (await doctors.list(page, include_inactive=True)).total == 2
    assert [d.id for d in (await doctors.list_inactive(page)).data] == [seed.other_doctor_id]

    restored = await doctors.restore(seed.other_doctor_id)
    assert restored.is_active and restored.especialidades == []


async def test_patient_create_defaults_and_references(patients):
    patient = await patients.create(patient_fields())
    assert patient.id_cobertura == 1
    assert patient.obra_social.nombre == "OSDE"
    assert patient.cobertura.nombre == "Plan 210"

    with pytest.raises(ConflictError):
        await patients.create(patient_fields())
    with pytest.raises(NotFoundError):
        await patients.create(patient_fields(dni="50999999", codigo_obra_social="ZZZ"))
    with pytest.raises(NotFoundError):
        await patients.create(patient_fields(dni="50999998", id_cobertura=77))


async def test_patient_update_and_visibility(patients, seed):
    updated = await patients.update_patient(seed.dni, {"direccion": "Av. Siempreviva 742"})
    assert updated.direccion == "Av. Siempreviva 742"

    await patients.soft_delete(seed.dni)
    with pytest.raises(NotFoundError):
        await patients.update_patient(seed.dni, {"telefono": "1"})
    assert (await patients.update_patient(seed.dni, {"telefono": "1"}, include_inactive=True)).telefono == "1"


async def test_insurer_code_conflict(session, seed):
    insurers = ObraSocialService(ObraSocialRepository(session), CoberturaRepository(session))
    with pytest.raises(ConflictError):
        await insurers.create({"codigo": "OS001", "nombre": "Duplicada"})
    created = await insurers.create({"codigo": "SW01", "nombre": "Swiss", "id_cobertura": 1})
    assert created.cobertura.nombre == "Plan 210"
    with pytest.raises(NotFoundError):
        await insurers.update_insurer("SW01", {"id_cobertura": 42})


async def test_lookup_hard_delete(session, seed):
    coverages = CoberturaService(CoberturaRepository(session))
    plan = await coverages.create("Plan 310")
    await coverages.delete(plan.id)
    with pytest.raises(NotFoundError):
        await coverages.get(plan.id)
    with pytest.raises(ConflictError):
        await coverages.create("Plan 210")


async def test_schedule_rules(schedules, seed):
    horario = await schedules.create(
        {
            "id_doctor": seed.doctor_id,
            "id_consultorio": seed.office_id,
            "dia_semana": "Miércoles",
            "hora_inicio": time(9),
            "hora_fin": time(13),
        }
    )
    assert horario.dia_semana is DayOfWeek.MIERCOLES
    assert horario.duracion_turno == 30
    assert horario.doctor.id == seed.doctor_id

    with pytest.raises(InvalidInputError):
        await schedules.update_schedule(horario.id, {"hora_fin": time(8)})
    with pytest.raises(NotFoundError):
        await schedules.create(
            {"id_doctor": 99, "id_consultorio": seed.office_id, "dia_semana": "lunes",
             "hora_inicio": time(9), "hora_fin": time(10)}
        )

    page = PageRequest.build()
    assert (await schedules.find_by_day("miercoles", page)).total == 1
    assert (await schedules.find_by_doctor(seed.other_doctor_id, page)).total == 0
    assert (await schedules.find_by_office(seed.office_id, page)).total == 1

    await schedules.delete(horario.id)
    assert (await schedules.list(page)).total == 0
