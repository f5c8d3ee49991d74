from datetime import date
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient

from turnos.clinic.infrastructure.models import (
    CoberturaModel,
    ConsultorioModel,
    DoctorModel,
    ObraSocialModel,
    PacienteModel,
)
from turnos.clinic.infrastructure.repositories import (
    ConsultorioRepository,
    DoctorRepository,
    PacienteRepository,
)
from turnos.config import Settings
from turnos.identity.infrastructure.models import UsuarioModel
from turnos.main import create_app
from turnos.scheduling.application.appointment_service import AppointmentService
from turnos.scheduling.infrastructure.repositories import AppointmentRepository
from turnos.shared.roles import Role

TEST_SECRET = "test-secret-that-is-long-enough-for-hs256-signing"
PASSWORD = "secreto123"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'turnos.db'}",
        ENVIRONMENT="test",
        LOG_LEVEL="WARNING",
        JWT_SECRET=TEST_SECRET,
        AUTO_CREATE_SCHEMA=False,
        PASSWORD_HASH_TIME_COST=1,
        PASSWORD_HASH_MEMORY_COST=8,
        PASSWORD_HASH_PARALLELISM=1,
    )


@pytest.fixture
async def app(settings):
    application = create_app(settings)
    await application.state.db.create_schema()
    yield application
    await application.state.db.dispose()


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def session(app):
    async with app.state.db.session() as s:
        yield s


@pytest.fixture
async def seed(app):
    """
    Reference data plus one account per role.

    doctor 1 (linked account) and doctor 2, patients 30111222 (linked account)
    and 40999888, office 1, coverage plan 1, insurer OS001.
    """
    passwords = app.state.passwords
    async with app.state.db.session() as s:
        s.add(CoberturaModel(id=1, nombre="Plan 210"))
        s.add(ObraSocialModel(codigo="OS001", nombre="OSDE", email="contacto@osde.com.ar", id_cobertura=1))
        s.add_all(
            [
                DoctorModel(id=1, nombre="Ana", apellido="Gomez", email="ana@clinica.com.ar", matricula="MP-1001"),
                DoctorModel(id=2, nombre="Luis", apellido="Perez", email="luis@clinica.com.ar", matricula="MP-1002"),
                ConsultorioModel(id=1, nombre="Consultorio Norte"),
            ]
        )
        await s.flush()
        s.add_all(
            [
                PacienteModel(
                    dni="30111222",
                    nombre="Juan",
                    apellido="Lopez",
                    fecha_nacimiento=date(1985, 4, 2),
                    telefono="1155550000",
                    codigo_obra_social="OS001",
                    id_cobertura=1,
                ),
                PacienteModel(
                    dni="40999888",
                    nombre="Maria",
                    apellido="Diaz",
                    fecha_nacimiento=date(1990, 9, 15),
                    telefono="1155551111",
                    id_cobertura=1,
                ),
            ]
        )
        accounts = {
            "admin": UsuarioModel(email="admin@clinica.com.ar", rol=Role.ADMIN),
            "secretaria": UsuarioModel(email="recepcion@clinica.com.ar", rol=Role.SECRETARIA),
            "doctor": UsuarioModel(email="ana.user@clinica.com.ar", rol=Role.DOCTOR, id_referencia="1"),
            "paciente": UsuarioModel(email="juan@mail.com.ar", rol=Role.PACIENTE, id_referencia="30111222"),
        }
        for user in accounts.values():
            user.password_hash = passwords.hash(PASSWORD)
            user.nombre = user.email.split("@")[0]
        s.add_all(accounts.values())
        await s.commit()

    tokens = app.state.tokens
    headers = {
        name: {
            "Authorization": "Bearer "
            + tokens.issue(subject=user.id, email=user.email, role=user.rol.value, reference=user.id_referencia)
        }
        for name, user in accounts.items()
    }
    return SimpleNamespace(
        doctor_id=1,
        other_doctor_id=2,
        dni="30111222",
        other_dni="40999888",
        office_id=1,
        insurer="OS001",
        users={name: user.id for name, user in accounts.items()},
        headers=headers,
    )


@pytest.fixture
def make_appointments(session, seed):
    """Build an AppointmentService on the test session, optionally with strict flags."""

    def _build(**flags) -> AppointmentService:
        return AppointmentService(
            AppointmentRepository(session),
            PacienteRepository(session),
            DoctorRepository(session),
            ConsultorioRepository(session),
            **flags,
        )

    return _build


@pytest.fixture
def appointments(make_appointments):
    return make_appointments()
