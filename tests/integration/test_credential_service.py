import pytest

from turnos.clinic.application.services import ClinicDirectory
from turnos.clinic.infrastructure.repositories import DoctorRepository, PacienteRepository
from turnos.identity.application.credential_service import CredentialService
from turnos.identity.application.user_service import UserService
from turnos.identity.domain.entities import TokenClaims
from turnos.identity.infrastructure.repositories import IdentityRepository
from turnos.shared.exceptions import ConflictError, InvalidCredentialsError, InvalidInputError, NotFoundError
from turnos.shared.roles import Role


@pytest.fixture
def directory(session):
    return ClinicDirectory(DoctorRepository(session), PacienteRepository(session))


@pytest.fixture
def credentials(app, session, seed, directory):
    return CredentialService(IdentityRepository(session), app.state.passwords, app.state.tokens, directory)


@pytest.fixture
def users(app, session, credentials, directory):
    return UserService(IdentityRepository(session), credentials, app.state.passwords, directory)


def decode(app, token) -> TokenClaims:
    return TokenClaims.from_payload(app.state.tokens.verify(token))


async def test_register_and_login_round_trip(app, credentials):
    registered = await credentials.register("Nuevo@Mail.com.ar", "clave123", Role.SECRETARIA)
    assert registered.user.email == "nuevo@mail.com.ar"
    assert registered.user.nombre == "Usuario"
    assert registered.user.password_hash != "clave123"

    result = await credentials.login("nuevo@mail.com.ar", "clave123")
    claims = decode(app, result.access_token)
    assert claims.sub == str(registered.user.id)
    assert claims.rol is Role.SECRETARIA
    assert claims.id_referencia is None


async def test_patient_registration_carries_dni(app, credentials, seed):
    result = await credentials.register("otra@mail.com.ar", "clave123", Role.PACIENTE, "Maria", seed.other_dni)
    assert result.user.id_referencia == seed.other_dni
    assert decode(app, result.access_token).id_referencia == seed.other_dni


async def test_doctor_registration_needs_known_doctor(app, credentials, seed):
    with pytest.raises(InvalidInputError):
        await credentials.register("doc@mail.com.ar", "clave123", Role.DOCTOR, id_referencia="999")
    with pytest.raises(InvalidInputError):
        await credentials.register("doc@mail.com.ar", "clave123", Role.DOCTOR, id_referencia="uno")
    with pytest.raises(InvalidInputError):
        await credentials.register("doc@mail.com.ar", "clave123", Role.DOCTOR)

    ok = await credentials.register("doc@mail.com.ar", "clave123", Role.DOCTOR, id_referencia=" 2 ")
    assert decode(app, ok.access_token).doctor_id == seed.other_doctor_id


async def test_unknown_patient_reference(credentials):
    with pytest.raises(InvalidInputError):
        await credentials.register("p@mail.com.ar", "clave123", Role.PACIENTE, id_referencia="12345678")


async def test_staff_reference_is_dropped(credentials, seed):
    result = await credentials.register("jefe@mail.com.ar", "clave123", Role.ADMIN, id_referencia=seed.dni)
    assert result.user.id_referencia is None


async def test_duplicate_email(credentials):
    await credentials.register("dup@mail.com.ar", "clave123", Role.SECRETARIA)
    with pytest.raises(ConflictError):
        await credentials.register("DUP@mail.com.ar", "otra123", Role.SECRETARIA)


async def test_login_failures_share_one_message(credentials, users, seed):
    with pytest.raises(InvalidCredentialsError) as unknown:
        await credentials.login("nadie@mail.com.ar", "secreto123")
    with pytest.raises(InvalidCredentialsError) as wrong:
        await credentials.login("admin@clinica.com.ar", "incorrecta")

    await users.soft_delete(seed.users["secretaria"])
    with pytest.raises(InvalidCredentialsError) as inactive:
        await credentials.login("recepcion@clinica.com.ar", "secreto123")

    assert unknown.value.message == wrong.value.message == inactive.value.message == "Invalid credentials"
    assert unknown.value.status_code == 401


async def test_validate(credentials, users, seed):
    assert (await credentials.validate(seed.users["admin"])).rol is Role.ADMIN
    with pytest.raises(NotFoundError):
        await credentials.validate(9999)
    await users.soft_delete(seed.users["doctor"])
    with pytest.raises(NotFoundError):
        await credentials.validate(seed.users["doctor"])


async def test_user_update_revalidates_reference(users, seed):
    user_id = seed.users["secretaria"]
    with pytest.raises(InvalidInputError):
        await users.update_user(user_id, {"rol": Role.DOCTOR})

    updated = await users.update_user(user_id, {"rol": Role.DOCTOR, "id_referencia": "2", "nombre": "  "})
    assert updated.rol is Role.DOCTOR
    assert updated.id_referencia == "2"
    assert updated.nombre == "Usuario"

    back = await users.update_user(user_id, {"rol": Role.ADMIN})
    assert back.id_referencia is None


async def test_user_update_password_and_email(credentials, users, seed):
    user_id = seed.users["admin"]
    with pytest.raises(ConflictError):
        await users.update_user(user_id, {"email": "recepcion@clinica.com.ar"})

    await users.update_user(user_id, {"password": "nueva-clave", "email": "root@clinica.com.ar"})
    result = await credentials.login("root@clinica.com.ar", "nueva-clave")
    assert result.user.id == user_id


async def test_user_restore(users, seed):
    user_id = seed.users["paciente"]
    with pytest.raises(NotFoundError):
        await users.restore(user_id)
    await users.soft_delete(user_id)
    assert (await users.restore(user_id)).is_active is True
