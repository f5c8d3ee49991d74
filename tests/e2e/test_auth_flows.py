PASSWORD = "secreto123"


async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}

    db = await client.get("/health/db")
    assert db.status_code == 200
    assert db.json()["status"] == "ok"


async def test_register_login_me(client, seed):
    r = await client.post(
        "/auth/register",
        json={"email": "Nueva@Mail.com.ar", "password": "clave123", "rol": "Paciente", "idReferencia": seed.other_dni},
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == "nueva@mail.com.ar"
    assert body["user"]["rol"] == "paciente"
    assert body["user"]["idReferencia"] == seed.other_dni
    assert "password" not in r.text and "passwordHash" not in r.text

    login = await client.post("/auth/login", json={"email": "nueva@mail.com.ar", "password": "clave123"})
    assert login.status_code == 200
    token = login.json()["access_token"]

    me = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["id"] == body["user"]["id"]


async def test_register_rejects_bad_payloads(client, seed):
    short = await client.post("/auth/register", json={"email": "a@mail.com.ar", "password": "123", "rol": "admin"})
    assert short.status_code == 422

    role = await client.post("/auth/register", json={"email": "a@mail.com.ar", "password": "123456", "rol": "root"})
    assert role.status_code == 422

    doctor = await client.post(
        "/auth/register", json={"email": "a@mail.com.ar", "password": "123456", "rol": "doctor", "idReferencia": "77"}
    )
    assert doctor.status_code == 400

    dup = await client.post("/auth/register", json={"email": "admin@clinica.com.ar", "password": "123456", "rol": "admin"})
    assert dup.status_code == 409


async def test_login_failure(client, seed):
    r = await client.post("/auth/login", json={"email": "admin@clinica.com.ar", "password": "mala"})
    assert r.status_code == 401
    assert r.json()["code"] == "invalid_credentials"

    ok = await client.post("/auth/login", json={"email": "ADMIN@clinica.com.ar", "password": PASSWORD})
    assert ok.status_code == 200


async def test_me_requires_token(client, seed):
    assert (await client.get("/auth/me")).status_code == 401
    bad = await client.get("/auth/me", headers={"Authorization": "Bearer not.a.jwt"})
    assert bad.status_code == 401


async def test_deactivated_account_token_is_rejected(client, seed):
    paciente = seed.headers["paciente"]
    assert (await client.get("/auth/me", headers=paciente)).status_code == 200

    r = await client.delete(f"/usuarios/{seed.users['paciente']}", headers=seed.headers["admin"])
    assert r.status_code == 204
    assert (await client.get("/auth/me", headers=paciente)).status_code == 401

    restored = await client.patch(f"/usuarios/{seed.users['paciente']}/restaurar", headers=seed.headers["admin"])
    assert restored.status_code == 200
    assert restored.json()["isActive"] is True
    assert (await client.get("/auth/me", headers=paciente)).status_code == 200


async def test_role_change_applies_to_existing_token(client, seed):
    staff = seed.headers["secretaria"]
    assert (await client.get("/turnos", headers=staff)).status_code == 200

    demoted = await client.patch(
        f"/usuarios/{seed.users['secretaria']}",
        json={"rol": "paciente", "idReferencia": seed.other_dni},
        headers=seed.headers["admin"],
    )
    assert demoted.status_code == 200, demoted.text
    assert (await client.get("/turnos", headers=staff)).status_code == 403
    assert (await client.get("/pacientes", headers=staff)).status_code == 403


async def test_user_admin_is_admin_only(client, seed):
    assert (await client.get("/usuarios", headers=seed.headers["secretaria"])).status_code == 403
    assert (await client.get("/usuarios")).status_code == 401

    r = await client.get("/usuarios", headers=seed.headers["admin"])
    assert r.status_code == 200
    assert r.json()["total"] == 4

    created = await client.post(
        "/usuarios",
        headers=seed.headers["admin"],
        json={"email": "dra.perez@clinica.com.ar", "password": "clave123", "rol": "doctor", "idReferencia": "2"},
    )
    assert created.status_code == 201, created.text
    user_id = created.json()["id"]

    patched = await client.patch(f"/usuarios/{user_id}", headers=seed.headers["admin"], json={"nombre": "Dra. Perez"})
    assert patched.json()["nombre"] == "Dra. Perez"
    assert patched.json()["idReferencia"] == "2"

    await client.delete(f"/usuarios/{user_id}", headers=seed.headers["admin"])
    inactive = await client.get("/usuarios/inactivos", headers=seed.headers["admin"])
    assert [u["id"] for u in inactive.json()["data"]] == [user_id]
