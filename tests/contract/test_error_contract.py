"""Error body shape and request-id propagation, shared by every endpoint."""


async def test_not_found_body(client, seed):
    r = await client.get("/doctores/999", headers={**seed.headers["admin"], "X-Request-ID": "req-123"})
    assert r.status_code == 404
    body = r.json()
    assert body["code"] == "not_found"
    assert body["message"] == "Doctor 999 not found"
    assert body["details"] == {"id": "999"}
    assert body["correlation_id"] == "req-123"
    assert r.headers["X-Request-ID"] == "req-123"


async def test_request_id_is_generated(client):
    r = await client.get("/health")
    assert r.headers.get("X-Request-ID")
    assert r.headers["X-Response-Time"].endswith("ms")


async def test_validation_error_body(client, seed):
    r = await client.post("/consultorios", json={}, headers=seed.headers["admin"])
    assert r.status_code == 422
    body = r.json()
    assert body["code"] == "validation_error"
    assert body["details"]["errors"]
    assert body["correlation_id"]


async def test_unknown_fields_are_rejected(client, seed):
    r = await client.post("/consultorios", json={"nombre": "Sur", "color": "rojo"}, headers=seed.headers["admin"])
    assert r.status_code == 422


async def test_unauthorized_and_forbidden_bodies(client, seed):
    anonymous = await client.get("/pacientes")
    assert anonymous.status_code == 401
    assert anonymous.json()["code"] == "unauthorized"

    forbidden = await client.get("/pacientes/inactivos", headers=seed.headers["secretaria"])
    assert forbidden.status_code == 403
    assert forbidden.json()["code"] == "forbidden"


async def test_unknown_route_uses_error_shape(client):
    r = await client.get("/no-existe")
    assert r.status_code == 404
    assert r.json()["code"] == "not_found"


async def test_paginated_body_shape(client, seed):
    r = await client.get("/consultorios", params={"page": "abc", "limit": "500"}, headers=seed.headers["paciente"])
    assert r.status_code == 200
    body = r.json()
    assert set(body) == {"data", "total", "page", "limit"}
    assert body["page"] == 1
    assert body["limit"] == 100
    assert body["data"][0] == {"id": 1, "nombre": "Consultorio Norte", "isActive": True}


async def test_openapi_declares_bearer_auth(client):
    schema = (await client.get("/openapi.json")).json()
    assert "bearerAuth" in schema["components"]["securitySchemes"]
