from datetime import timedelta

import jwt
import pytest

from turnos.shared.exceptions import UnauthorizedError
from turnos.shared.security import PasswordService, TokenService

SECRET = "unit-test-secret-with-enough-length-for-hs256"


def test_token_payload_contract():
    token = TokenService(SECRET).issue(subject=3, email="p@mail.com.ar", role="paciente", reference="30111222")
    payload = jwt.decode(token, SECRET, algorithms=["HS256"])
    assert payload["sub"] == "3"
    assert payload["rol"] == "paciente"
    assert payload["idReferencia"] == "30111222"
    assert payload["exp"] - payload["iat"] == 1440 * 60


def test_expired_token():
    svc = TokenService(SECRET)
    token = svc.issue(subject=1, email="a@example.com", role="admin", expires_delta=timedelta(minutes=-1))
    with pytest.raises(UnauthorizedError) as exc:
        svc.verify(token)
    assert exc.value.code == "expired_token"


def test_tampered_token():
    svc = TokenService(SECRET)
    token = svc.issue(subject=1, email="a@example.com", role="admin")
    with pytest.raises(UnauthorizedError) as exc:
        svc.verify(token[:-2] + ("A" if token[-2] != "A" else "B") + token[-1])
    assert exc.value.code == "invalid_token"


def test_password_hash_and_verify():
    passwords = PasswordService(time_cost=1, memory_cost=8, parallelism=1)
    hashed = passwords.hash("secreto123")
    assert hashed.startswith("$argon2id$")
    assert "secreto123" not in hashed
    assert passwords.verify("secreto123", hashed)
    assert not passwords.verify("otra", hashed)
    assert not passwords.verify("secreto123", "not-a-hash")


def test_needs_rehash_when_parameters_change():
    weak = PasswordService(time_cost=1, memory_cost=8, parallelism=1)
    stronger = PasswordService(time_cost=2, memory_cost=16, parallelism=1)
    assert stronger.needs_rehash(weak.hash("x"))
    assert not weak.needs_rehash(weak.hash("x"))
