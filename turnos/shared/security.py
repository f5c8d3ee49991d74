"""
Token and password primitives.

TokenService signs/verifies HS256 JWTs (PyJWT); PasswordService hashes with
argon2id (argon2-cffi). Both are plain objects built from Settings and passed
to the services that need them.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from turnos.shared.exceptions import UnauthorizedError
from turnos.shared.logging import get_logger

logger = get_logger(__name__)


class TokenService:
    """
    JWT token generation and validation service.

    Payload contract: sub (identity id as string), email, rol, idReferencia,
    iat, exp. No secret material is ever placed in a token.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expires_minutes: int = 1440) -> None:
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_minutes = expires_minutes

    def issue(
        self,
        *,
        subject: Any,
        email: str,
        role: str,
        reference: Optional[str] = None,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """
        Issue a signed access token.

        Args:
            subject: Identity id; stored as string in ``sub``
            email: Identity email
            role: Role value (admin, doctor, secretaria, paciente)
            reference: Doctor id or patient DNI for linked roles
            expires_delta: Overrides the configured lifetime

        Returns:
            Encoded JWT string
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.expires_minutes))
        payload: Dict[str, Any] = {
            "sub": str(subject),
            "email": email,
            "rol": role,
            "idReferencia": reference,
            "iat": int(now.timestamp()),
            "exp": int(expire.timestamp()),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        """
        Verify and decode a token.

        Raises:
            UnauthorizedError: expired, malformed or badly signed token
        """
        try:
            return jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            logger.info("JWT token expired")
            raise UnauthorizedError("Token expired", code="expired_token")
        except jwt.InvalidTokenError as e:
            logger.warning("Invalid JWT token", error=str(e))
            raise UnauthorizedError("Invalid token", code="invalid_token")


class PasswordService:
    """Password hashing with argon2id."""

    def __init__(self, time_cost: int = 3, memory_cost: int = 65536, parallelism: int = 4) -> None:
        self._hasher = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            hash_len=32,
            salt_len=16,
        )

    def hash(self, plain_password: str) -> str:
        return self._hasher.hash(plain_password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        try:
            return self._hasher.verify(hashed_password, plain_password)
        except VerifyMismatchError:
            return False
        except (VerificationError, InvalidHashError):
            logger.warning("Password hash could not be verified")
            return False

    def needs_rehash(self, hashed_password: str) -> bool:
        return self._hasher.check_needs_rehash(hashed_password)
