"""
Access Control Layer
Turns a bearer token into claims and claims into allow/deny decisions.
Stateless: it only raises, it never touches identity state.
"""
from __future__ import annotations

from typing import Any, Iterable, Optional

from pydantic import ValidationError

from turnos.identity.domain.entities import TokenClaims
from turnos.shared.exceptions import ForbiddenError, UnauthorizedError
from turnos.shared.logging import get_logger, log_security_event
from turnos.shared.roles import role_names
from turnos.shared.security import TokenService

logger = get_logger(__name__)


class AccessControl:
    def __init__(self, tokens: TokenService) -> None:
        self._tokens = tokens

    def decode(self, token: Optional[str]) -> Optional[TokenClaims]:
        """
        Verify signature and expiry.

        Returns:
            Claims, or None when the token is absent, expired, malformed or
            carries an unusable payload (the caller is then anonymous).
        """
        if not token:
            return None
        try:
            return TokenClaims.from_payload(self._tokens.verify(token))
        except UnauthorizedError:
            return None
        except ValidationError:
            logger.warning("Token payload rejected")
            return None

    @staticmethod
    def require_role(claims: Optional[TokenClaims], allowed_roles: Iterable[Any]) -> TokenClaims:
        """
        Raises:
            ForbiddenError: anonymous caller or role not in ``allowed_roles``
        """
        allowed = frozenset(allowed_roles)
        if claims is None or claims.rol not in allowed:
            log_security_event(
                "role_denied",
                user_id=claims.sub if claims else None,
                role=claims.rol.value if claims else None,
                required=role_names(allowed),
            )
            raise ForbiddenError(
                "Insufficient role for this operation",
                details={"required_roles": role_names(allowed)},
            )
        return claims

    @staticmethod
    def require_ownership(claims: Optional[TokenClaims], owner_reference: Any) -> None:
        """
        Doctor/paciente callers may only act on resources whose owner
        reference equals their own; admin and secretaria bypass the check.

        Raises:
            ForbiddenError: anonymous caller or reference mismatch
        """
        if claims is None:
            raise ForbiddenError("Authentication required")
        if claims.is_staff:
            return
        if claims.id_referencia is None or str(owner_reference) != claims.id_referencia:
            log_security_event("ownership_denied", user_id=claims.sub, role=claims.rol.value)
            raise ForbiddenError("You can only access your own resources")

    @staticmethod
    def is_privileged(claims: Optional[TokenClaims]) -> bool:
        """Only admins see (and restore) soft-deleted records."""
        return claims is not None and claims.is_admin
