"""
Standard API models.
Field names are snake_case in Python and camelCase on the wire.
"""
from __future__ import annotations

from typing import Any, ClassVar, Dict, FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Response base: reads ORM rows, serializes camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ApiRequest(BaseModel):
    """Request base: camelCase or snake_case input, unknown fields rejected."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    # fields an update may explicitly clear with null
    nullable_fields: ClassVar[FrozenSet[str]] = frozenset()

    def changes(self) -> Dict[str, Any]:
        """Fields the client actually sent, keyed by attribute name."""
        sent = self.model_dump(exclude_unset=True)
        return {k: v for k, v in sent.items() if v is not None or k in self.nullable_fields}


class ErrorDetail(BaseModel):
    """Body of every non-2xx response."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error context")
    correlation_id: Optional[str] = Field(None, description="X-Request-ID of the failed request")


ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    400: {"model": ErrorDetail, "description": "Invalid input"},
    401: {"model": ErrorDetail, "description": "Missing or invalid token"},
    403: {"model": ErrorDetail, "description": "Role or ownership check failed"},
    404: {"model": ErrorDetail, "description": "Not found"},
}
