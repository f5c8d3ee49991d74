"""
Pagination and sorting parameters shared by every list endpoint.

Parsing is permissive: out-of-range values fall back to defaults instead of
failing the request.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")
S = TypeVar("S", bound=BaseModel)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass(frozen=True)
class PageRequest:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    sort: Optional[str] = None
    order: Optional[str] = None
    filter: Optional[str] = None

    @classmethod
    def build(
        cls,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        sort: Optional[str] = None,
        order: Optional[str] = None,
        filter: Optional[str] = None,
    ) -> "PageRequest":
        page = page if page and page >= 1 else DEFAULT_PAGE
        if not limit or limit < 1:
            limit = DEFAULT_LIMIT
        limit = min(limit, MAX_LIMIT)
        order = order.upper() if order else None
        if order not in ("ASC", "DESC"):
            order = None
        filter = filter.strip() if filter else None
        return cls(page=page, limit=limit, sort=sort or None, order=order, filter=filter or None)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def descending(self) -> bool:
        return self.order == "DESC"

    def with_default_sort(self, sort: str, order: str = "ASC") -> "PageRequest":
        """Fill in sort and order independently, keeping whatever the caller sent."""
        if self.sort and self.order:
            return self
        return PageRequest(self.page, self.limit, self.sort or sort, self.order or order, self.filter)


class Page(BaseModel, Generic[T]):
    """Paginated response: ``{data, total, page, limit}``."""

    data: List[T] = Field(default_factory=list)
    total: int = Field(0, ge=0)
    page: int = Field(DEFAULT_PAGE, ge=1)
    limit: int = Field(DEFAULT_LIMIT, ge=1)

    @classmethod
    def of(cls, items: Sequence[T], total: int, request: PageRequest) -> "Page[T]":
        return cls(data=list(items), total=total, page=request.page, limit=request.limit)

    def to(self, schema: Type[S]) -> "Page[S]":
        """Re-wrap the page validating each item (ORM row) into ``schema``."""
        return Page[schema](
            data=[schema.model_validate(item) for item in self.data],
            total=self.total,
            page=self.page,
            limit=self.limit,
        )
