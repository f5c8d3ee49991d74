"""
Generic async SQLAlchemy repository.

Storage contract used by every service:
    find_by_id(key, relations)                      -> model | None
    find_many(criteria, page, relations)            -> (items, total)
    save(model)                                     -> model
    delete(model)                                   -> None

Relations are never lazy-loaded implicitly: callers name the relations they
want and the repository eager-loads them with ``selectinload``.
"""
from __future__ import annotations

from typing import Any, ClassVar, Dict, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy import Select, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.interfaces import LoaderOption
from sqlalchemy.sql.elements import ColumnElement

from turnos.shared.database.base import Base
from turnos.shared.exceptions import ConflictError
from turnos.shared.logging import get_logger
from turnos.shared.pagination import PageRequest

logger = get_logger(__name__)

TModel = TypeVar("TModel", bound=Base)


class SQLAlchemyRepository(Generic[TModel]):
    """
    Base repository bound to one ORM model.

    Subclasses set:
        model_class: the mapped class
        sort_fields: public sort key -> column (unknown keys fall back to default_sort)
        default_sort: key into sort_fields
        search_columns: columns matched case-insensitively by ``PageRequest.filter``
    and may override ``_search_joins`` when search_columns live on related tables.
    """

    model_class: ClassVar[Type[Any]]
    sort_fields: ClassVar[Dict[str, Any]] = {}
    default_sort: ClassVar[Optional[str]] = None
    search_columns: ClassVar[Tuple[Any, ...]] = ()
    conflict_message: ClassVar[str] = "Record conflicts with an existing one"
    conflict_error: ClassVar[Type[ConflictError]] = ConflictError

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @property
    def _name(self) -> str:
        return self.model_class.__name__

    @property
    def _soft_deletable(self) -> bool:
        return hasattr(self.model_class, "is_active")

    def _load_options(self, relations: Sequence[str]) -> List[LoaderOption]:
        """Build eager-load options; dotted names ('doctor.especialidades') load nested relations."""
        options: List[LoaderOption] = []
        for relation in relations:
            owner = self.model_class
            loader = None
            for part in relation.split("."):
                attr = getattr(owner, part)
                loader = selectinload(attr) if loader is None else loader.selectinload(attr)
                owner = attr.property.mapper.class_
            if loader is not None:
                options.append(loader)
        return options

    def _visibility(self, stmt: Select, include_inactive: bool) -> Select:
        if self._soft_deletable and not include_inactive:
            stmt = stmt.where(self.model_class.is_active.is_(True))
        return stmt

    def _search_joins(self, stmt: Select) -> Select:
        return stmt

    def _search(self, stmt: Select, term: Optional[str]) -> Select:
        if not term or not self.search_columns:
            return stmt
        stmt = self._search_joins(stmt)
        clauses = [column.icontains(term, autoescape=True) for column in self.search_columns]
        return stmt.where(or_(*clauses))

    def _ordering(self, page: PageRequest) -> List[Any]:
        key = page.sort if page.sort in self.sort_fields else self.default_sort
        order: List[Any] = []
        if key is not None:
            column = self.sort_fields[key]
            order.append(column.desc() if page.descending else column.asc())
        order.extend(self.model_class.__mapper__.primary_key)
        return order

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def find_by_id(
        self,
        key: Any,
        *,
        relations: Sequence[str] = (),
        include_inactive: bool = True,
    ) -> Optional[TModel]:
        """
        Fetch one row by primary key.

        Args:
            key: primary key value
            relations: relation names to eager-load
            include_inactive: when False a soft-deleted row is reported as missing

        Returns:
            The model, or None
        """
        try:
            pk = self.model_class.__mapper__.primary_key[0]
            stmt = select(self.model_class).where(pk == key)
            stmt = self._visibility(stmt, include_inactive)
            stmt = stmt.options(*self._load_options(relations)).execution_options(populate_existing=True)
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get {self._name}", key=str(key), error=str(e))
            raise

    async def find_one(self, *criteria: ColumnElement, relations: Sequence[str] = (), **filters: Any) -> Optional[TModel]:
        stmt = select(self.model_class)
        for key, value in filters.items():
            stmt = stmt.where(getattr(self.model_class, key) == value)
        if criteria:
            stmt = stmt.where(*criteria)
        stmt = stmt.options(*self._load_options(relations)).limit(1)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def exists(self, *criteria: ColumnElement, **filters: Any) -> bool:
        stmt = select(func.count()).select_from(self.model_class)
        for key, value in filters.items():
            stmt = stmt.where(getattr(self.model_class, key) == value)
        if criteria:
            stmt = stmt.where(*criteria)
        result = await self.session.execute(stmt)
        return (result.scalar_one() or 0) > 0

    async def find_many(
        self,
        criteria: Sequence[ColumnElement] = (),
        page: Optional[PageRequest] = None,
        *,
        relations: Sequence[str] = (),
        include_inactive: bool = False,
    ) -> Tuple[List[TModel], int]:
        """
        Filter, search, sort and paginate.

        Args:
            criteria: extra WHERE clauses (equality/range filters)
            page: pagination, sort and free-text filter; defaults apply when None
            relations: relation names to eager-load
            include_inactive: include soft-deleted rows

        Returns:
            (items for the requested page, total matching rows)
        """
        page = page or PageRequest()
        try:
            stmt = select(self.model_class)
            stmt = self._visibility(stmt, include_inactive)
            if criteria:
                stmt = stmt.where(*criteria)
            stmt = self._search(stmt, page.filter)

            count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
            total = (await self.session.execute(count_stmt)).scalar_one()

            stmt = (
                stmt.options(*self._load_options(relations))
                .order_by(*self._ordering(page))
                .offset(page.offset)
                .limit(page.limit)
            )
            result = await self.session.execute(stmt)
            return list(result.scalars().unique().all()), int(total)
        except Exception as e:
            logger.error(f"Failed to list {self._name}", error=str(e))
            raise

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    async def save(self, model: TModel) -> TModel:
        """
        Insert or update ``model`` and flush.

        Raises:
            ConflictError: a unique constraint was violated
        """
        try:
            self.session.add(model)
            await self.session.flush()
            return model
        except IntegrityError as e:
            logger.warning(f"Integrity error saving {self._name}", error=str(e.orig))
            raise self.conflict_error(self.conflict_message) from e
        except Exception as e:
            logger.error(f"Failed to save {self._name}", error=str(e))
            raise

    async def delete(self, model: TModel) -> None:
        """Hard delete. Soft-deletable models use ``deactivate()`` + ``save()`` instead."""
        try:
            await self.session.delete(model)
            await self.session.flush()
        except IntegrityError as e:
            logger.warning(f"Integrity error deleting {self._name}", error=str(e.orig))
            raise ConflictError(f"{self._name} is still referenced by other records") from e

    async def reload(self, model: TModel, relations: Sequence[str]) -> TModel:
        """Re-read a flushed row with the given relations loaded."""
        pk = self.model_class.__mapper__.primary_key[0]
        key = getattr(model, self.model_class.__mapper__.get_property_by_column(pk).key)
        fresh = await self.find_by_id(key, relations=relations)
        return fresh if fresh is not None else model
