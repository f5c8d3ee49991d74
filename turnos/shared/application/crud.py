"""
Generic application services over a SQLAlchemyRepository.

CrudService covers lookup tables that are hard-deleted (specialties,
coverage plans, slot templates). SoftDeleteService adds the shared
Active/Inactive lifecycle used by appointments, doctors, patients, offices,
insurers and user accounts.
"""
from __future__ import annotations

from typing import Any, ClassVar, Dict, Generic, Mapping, Sequence, Tuple, TypeVar

from sqlalchemy.sql.elements import ColumnElement

from turnos.shared.database.repository import SQLAlchemyRepository
from turnos.shared.domain.lifecycle import LifecycleStatus
from turnos.shared.exceptions import NotFoundError
from turnos.shared.logging import get_logger
from turnos.shared.pagination import Page, PageRequest

logger = get_logger(__name__)

TModel = TypeVar("TModel")


class CrudService(Generic[TModel]):
    entity_label: ClassVar[str] = "Record"
    relations: ClassVar[Tuple[str, ...]] = ()

    def __init__(self, repository: SQLAlchemyRepository) -> None:
        self.repository = repository

    def _not_found(self, key: Any) -> NotFoundError:
        return NotFoundError(f"{self.entity_label} {key} not found", details={"id": str(key)})

    async def get(self, key: Any, *, include_inactive: bool = False) -> TModel:
        model = await self.repository.find_by_id(
            key, relations=self.relations, include_inactive=include_inactive
        )
        if model is None:
            raise self._not_found(key)
        return model

    async def list(
        self,
        page: PageRequest,
        *,
        include_inactive: bool = False,
        criteria: Sequence[ColumnElement] = (),
    ) -> Page:
        items, total = await self.repository.find_many(
            criteria, page, relations=self.relations, include_inactive=include_inactive
        )
        return Page.of(items, total, page)

    @staticmethod
    def _apply(model: TModel, fields: Mapping[str, Any]) -> TModel:
        for name, value in fields.items():
            setattr(model, name, value)
        return model

    async def _store(self, model: TModel) -> TModel:
        saved = await self.repository.save(model)
        if self.relations:
            saved = await self.repository.reload(saved, self.relations)
        return saved

    async def update(self, key: Any, fields: Dict[str, Any], *, include_inactive: bool = False) -> TModel:
        model = await self.get(key, include_inactive=include_inactive)
        self._apply(model, fields)
        return await self._store(model)

    async def delete(self, key: Any) -> None:
        model = await self.get(key, include_inactive=True)
        await self.repository.delete(model)
        logger.info(f"{self.entity_label} deleted", key=str(key))


class SoftDeleteService(CrudService[TModel]):
    """
    Soft delete semantics:
    - soft_delete(key) flips the row to INACTIVE; repeating it is a no-op
    - restore(key) only finds INACTIVE rows; anything else is NotFound
    - reads hide INACTIVE rows unless include_inactive is set
    """

    async def list_inactive(self, page: PageRequest, *, criteria: Sequence[ColumnElement] = ()) -> Page:
        model_class = self.repository.model_class
        return await self.list(
            page,
            include_inactive=True,
            criteria=(*criteria, model_class.is_active.is_(False)),
        )

    async def soft_delete(self, key: Any) -> TModel:
        model = await self.get(key, include_inactive=True)
        if model.status is LifecycleStatus.ACTIVE:
            model.deactivate()
            await self.repository.save(model)
            logger.info(f"{self.entity_label} deactivated", key=str(key))
        return model

    async def restore(self, key: Any) -> TModel:
        model = await self.repository.find_by_id(key, relations=self.relations)
        if model is None or model.status is LifecycleStatus.ACTIVE:
            raise NotFoundError(f"Inactive {self.entity_label.lower()} {key} not found", details={"id": str(key)})
        model.reactivate()
        restored = await self._store(model)
        logger.info(f"{self.entity_label} restored", key=str(key))
        return restored
