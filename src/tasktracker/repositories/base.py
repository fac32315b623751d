"""Shared plumbing for repositories bound to one SQLModel table."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from sqlalchemy import Select, func, select
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """Wrap an ``AsyncSession``; flushing is the repository's job, committing the caller's."""

    model: type[ModelType]

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def get(self, entity_id: int) -> ModelType | None:
        return await self._session.get(self.model, entity_id)

    async def add(self, instance: ModelType) -> ModelType:
        """Stage ``instance`` and flush so generated keys are populated."""
        self._session.add(instance)
        await self._session.flush()
        return instance

    async def delete(self, instance: ModelType) -> None:
        await self._session.delete(instance)
        await self._session.flush()

    async def refresh(self, instance: ModelType) -> ModelType:
        await self._session.refresh(instance)
        return instance

    async def _first(self, *conditions: Any) -> ModelType | None:
        result = await self._session.execute(select(self.model).where(*conditions))
        return result.scalar_one_or_none()

    async def _all(self, statement: Select[Any]) -> list[ModelType]:
        result = await self._session.execute(statement)
        return list(result.scalars().all())

    async def _count(self, *conditions: Any) -> int:
        statement = select(func.count()).select_from(self.model).where(*conditions)
        result = await self._session.execute(statement)
        return int(result.scalar_one())
