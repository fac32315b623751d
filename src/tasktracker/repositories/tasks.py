"""Repository for interacting with task persistence models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

import sqlalchemy as sa
from sqlalchemy import select

from ..models import Task, TaskPriority, TaskStatus
from .base import BaseRepository


class TaskSortField(str, Enum):
    """Fields a task listing may be ordered by."""

    CREATED_AT = "createdAt"
    PRIORITY = "priority"

    @classmethod
    def parse(cls, raw: str | None) -> "TaskSortField":
        """Map a client supplied field name, falling back to ``createdAt``."""
        try:
            return cls(raw)
        except ValueError:
            return cls.CREATED_AT


@dataclass(frozen=True, slots=True)
class TaskQuery:
    """Owner-scoped filter, sort and pagination request for task listings."""

    owner_id: int
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    sort_by: TaskSortField = TaskSortField.CREATED_AT
    descending: bool = True
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _priority_rank() -> Any:
    return sa.case(
        *[(Task.priority == priority, priority.rank) for priority in TaskPriority],
        else_=-1,
    )


class TaskRepository(BaseRepository[Task]):
    """Owner-scoped task queries."""

    model = Task

    def _conditions(self, query: TaskQuery) -> list[Any]:
        conditions: list[Any] = [Task.owner_id == query.owner_id]
        if query.status is not None:
            conditions.append(Task.status == query.status)
        if query.priority is not None:
            conditions.append(Task.priority == query.priority)
        return conditions

    def _ordering(self, query: TaskQuery) -> list[Any]:
        columns: list[Any] = []
        if query.sort_by is TaskSortField.PRIORITY:
            columns.append(_priority_rank())
        columns.extend([Task.created_at, Task.id])
        if query.descending:
            return [sa.desc(column) for column in columns]
        return [sa.asc(column) for column in columns]

    async def find(self, query: TaskQuery) -> tuple[list[Task], int]:
        """Return one page of tasks matching ``query`` and the filtered total."""
        conditions = self._conditions(query)
        statement = (
            select(Task)
            .where(*conditions)
            .order_by(*self._ordering(query))
            .offset(query.offset)
            .limit(query.limit)
        )
        return await self._all(statement), await self._count(*conditions)

    async def get_for_owner(self, task_id: int, owner_id: int) -> Task | None:
        """Retrieve a task by ID only if it belongs to the provided owner."""
        return await self._first(Task.id == task_id, Task.owner_id == owner_id)
