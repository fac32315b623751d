"""Service layer encapsulating task-related operations."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import NotFoundError
from ..models import Task, TaskPriority, TaskStatus
from ..repositories import TaskQuery, TaskRepository, TaskSortField

logger = logging.getLogger(__name__)

TASK_NOT_FOUND_MESSAGE = "Task not found"

_MUTABLE_FIELDS = frozenset({"title", "description", "priority", "status"})


@dataclass(slots=True)
class TaskPage:
    """A page of tasks plus the number of tasks matching the filters."""

    total: int
    page: int
    limit: int
    tasks: list[Task]


def _parse_filter(enum_type: type[TaskStatus] | type[TaskPriority], raw: str | None) -> Any:
    if raw is None or raw == "":
        return None
    return enum_type(raw)


class TaskService:
    """Ownership-enforcing business operations for ``Task`` entities."""

    def __init__(self, session: AsyncSession, *, max_page_size: int = 100) -> None:
        self._session = session
        self._repository = TaskRepository(session)
        self._max_page_size = max_page_size

    async def create_task(
        self,
        *,
        owner_id: int,
        title: str,
        description: str | None = None,
        priority: TaskPriority | None = None,
        status: TaskStatus | None = None,
    ) -> Task:
        """Create a new task belonging to the specified owner."""
        task = Task(
            owner_id=owner_id,
            title=title,
            description=description,
            priority=priority or TaskPriority.MEDIUM,
            status=status or TaskStatus.PENDING,
        )
        await self._repository.add(task)
        await self._session.commit()
        await self._repository.refresh(task)
        logger.info("Task created", extra={"task_id": task.id})
        return task

    async def list_tasks(
        self,
        owner_id: int,
        *,
        status: str | None = None,
        priority: str | None = None,
        sort_by: str | None = None,
        order: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> TaskPage:
        """Return one page of the owner's tasks.

        Filter values that name no status or priority match nothing. An
        unrecognised ``sort_by`` falls back to creation time and any ``order``
        other than ``asc`` sorts descending. ``limit`` is capped at the
        configured maximum page size.
        """
        limit = min(limit, self._max_page_size)
        try:
            status_filter = _parse_filter(TaskStatus, status)
            priority_filter = _parse_filter(TaskPriority, priority)
        except ValueError:
            return TaskPage(total=0, page=page, limit=limit, tasks=[])
        query = TaskQuery(
            owner_id=owner_id,
            status=status_filter,
            priority=priority_filter,
            sort_by=TaskSortField.parse(sort_by),
            descending=order != "asc",
            page=page,
            limit=limit,
        )
        tasks, total = await self._repository.find(query)
        return TaskPage(total=total, page=page, limit=limit, tasks=tasks)

    async def get_task(self, *, owner_id: int, task_id: int) -> Task:
        """Return the owner's task; foreign and missing tasks are indistinguishable."""
        task = await self._repository.get_for_owner(task_id, owner_id)
        if task is None:
            raise NotFoundError(TASK_NOT_FOUND_MESSAGE)
        return task

    async def update_task(
        self,
        *,
        owner_id: int,
        task_id: int,
        changes: Mapping[str, Any],
    ) -> Task:
        """Apply a merge-patch; keys absent from ``changes`` keep their values."""
        task = await self.get_task(owner_id=owner_id, task_id=task_id)
        applied = {key: value for key, value in changes.items() if key in _MUTABLE_FIELDS}
        if not applied:
            return task
        for field, value in applied.items():
            setattr(task, field, value)
        self._session.add(task)
        await self._session.commit()
        await self._repository.refresh(task)
        logger.info("Task updated", extra={"task_id": task.id, "fields": sorted(applied)})
        return task

    async def delete_task(self, *, owner_id: int, task_id: int) -> None:
        """Permanently delete the owner's task."""
        task = await self.get_task(owner_id=owner_id, task_id=task_id)
        await self._repository.delete(task)
        await self._session.commit()
        logger.info("Task deleted", extra={"task_id": task_id})


__all__ = ["TASK_NOT_FOUND_MESSAGE", "TaskPage", "TaskService"]
