"""Task-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models import TaskPriority, TaskStatus

TASK_READ_EXAMPLE = {
    "id": 1,
    "title": "Draft product documentation",
    "description": "Outline sections for the public API guide.",
    "priority": TaskPriority.HIGH.value,
    "status": TaskStatus.PENDING.value,
    "owner_id": 42,
    "created_at": "2024-01-01T12:00:00Z",
    "updated_at": "2024-01-02T08:30:00Z",
}


def _strip(value: object) -> object:
    return value.strip() if isinstance(value, str) else value


class TaskCreate(BaseModel):
    """Payload for creating a new task.

    Any ``owner_id`` in the body is ignored; the owner is always the caller.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Draft product documentation",
                "description": "Outline sections for the public API guide.",
                "priority": TaskPriority.HIGH.value,
            }
        }
    )

    title: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None)
    priority: TaskPriority | None = Field(default=None)
    status: TaskStatus | None = Field(default=None)

    @field_validator("title", "description", mode="before")
    @classmethod
    def _strip_text(cls, value: object) -> object:
        return _strip(value)


class TaskUpdate(BaseModel):
    """Merge-patch payload; only the keys actually sent are applied."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Update API documentation",
                "status": TaskStatus.IN_PROGRESS.value,
            }
        }
    )

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None)
    priority: TaskPriority | None = Field(default=None)
    status: TaskStatus | None = Field(default=None)

    @field_validator("title", "description", mode="before")
    @classmethod
    def _strip_text(cls, value: object) -> object:
        return _strip(value)


class TaskRead(BaseModel):
    """Public representation of a task."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={"example": TASK_READ_EXAMPLE},
    )

    id: int
    title: str
    description: str | None = None
    priority: TaskPriority
    status: TaskStatus
    owner_id: int
    created_at: datetime
    updated_at: datetime


class TaskListResponse(BaseModel):
    """One page of the caller's tasks plus the filtered total."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "total": 1,
                "page": 1,
                "limit": 10,
                "tasks": [TASK_READ_EXAMPLE],
            }
        }
    )

    total: int = Field(ge=0)
    page: int = Field(ge=1)
    limit: int = Field(ge=1)
    tasks: list[TaskRead]


__all__ = ["TaskCreate", "TaskListResponse", "TaskRead", "TaskUpdate"]
