"""Database repositories for encapsulating persistence logic."""

from __future__ import annotations

from .tasks import TaskQuery, TaskRepository, TaskSortField
from .users import UserRepository

__all__ = ["TaskQuery", "TaskRepository", "TaskSortField", "UserRepository"]
