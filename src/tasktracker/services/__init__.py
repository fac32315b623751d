"""Service layer abstractions for business logic."""

from __future__ import annotations

from .auth import AuthResult, AuthService
from .tasks import TaskPage, TaskService
from .users import UserService

__all__ = ["AuthResult", "AuthService", "TaskPage", "TaskService", "UserService"]
