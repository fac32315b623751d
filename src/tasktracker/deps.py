"""Reusable FastAPI dependencies."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel.ext.asyncio.session import AsyncSession

from .core.config import Settings, get_settings
from .core.context import bind_user_id
from .db.session import get_session
from .errors import AuthenticationError
from .models import User
from .services import AuthService, TaskService

NO_TOKEN_MESSAGE = "Not authorized, no token"

SettingsDependency = Annotated[Settings, Depends(get_settings)]

_bearer_scheme = HTTPBearer(auto_error=False)


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields a database session."""

    async for session in get_session():
        yield session


DatabaseSessionDependency = Annotated[AsyncSession, Depends(get_db_session)]


def get_auth_service(session: DatabaseSessionDependency, settings: SettingsDependency) -> AuthService:
    return AuthService(session, settings)


def get_task_service(session: DatabaseSessionDependency, settings: SettingsDependency) -> TaskService:
    return TaskService(session, max_page_size=settings.task_page_size_max)


AuthServiceDependency = Annotated[AuthService, Depends(get_auth_service)]
TaskServiceDependency = Annotated[TaskService, Depends(get_task_service)]


async def require_current_user(
    request: Request,
    auth_service: AuthServiceDependency,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> User:
    """Resolve the caller from an ``Authorization: Bearer <token>`` header.

    A missing header or a non-bearer scheme is reported separately from a
    token that fails verification or names a vanished account.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(NO_TOKEN_MESSAGE)
    user = await auth_service.resolve_token(credentials.credentials)
    request.state.user_id = user.id
    # Each request runs in its own context, so the binding ends with it.
    bind_user_id(user.id if user.id is not None else "-")
    return user


CurrentUserDependency = Annotated[User, Depends(require_current_user)]


__all__ = [
    "AuthServiceDependency",
    "CurrentUserDependency",
    "DatabaseSessionDependency",
    "NO_TOKEN_MESSAGE",
    "SettingsDependency",
    "TaskServiceDependency",
    "get_auth_service",
    "get_db_session",
    "get_task_service",
    "require_current_user",
]
