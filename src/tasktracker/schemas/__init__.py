"""Pydantic schemas for public interfaces."""

from __future__ import annotations

from .auth import AuthResponse, LoginRequest, RegisterRequest, TokenPayload
from .system import ErrorResponse, HealthCheckResponse, MessageResponse, RootResponse
from .task import TaskCreate, TaskListResponse, TaskRead, TaskUpdate
from .user import UserPublic

__all__ = [
    "AuthResponse",
    "ErrorResponse",
    "HealthCheckResponse",
    "LoginRequest",
    "MessageResponse",
    "RegisterRequest",
    "RootResponse",
    "TaskCreate",
    "TaskListResponse",
    "TaskRead",
    "TaskUpdate",
    "TokenPayload",
    "UserPublic",
]
