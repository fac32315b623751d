"""Schemas describing authentication payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from .user import UserPublic


class _EmailCredentials(BaseModel):
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def _normalise_email(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class RegisterRequest(_EmailCredentials):
    """Incoming payload for registering a new user."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Ada Lovelace",
                "email": "ada@example.com",
                "password": "analytical",
            }
        }
    )

    name: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=6)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value


class LoginRequest(_EmailCredentials):
    """Credentials submitted to obtain an access token."""

    password: str = Field(min_length=1)


class AuthResponse(BaseModel):
    """Authentication response containing the issued token and user metadata."""

    message: str
    token: str
    user: UserPublic


class TokenPayload(BaseModel):
    """Validated JWT payload."""

    model_config = ConfigDict(extra="ignore")

    sub: int
    exp: datetime
    iat: datetime
    jti: str


__all__ = ["AuthResponse", "LoginRequest", "RegisterRequest", "TokenPayload"]
