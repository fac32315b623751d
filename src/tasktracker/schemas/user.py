"""User-facing Pydantic schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class UserPublic(BaseModel):
    """Public representation of a user account; never exposes the password hash."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {"id": 1, "name": "Ada Lovelace", "email": "ada@example.com"},
        },
    )

    id: int
    name: str
    email: str


__all__ = ["UserPublic"]
