"""Account lookups."""

from __future__ import annotations

from ..models import User
from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User

    async def get_by_email(self, email: str) -> User | None:
        """Return the user whose stored (already normalised) email equals ``email``."""
        return await self._first(User.email == email)
