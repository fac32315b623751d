"""Service layer orchestrating user-related repository operations."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.security import PasswordHasher
from ..errors import ConflictError
from ..models import User
from ..repositories import UserRepository

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "User already exists with this email"


class UserService:
    """High-level business operations for ``User`` entities."""

    def __init__(self, session: AsyncSession, hasher: PasswordHasher) -> None:
        self._session = session
        self._hasher = hasher
        self._repository = UserRepository(session)

    async def create_user(self, *, name: str, email: str, password: str) -> User:
        """Hash the password and persist a new account.

        ``email`` must already be normalised. A concurrent insert that slips
        past the existence check is caught by the unique constraint and
        reported the same way.
        """
        if await self._repository.get_by_email(email) is not None:
            raise ConflictError(DUPLICATE_EMAIL_MESSAGE)
        user = User(name=name, email=email, hashed_password=self._hasher.hash(password))
        try:
            await self._repository.add(user)
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            logger.warning("Duplicate email rejected by unique constraint")
            raise ConflictError(DUPLICATE_EMAIL_MESSAGE) from exc
        await self._repository.refresh(user)
        return user

    async def get_user(self, user_id: int) -> User | None:
        """Fetch a user by primary key."""
        return await self._repository.get(user_id)

    async def get_user_by_email(self, email: str) -> User | None:
        """Fetch a user by their normalised email address."""
        return await self._repository.get_by_email(email)


__all__ = ["DUPLICATE_EMAIL_MESSAGE", "UserService"]
