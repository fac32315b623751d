"""Authentication service encapsulating registration, login and token checks."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic import ValidationError as PydanticValidationError
from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.config import Settings
from ..core.security import (
    GeneratedToken,
    JWTError,
    create_access_token,
    decode_token,
    get_password_hasher,
)
from ..errors import ApplicationError, AuthenticationError
from ..models import User
from ..schemas.auth import TokenPayload
from .users import UserService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
TOKEN_FAILED_MESSAGE = "Not authorized, token failed"


@dataclass(slots=True)
class AuthResult:
    """An authenticated account together with its freshly issued token."""

    user: User
    token: GeneratedToken


class AuthService:
    """High-level authentication workflows."""

    def __init__(self, session: AsyncSession, settings: Settings) -> None:
        self._session = session
        self._settings = settings
        self._hasher = get_password_hasher(settings)
        self._user_service = UserService(session, self._hasher)

    def issue_token(self, user: User) -> GeneratedToken:
        if user.id is None:
            raise ApplicationError("User must be persisted before issuing tokens.")
        return create_access_token(subject=user.id, settings=self._settings)

    async def register(self, *, name: str, email: str, password: str) -> AuthResult:
        """Create an account and sign the caller in immediately."""
        user = await self._user_service.create_user(name=name, email=email, password=password)
        logger.info("User registered", extra={"registered_user_id": user.id})
        return AuthResult(user=user, token=self.issue_token(user))

    async def login(self, *, email: str, password: str) -> AuthResult:
        """Exchange credentials for a token.

        An unknown email and a wrong password fail identically, and the
        unknown-email path still pays for one hash verification.
        """
        user = await self._user_service.get_user_by_email(email)
        if user is None:
            self._hasher.dummy_verify()
            logger.warning("Login failed")
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)
        if not self._hasher.verify(password, user.hashed_password):
            logger.warning("Login failed")
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)
        return AuthResult(user=user, token=self.issue_token(user))

    async def resolve_token(self, token: str) -> User:
        """Return the account a bearer token was issued for.

        Expired, tampered or malformed tokens and tokens whose account no
        longer exists all raise ``AuthenticationError``.
        """
        try:
            claims = decode_token(
                token=token,
                secret=self._settings.jwt_secret_key,
                algorithm=self._settings.jwt_algorithm,
            )
            payload = TokenPayload.model_validate(claims)
        except (JWTError, PydanticValidationError) as exc:
            raise AuthenticationError(TOKEN_FAILED_MESSAGE) from exc
        user = await self._user_service.get_user(payload.sub)
        if user is None:
            raise AuthenticationError(TOKEN_FAILED_MESSAGE)
        return user


__all__ = ["AuthResult", "AuthService", "INVALID_CREDENTIALS_MESSAGE", "TOKEN_FAILED_MESSAGE"]
