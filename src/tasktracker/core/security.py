"""Security helpers for password hashing and JWT token management."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any
from uuid import uuid4

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from .config import Settings


class PasswordHasher:
    """One-way salted password hashing backed by passlib's bcrypt handler."""

    def __init__(self, *, rounds: int = 12) -> None:
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        """Return a salted hash of ``password``; each call draws a fresh salt."""
        return self._context.hash(password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a plain password against its hashed counterpart."""
        try:
            return self._context.verify(plain_password, hashed_password)
        except (ValueError, TypeError):
            return False

    def dummy_verify(self) -> None:
        """Spend the cost of one verification without a stored hash."""
        self._context.dummy_verify()


@lru_cache(maxsize=8)
def _hasher_for_rounds(rounds: int) -> PasswordHasher:
    return PasswordHasher(rounds=rounds)


def get_password_hasher(settings: Settings) -> PasswordHasher:
    """Return the shared hasher configured with the settings' cost factor."""
    return _hasher_for_rounds(settings.password_hash_rounds)


@dataclass(slots=True)
class GeneratedToken:
    """Represents a generated JWT token with associated metadata."""

    token: str
    expires_at: datetime
    jti: str


def create_access_token(
    *,
    subject: str | int,
    settings: Settings,
    expires_delta: timedelta | None = None,
) -> GeneratedToken:
    """Create a signed JWT access token asserting ``subject`` as the caller."""
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    expire = now + expires_delta
    payload: dict[str, Any] = {
        "sub": str(subject),
        "iat": now,
        "exp": expire,
        "jti": uuid4().hex,
    }
    token = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return GeneratedToken(token=token, expires_at=expire, jti=payload["jti"])


def decode_token(*, token: str, secret: str, algorithm: str) -> dict[str, Any]:
    """Decode a JWT token and return its payload.

    Raises ``ExpiredSignatureError`` for expired tokens and ``JWTError`` for
    any other signature or format problem.
    """
    return jwt.decode(token, secret, algorithms=[algorithm])


__all__ = [
    "ExpiredSignatureError",
    "GeneratedToken",
    "JWTError",
    "PasswordHasher",
    "create_access_token",
    "decode_token",
    "get_password_hasher",
]
