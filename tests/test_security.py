from __future__ import annotations

from datetime import timedelta

import pytest

from tasktracker.core.config import Settings
from tasktracker.core.security import (
    ExpiredSignatureError,
    JWTError,
    PasswordHasher,
    create_access_token,
    decode_token,
)


@pytest.fixture()
def token_settings() -> Settings:
    return Settings(environment="test", jwt_secret_key="unit-test-secret", access_token_expire_minutes=5)


def test_password_hasher_round_trip() -> None:
    hasher = PasswordHasher(rounds=4)
    hashed = hasher.hash("s3cret!")

    assert hashed != "s3cret!"
    assert hasher.verify("s3cret!", hashed)
    assert not hasher.verify("other", hashed)
    assert not hasher.verify("s3cret!", "not-a-bcrypt-hash")


def test_access_token_carries_subject_and_expiry(token_settings: Settings) -> None:
    generated = create_access_token(subject=7, settings=token_settings)

    claims = decode_token(
        token=generated.token,
        secret=token_settings.jwt_secret_key,
        algorithm=token_settings.jwt_algorithm,
    )

    assert claims["sub"] == "7"
    assert claims["jti"] == generated.jti
    assert claims["exp"] == int(generated.expires_at.timestamp())


def test_expired_and_foreign_tokens_fail(token_settings: Settings) -> None:
    expired = create_access_token(
        subject=7,
        settings=token_settings,
        expires_delta=timedelta(seconds=-1),
    )
    with pytest.raises(ExpiredSignatureError):
        decode_token(token=expired.token, secret="unit-test-secret", algorithm="HS256")

    fresh = create_access_token(subject=7, settings=token_settings)
    with pytest.raises(JWTError):
        decode_token(token=fresh.token, secret="another-secret", algorithm="HS256")
