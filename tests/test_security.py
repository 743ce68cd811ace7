import time
from datetime import timedelta

import jwt
import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from core.config import Settings
from core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def test_hash_is_salted_and_verifiable():
    first = hash_password("hunter2")
    second = hash_password("hunter2")

    assert first != "hunter2"
    assert first != second
    assert verify_password("hunter2", first)
    assert verify_password("hunter2", second)
    assert not verify_password("hunter3", first)


def test_hash_uses_configured_work_factor():
    assert "$1000$" in hash_password("pw")


def test_verify_rejects_corrupt_digest():
    with pytest.raises(ValueError):
        verify_password("pw", "not-a-real-hash")


def test_token_round_trip():
    token = create_access_token({"sub": "7", "user_id": 7, "role": "user"})
    claims = decode_access_token(token)

    assert claims["user_id"] == 7
    assert claims["role"] == "user"
    assert "exp" in claims


def test_default_expiry_is_one_day():
    issued_at = time.time()
    claims = decode_access_token(create_access_token({"sub": "1", "user_id": 1, "role": "admin"}))

    assert abs(claims["exp"] - (issued_at + 24 * 3600)) <= 5


def test_expired_token_is_rejected():
    token = create_access_token({"sub": "7", "user_id": 7, "role": "user"}, timedelta(seconds=-5))

    with pytest.raises(HTTPException) as exc_info:
        decode_access_token(token)

    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Invalid or expired token."


def test_foreign_signature_reports_same_error_as_expiry():
    forged = jwt.encode(
        {"sub": "7", "user_id": 7, "role": "admin"},
        "some-other-secret-key-of-reasonable-length",
        algorithm="HS256",
    )

    with pytest.raises(HTTPException) as exc_info:
        decode_access_token(forged)

    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Invalid or expired token."


@pytest.mark.parametrize("secret", ["", "dev-only-secret-key-change-me-before-deploying"])
def test_production_refuses_missing_or_default_secret(secret):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, app_env="production", secret_key=secret)


def test_development_allows_default_secret():
    settings = Settings(_env_file=None, app_env="development", secret_key="dev-only-secret-key-change-me-before-deploying")
    assert settings.secret_key_is_default


def test_unset_app_env_is_treated_as_production(monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("SECRET_KEY", raising=False)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_unset_app_env_accepts_an_explicit_secret(monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)

    settings = Settings(_env_file=None, secret_key="a-real-secret-that-is-long-enough-for-hs256")

    assert not settings.is_development
