"""Settings validation, token helpers and password helpers."""

import jwt
import pydantic
import pytest

from taskmanager.auth.jwt import TokenError, create_access_token, verify_token
from taskmanager.auth.password import (
    generate_temporary_password,
    hash_password,
    verify_password,
)
from taskmanager.config import Settings, settings
from taskmanager.errors import ConfigurationError, Forbidden, Unauthenticated

# ═══════════════════════════════════════════════════════════
# Settings
# ═══════════════════════════════════════════════════════════


def test_empty_secret_refuses_to_start():
    with pytest.raises(pydantic.ValidationError, match="JWT_SECRET must be set"):
        Settings(jwt_secret="")


def test_short_secret_rejected_outside_development():
    with pytest.raises(pydantic.ValidationError, match="at least 32"):
        Settings(jwt_secret="short", environment="production")


def test_short_secret_allowed_in_development():
    s = Settings(jwt_secret="short", environment="development")
    assert s.jwt_secret == "short"
    assert s.access_token_expire_minutes == 60


def test_settings_read_prefixed_env(monkeypatch):
    monkeypatch.setenv("TASKMANAGER_PORT", "8123")
    monkeypatch.setenv("TASKMANAGER_JWT_SECRET", "x" * 40)
    s = Settings()
    assert s.port == 8123


# ═══════════════════════════════════════════════════════════
# Tokens
# ═══════════════════════════════════════════════════════════


def test_token_round_trip():
    payload = verify_token(create_access_token("a@example.com"))
    assert payload["sub"] == "a@example.com"
    assert payload["type"] == "access"


def test_token_with_wrong_type_rejected():
    token = jwt.encode(
        {"sub": "a@example.com", "type": "refresh", "exp": 9999999999},
        settings.jwt_secret,
        algorithm="HS256",
    )
    with pytest.raises(TokenError, match="Not an access token"):
        verify_token(token)


def test_token_without_subject_rejected():
    token = jwt.encode(
        {"type": "access", "exp": 9999999999}, settings.jwt_secret, algorithm="HS256"
    )
    with pytest.raises(TokenError, match="Invalid token"):
        verify_token(token)


def test_token_signed_elsewhere_rejected():
    token = jwt.encode(
        {"sub": "a@example.com", "type": "access", "exp": 9999999999},
        "a-completely-different-secret-value",
        algorithm="HS256",
    )
    with pytest.raises(TokenError, match="Invalid token"):
        verify_token(token)


def test_signing_without_secret_is_configuration_error(monkeypatch):
    monkeypatch.setattr(settings, "jwt_secret", "")
    with pytest.raises(ConfigurationError, match="Invalid jwt_secret"):
        create_access_token("a@example.com")


# ═══════════════════════════════════════════════════════════
# Passwords
# ═══════════════════════════════════════════════════════════


def test_hash_and_verify():
    digest = hash_password("hunter2")
    assert digest.startswith("$2b$04$")
    assert verify_password("hunter2", digest)
    assert not verify_password("hunter3", digest)


def test_verify_against_garbage_digest_is_false():
    assert verify_password("pw", "not-a-bcrypt-digest") is False


def test_temporary_password_is_40_hex_chars():
    first = generate_temporary_password()
    assert len(first) == 40
    int(first, 16)
    assert first != generate_temporary_password()


# ═══════════════════════════════════════════════════════════
# Error rendering
# ═══════════════════════════════════════════════════════════


def test_unauthenticated_renders_login_flag():
    err = Unauthenticated("Token has expired")
    assert err.status_code == 401
    assert err.to_dict() == {"detail": "Token has expired", "login": False}
    assert err.headers == {"WWW-Authenticate": "Bearer"}


def test_default_messages():
    assert Forbidden().to_dict() == {"detail": "Forbidden"}
    assert Forbidden().status_code == 403
