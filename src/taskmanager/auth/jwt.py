"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. The
access token carries the user's email in `sub` and expires after an
hour; there is no refresh token, the client logs in again.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from taskmanager.config import settings
from taskmanager.errors import ConfigurationError


class TokenError(Exception):
    """Raised when token verification fails."""


def _secret() -> str:
    if not settings.jwt_secret:
        raise ConfigurationError("Invalid jwt_secret")
    return settings.jwt_secret


def create_access_token(
    email: str,
    expires_minutes: Optional[int] = None,
) -> str:
    """Create a signed access token for `email`."""
    now = datetime.now(timezone.utc)
    expires = now + timedelta(
        minutes=expires_minutes or settings.access_token_expire_minutes
    )
    payload = {
        "sub": email,
        "type": "access",
        "exp": expires,
        "iat": now,
    }
    return jwt.encode(payload, _secret(), algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> dict:
    """Verify and decode an access token.

    Returns the payload dict on success.
    Raises TokenError on failure.
    """
    try:
        payload = jwt.decode(
            token,
            _secret(),
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}")

    if payload.get("type") != "access":
        raise TokenError("Not an access token")
    return payload
