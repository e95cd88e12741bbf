"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers (or at
include_router level) to extract and validate the current identity
from the request. Two states only: no identity, or a verified email.

A missing header and a bad/expired token both raise Unauthenticated,
rendered as 401 {"detail": ..., "login": false}.
"""

from typing import Optional

import structlog
from fastapi import Depends, Header

from taskmanager.auth.jwt import TokenError, verify_token
from taskmanager.errors import Unauthenticated

logger = structlog.get_logger()


class CurrentIdentity:
    """The authenticated user making the request."""

    def __init__(self, email: str):
        self.email = email

    def __repr__(self) -> str:
        return f"CurrentIdentity(email={self.email!r})"


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user_optional(
    authorization: Optional[str] = Header(None),
) -> Optional[CurrentIdentity]:
    """Extract current identity (optional — returns None if no token).

    A token that is present but invalid still fails.
    """
    token = _bearer_token(authorization)
    if token is None:
        return None

    try:
        payload = verify_token(token)
    except TokenError as e:
        logger.info("auth.token_rejected", reason=str(e))
        raise Unauthenticated(str(e))

    return CurrentIdentity(email=payload["sub"])


async def get_current_user(
    identity: Optional[CurrentIdentity] = Depends(get_current_user_optional),
) -> CurrentIdentity:
    """Extract current identity (required — 401 if no token)."""
    if not identity:
        raise Unauthenticated()
    return identity
