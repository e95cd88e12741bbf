"""Password hashing utilities.

Learn: Uses bcrypt for password hashing. bcrypt salts automatically and
its work factor (TASKMANAGER_BCRYPT_ROUNDS, default 10) keeps brute
force expensive. Passwords are truncated to 72 bytes, bcrypt's limit.
"""

import secrets
from typing import Optional

import bcrypt

from taskmanager.config import settings


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password with bcrypt. Result starts with "$2b$"."""
    pw_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored bcrypt digest."""
    try:
        pw_bytes = password.encode("utf-8")[:72]
        hash_bytes = password_hash.encode("utf-8")
        return bcrypt.checkpw(pw_bytes, hash_bytes)
    except (ValueError, TypeError):
        return False


def generate_temporary_password(nbytes: int = 20) -> str:
    """Random hex password for the recovery flow (2 chars per byte)."""
    return secrets.token_hex(nbytes)
