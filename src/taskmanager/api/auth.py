"""Auth API — sign-up, login, password recovery and reset.

Learn: Public routes (no bearer token needed):
- POST /login            → email/password → JWT token
- POST /signUp           → create a user account
- PUT  /recover-password → mail a temporary password
- PUT  /reset-password   → change password given the current one

Paths and body field names match the existing frontend contract,
hence the camelCase.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskmanager.cache import ResponseCache, get_cache
from taskmanager.db.engine import get_db
from taskmanager.mail import Mailer, get_mailer
from taskmanager.schemas.user import (
    Credentials,
    RecoverPasswordRequest,
    RecoverPasswordResponse,
    ResetPasswordRequest,
    TokenResponse,
    UserRead,
)
from taskmanager.services.auth_service import AuthService

router = APIRouter()


def _auth_svc(
    db: AsyncSession = Depends(get_db),
    cache: ResponseCache = Depends(get_cache),
    mailer: Mailer = Depends(get_mailer),
) -> AuthService:
    return AuthService(db, cache, mailer)


@router.post("/login", response_model=TokenResponse)
async def login(body: Credentials, svc: AuthService = Depends(_auth_svc)):
    """Login with email and password → JWT token (1 hour)."""
    token = await svc.login(body.email, body.password)
    return TokenResponse(token=token)


@router.post("/signUp", response_model=UserRead, status_code=201)
async def sign_up(body: Credentials, svc: AuthService = Depends(_auth_svc)):
    """Create a new user account."""
    return await svc.sign_up(body.email, body.password)


@router.put(
    "/recover-password",
    response_model=RecoverPasswordResponse,
    status_code=201,
)
async def recover_password(
    body: RecoverPasswordRequest,
    svc: AuthService = Depends(_auth_svc),
):
    """Generate a temporary password and send it to the user's email."""
    email = await svc.forgot_password(body.email)
    return RecoverPasswordResponse(
        email=email,
        message=f"Temporary password sent to {email}.",
    )


@router.put("/reset-password", response_model=UserRead, status_code=201)
async def reset_password(
    body: ResetPasswordRequest,
    svc: AuthService = Depends(_auth_svc),
):
    """Replace the password after verifying the current one."""
    return await svc.reset_password(
        body.email,
        body.current_password,
        body.new_password,
    )
