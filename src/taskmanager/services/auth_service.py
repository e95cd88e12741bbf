"""Auth service — credentials, tokens, and password recovery.

Learn: All four auth flows funnel through _check_credentials, so login
and reset-password agree on what "valid" means. The service raises
domain errors (InvalidCredentials, Conflict, NotFound); routes turn
them into responses.

Recovery is two-phase: the temporary password is committed
first, then mailed. If the mail fails the user's password has still
changed, and the caller sees MailDeliveryError.
"""

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskmanager.auth.jwt import create_access_token
from taskmanager.auth.password import (
    generate_temporary_password,
    hash_password,
    verify_password,
)
from taskmanager.cache import ResponseCache, task_list_key
from taskmanager.db.models import User
from taskmanager.errors import Conflict, InvalidCredentials, NotFound
from taskmanager.mail import Mailer, render_temporary_password

logger = structlog.get_logger()


class AuthService:
    """Business logic for sign-up, login and password changes."""

    def __init__(
        self,
        db: AsyncSession,
        cache: ResponseCache,
        mailer: Mailer | None = None,
    ):
        self.db = db
        self.cache = cache
        self.mailer = mailer

    async def get_user(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def _check_credentials(self, email: str, password: str) -> User:
        user = await self.get_user(email)
        if not user or not verify_password(password, user.password_hash):
            raise InvalidCredentials()
        return user

    # ─── Login ───────────────────────────────────────────

    async def login(self, email: str, password: str) -> str:
        """Validate credentials and return a signed access token.

        Learn: The caller's cached task list is dropped on login so the
        first read after authenticating always comes from the database.
        """
        try:
            user = await self._check_credentials(email, password)
        except InvalidCredentials:
            logger.info("auth.login_failed", email=email)
            raise

        self.cache.invalidate(task_list_key(user.email))
        token = create_access_token(user.email)
        logger.info("auth.login", email=user.email)
        return token

    # ─── Sign up ─────────────────────────────────────────

    async def sign_up(self, email: str, password: str) -> User:
        """Create a user. Raises Conflict if the email is taken."""
        if await self.get_user(email):
            raise Conflict("Email already registered")

        user = User(email=email, password_hash=hash_password(password))
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent sign-up for the same email
            await self.db.rollback()
            raise Conflict("Email already registered")

        await self.db.refresh(user)
        logger.info("auth.sign_up", email=email, user_id=user.id)
        return user

    # ─── Password recovery ───────────────────────────────

    async def forgot_password(self, email: str) -> str:
        """Replace the password with a random one and mail it to `email`.

        Raises NotFound for unknown users and MailDeliveryError if the
        mail could not be sent (the new password is already stored).
        """
        user = await self.get_user(email)
        if not user:
            raise NotFound("User not found.")

        temp_password = generate_temporary_password()
        user.password_hash = hash_password(temp_password)
        await self.db.commit()
        logger.info("auth.password_recovered", email=email)

        mailer = self.mailer or Mailer()
        await mailer.send(
            to=email,
            subject="Reset password",
            html=render_temporary_password(temp_password),
        )
        return email

    async def reset_password(
        self,
        email: str,
        current_password: str,
        new_password: str,
    ) -> User:
        """Change the password after re-checking the current one."""
        user = await self._check_credentials(email, current_password)
        user.password_hash = hash_password(new_password)
        await self.db.commit()
        await self.db.refresh(user)
        logger.info("auth.password_reset", email=email)
        return user
