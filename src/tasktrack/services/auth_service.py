"""Auth service: registration and login.

Both paths end the same way: a User row and a freshly issued session
token. Registration writes exactly one user; login writes nothing.
Neither issues a token when it fails.

Email uniqueness: the pre-insert lookup is only a fast path. Two
concurrent registrations can both pass it, so the users.email UNIQUE
constraint is what actually decides. An IntegrityError on commit is
reported as DuplicateEmailError just like the pre-check.
"""

from dataclasses import dataclass
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tasktrack.auth.jwt import TokenIdentity, create_access_token
from tasktrack.auth.password import hash_password, verify_password
from tasktrack.db.models import User
from tasktrack.errors import DuplicateEmailError, InvalidCredentialsError

logger = structlog.get_logger()


@dataclass(frozen=True)
class AuthResult:
    """A user plus the session token just issued for them."""

    user: User
    token: str


class AuthService:
    """Business logic for registering and authenticating users."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(self, email: str, password: str, name: str) -> AuthResult:
        """Create a user and issue their first session token.

        Raises DuplicateEmailError if the email is taken.
        """
        if await self.get_user_by_email(email) is not None:
            raise DuplicateEmailError()

        user = User(email=email, name=name, password_hash=hash_password(password))
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.info("auth.register_race_lost", email=email)
            raise DuplicateEmailError()

        logger.info("auth.user_registered", user_id=user.id)
        return AuthResult(user=user, token=self._issue_token(user))

    async def login(self, email: str, password: str) -> AuthResult:
        """Verify credentials and issue a session token.

        Unknown email and wrong password are indistinguishable to the
        caller: both raise InvalidCredentialsError with the same message.
        """
        user = await self.get_user_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("auth.login_failed")
            raise InvalidCredentialsError()

        logger.info("auth.login", user_id=user.id)
        return AuthResult(user=user, token=self._issue_token(user))

    async def get_user(self, user_id: int) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email).limit(1))
        return result.scalars().first()

    @staticmethod
    def _issue_token(user: User) -> str:
        return create_access_token(TokenIdentity(user_id=user.id, email=user.email))
