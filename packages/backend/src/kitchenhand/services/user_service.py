"""User service — staff accounts and credential checks.

Learn: bcrypt is slow and synchronous, so hashing and verifying run in a
worker thread via asyncio.to_thread(), off the event loop.
"""

import asyncio

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kitchenhand.auth.password import hash_password, verify_password
from kitchenhand.db.models import User
from kitchenhand.errors import InvalidCredentials

logger = structlog.get_logger()


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_active_by_username(self, username: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.username == username, User.is_active.is_(True))
        )
        return result.scalars().first()

    async def get_by_username_or_email(self, username: str, email: str) -> User | None:
        result = await self.db.execute(
            select(User).where((User.username == username) | (User.email == email))
        )
        return result.scalars().first()

    async def create_user(
        self,
        username: str,
        email: str,
        password: str,
        rounds: int | None = None,
    ) -> User:
        password_hash = await asyncio.to_thread(hash_password, password, rounds=rounds)
        user = User(username=username, email=email, password_hash=password_hash)
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        logger.info("user.created", user_id=str(user.id), username=username)
        return user

    async def authenticate(self, username: str, password: str) -> User:
        """Return the active user matching the credentials.

        Unknown user and wrong password raise the same InvalidCredentials
        so the login page can't be used to enumerate usernames.
        """
        user = await self.get_active_by_username(username)
        if user is None or not await asyncio.to_thread(
            verify_password, password, user.password_hash
        ):
            logger.info("auth.login_failed", username=username)
            raise InvalidCredentials()
        return user
