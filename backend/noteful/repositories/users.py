"""User repository: the persistence half of the identity store."""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from noteful.exceptions import DuplicateNameError
from noteful.models.user import User

logger = logging.getLogger(__name__)


class UserRepository:

    async def create(
        self,
        session: AsyncSession,
        username: str,
        password_hash: str,
        fullname: Optional[str] = None,
    ) -> User:
        """
        Insert a new user.

        Raises:
            DuplicateNameError: the username is taken (unique constraint)
        """
        user = User(username=username, password_hash=password_hash, fullname=fullname)
        session.add(user)
        try:
            await session.flush()
        except IntegrityError as e:
            logger.info("Registration rejected, username taken: %r", username)
            raise DuplicateNameError("user", message="The username already exists") from e
        return user

    async def find_by_username(self, session: AsyncSession, username: str) -> Optional[User]:
        result = await session.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def find_by_id(self, session: AsyncSession, user_id: str) -> Optional[User]:
        result = await session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()


user_repository = UserRepository()
