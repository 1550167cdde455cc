"""User registration: validated credentials in, public user record out."""

import logging

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import async_sessionmaker

from noteful.database import session_scope, store_errors
from noteful.repositories.users import user_repository
from noteful.schemas.user import RegistrationInput, UserResponse, user_to_response
from noteful.services.auth_service import auth_service

logger = logging.getLogger(__name__)


class UserService:

    async def register(
        self, sessions: async_sessionmaker, registration: RegistrationInput
    ) -> UserResponse:
        """
        Create a user with a hashed password.

        Raises:
            DuplicateNameError: the username is taken
            DatabaseError: any other store failure
        """
        password_hash = await run_in_threadpool(auth_service.hash_password, registration.password)
        with store_errors("registering user"):
            async with session_scope(sessions) as session:
                user = await user_repository.create(
                    session,
                    username=registration.username,
                    password_hash=password_hash,
                    fullname=registration.fullname,
                )
        logger.info("Registered user %s", user.id)
        return user_to_response(user)


user_service = UserService()
