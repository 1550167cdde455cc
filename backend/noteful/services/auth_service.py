"""
Noteful Backend — Auth Service (Identity Store & Identity Assertion)
======================================================================

What:  Verifies login credentials against stored hashes and issues/verifies
       the signed bearer tokens every other endpoint requires.
How:   passlib `CryptContext` for hashing, python-jose for HS256 JWTs.
       Hashing is CPU-bound and runs in the threadpool from async workflows.
Who:   Called by the login, refresh, and registration routes, and by the
       `get_current_user` dependency on every protected route.

Token shape:
    {
        "sub":  "<username>",
        "user": {"id": "...", "username": "...", "fullname": "..."},
        "iat":  <issued at>,
        "exp":  <issued at + JWT_EXPIRY_MINUTES>
    }
"""

import logging
from datetime import datetime, timedelta, timezone

from fastapi.concurrency import run_in_threadpool
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import async_sessionmaker

from noteful.config import settings
from noteful.database import session_scope, store_errors
from noteful.exceptions import UnauthorizedError
from noteful.models.user import User
from noteful.repositories.users import user_repository
from noteful.schemas.user import AuthenticatedUser, LoginInput, TokenResponse

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class AuthService:

    # ── Credentials ───────────────────────────────────────────────────────

    def hash_password(self, password: str) -> str:
        return pwd_context.hash(password)

    def verify_password(self, password: str, password_hash: str) -> bool:
        return pwd_context.verify(password, password_hash)

    # ── Identity assertion ────────────────────────────────────────────────

    def create_auth_token(self, user: AuthenticatedUser) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "sub": user.username,
            "user": user.model_dump(),
            "iat": now,
            "exp": now + timedelta(minutes=settings.jwt_expiry_minutes),
        }
        return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)

    def decode_auth_token(self, token: str) -> AuthenticatedUser:
        """
        Verify signature and expiry and return the embedded identity.

        Raises:
            UnauthorizedError: bad signature, expired, or missing `user` claim
        """
        try:
            claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
            return AuthenticatedUser.model_validate(claims["user"])
        except (JWTError, KeyError, PydanticValidationError) as e:
            logger.info("Rejected bearer token: %s", type(e).__name__)
            raise UnauthorizedError() from e

    # ── Workflows ─────────────────────────────────────────────────────────

    async def authenticate(self, sessions: async_sessionmaker, login: LoginInput) -> TokenResponse:
        """
        POST /api/login: exchange username + password for a token.

        Unknown username and wrong password produce the same 401.
        """
        with store_errors("looking up user for login"):
            async with session_scope(sessions) as session:
                user = await user_repository.find_by_username(session, login.username)

        if user is None or not await run_in_threadpool(
            self.verify_password, login.password, user.password_hash
        ):
            logger.warning("Failed login for username %r", login.username)
            raise UnauthorizedError()

        logger.info("User %s logged in", user.id)
        return TokenResponse(auth_token=self.create_auth_token(_identity(user)))

    async def refresh(
        self, sessions: async_sessionmaker, current: AuthenticatedUser
    ) -> TokenResponse:
        """POST /api/refresh: reissue a token for a still-existing user."""
        with store_errors("looking up user for refresh"):
            async with session_scope(sessions) as session:
                user = await user_repository.find_by_id(session, current.id)

        if user is None:
            raise UnauthorizedError()
        return TokenResponse(auth_token=self.create_auth_token(_identity(user)))


def _identity(user: User) -> AuthenticatedUser:
    return AuthenticatedUser(id=user.id, username=user.username, fullname=user.fullname)


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()
