"""
Noteful Backend — Auth Service Unit Tests
===========================================

What:  Password hashing, token issue/verify, login and refresh workflows.
       Hashing inside the async workflows happens on a worker thread.
"""

import threading
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from noteful.config import settings
from noteful.database import session_scope
from noteful.exceptions import UnauthorizedError
from noteful.repositories import user_repository
from noteful.schemas.user import AuthenticatedUser, LoginInput, RegistrationInput
from noteful.services.auth_service import AuthService, auth_service
from noteful.services.user_service import user_service


class TestPasswords:

    def setup_method(self):
        self.service = AuthService()

    def test_hash_is_not_the_password(self):
        hashed = self.service.hash_password("password123")
        assert hashed != "password123"
        assert self.service.verify_password("password123", hashed)
        assert not self.service.verify_password("password124", hashed)


class TestTokens:

    def setup_method(self):
        self.service = AuthService()
        self.user = AuthenticatedUser(id="a" * 32, username="alice", fullname="Alice")

    def test_round_trip(self):
        token = self.service.create_auth_token(self.user)
        assert self.service.decode_auth_token(token) == self.user

    def test_claims(self):
        token = self.service.create_auth_token(self.user)
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        assert claims["sub"] == "alice"
        assert claims["user"] == {"id": "a" * 32, "username": "alice", "fullname": "Alice"}
        assert claims["exp"] - claims["iat"] == settings.jwt_expiry_minutes * 60

    def test_expired_token_rejected(self):
        past = datetime.now(timezone.utc) - timedelta(minutes=5)
        token = jwt.encode(
            {"sub": "alice", "user": self.user.model_dump(), "exp": past},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(UnauthorizedError):
            self.service.decode_auth_token(token)

    def test_wrong_secret_rejected(self):
        token = jwt.encode(
            {"sub": "alice", "user": self.user.model_dump()},
            "some-other-secret",
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(UnauthorizedError):
            self.service.decode_auth_token(token)

    def test_missing_user_claim_rejected(self):
        token = jwt.encode({"sub": "alice"}, settings.jwt_secret, algorithm=settings.jwt_algorithm)
        with pytest.raises(UnauthorizedError):
            self.service.decode_auth_token(token)

    def test_garbage_rejected(self):
        with pytest.raises(UnauthorizedError):
            self.service.decode_auth_token("not.a.token")


class TestWorkflows:

    def setup_method(self):
        self.service = AuthService()

    async def _create_user(self, sessions, username="alice", password="password123"):
        async with session_scope(sessions) as session:
            return await user_repository.create(
                session, username, self.service.hash_password(password), "Alice"
            )

    @pytest.mark.asyncio
    async def test_authenticate(self, sessions):
        user = await self._create_user(sessions)
        result = await self.service.authenticate(
            sessions, LoginInput(username="alice", password="password123")
        )
        assert self.service.decode_auth_token(result.auth_token).id == user.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "username, password", [("alice", "wrong-password"), ("nobody", "password123")]
    )
    async def test_bad_credentials(self, sessions, username, password):
        await self._create_user(sessions)
        with pytest.raises(UnauthorizedError):
            await self.service.authenticate(
                sessions, LoginInput(username=username, password=password)
            )

    @pytest.mark.asyncio
    async def test_refresh_requires_existing_user(self, sessions):
        ghost = AuthenticatedUser(id="b" * 32, username="ghost")
        with pytest.raises(UnauthorizedError):
            await self.service.refresh(sessions, ghost)

    @pytest.mark.asyncio
    async def test_refresh(self, sessions):
        user = await self._create_user(sessions)
        current = AuthenticatedUser(id=user.id, username=user.username)
        result = await self.service.refresh(sessions, current)
        refreshed = self.service.decode_auth_token(result.auth_token)
        assert refreshed.id == user.id
        assert refreshed.fullname == "Alice"

    @pytest.mark.asyncio
    async def test_login_verifies_password_off_the_event_loop(self, sessions, monkeypatch):
        await self._create_user(sessions)
        threads = []
        verify = self.service.verify_password

        def recording_verify(password, password_hash):
            threads.append(threading.get_ident())
            return verify(password, password_hash)

        monkeypatch.setattr(self.service, "verify_password", recording_verify)
        await self.service.authenticate(
            sessions, LoginInput(username="alice", password="password123")
        )
        assert threads and threads[0] != threading.get_ident()

    @pytest.mark.asyncio
    async def test_registration_hashes_off_the_event_loop(self, sessions, monkeypatch):
        threads = []
        hash_password = auth_service.hash_password

        def recording_hash(password):
            threads.append(threading.get_ident())
            return hash_password(password)

        monkeypatch.setattr(auth_service, "hash_password", recording_hash)
        created = await user_service.register(
            sessions, RegistrationInput(username="carol", password="password123")
        )
        assert created.username == "carol"
        assert threads and threads[0] != threading.get_ident()
