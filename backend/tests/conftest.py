"""
Noteful Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a fresh file-backed SQLite database (aiosqlite) in its
       own tmp_path. API tests talk to a freshly built app through httpx's
       ASGITransport, with `get_session_factory` overridden to that database.

Fixture Hierarchy:
    sessions        async_sessionmaker bound to the per-test database
    └── test_client HTTPX AsyncClient wired to create_app()
        └── signup  coroutine: register + login, returns auth headers
"""

import os

# Override settings BEFORE any noteful import: the module-level engine and
# settings singleton are built at import time.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["CASCADE_RETRY_MIN_WAIT"] = "0"
os.environ["CASCADE_RETRY_MAX_WAIT"] = "0"

from typing import Dict  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

import noteful.models  # noqa: E402,F401
from noteful.database import Base, build_engine, get_session_factory  # noqa: E402
from noteful.main import create_app  # noqa: E402


@pytest_asyncio.fixture
async def sessions(tmp_path):
    """
    Session factory over an empty, fully migrated SQLite database.

    A file (not :memory:) so that concurrently opened sessions, as used by
    the ownership validator and cascade coordinator, share one database.
    """
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'noteful.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def test_client(sessions):
    """
    HTTPX AsyncClient talking to a fresh app instance.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    app = create_app()
    app.dependency_overrides[get_session_factory] = lambda: sessions
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def signup(test_client):
    """
    Register a user and log in; returns the Authorization header dict.

    Usage:
        headers = await signup("alice")
        await test_client.get("/api/notes", headers=headers)
    """

    async def _signup(username: str, password: str = "password123") -> Dict[str, str]:
        response = await test_client.post(
            "/api/users",
            json={"username": username, "password": password, "fullname": username.title()},
        )
        assert response.status_code == 201, response.text
        response = await test_client.post(
            "/api/login", json={"username": username, "password": password}
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['authToken']}"}

    return _signup


@pytest_asyncio.fixture
async def alice(signup) -> Dict[str, str]:
    return await signup("alice")


@pytest_asyncio.fixture
async def bob(signup) -> Dict[str, str]:
    return await signup("bob")
