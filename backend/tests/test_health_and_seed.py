"""
Noteful Backend — Health Check and Seeding Tests
==================================================
"""

import json
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from noteful.database import build_engine, get_session_factory
from noteful.main import create_app
from noteful.models import Note, User
from noteful.seed import main as seed_main
from noteful.seed import seed_database

SEED_FILE = Path(__file__).resolve().parents[1] / "data" / "seed.json"


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_unreachable_database(self, tmp_path):
        engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'dir' / 'x.db'}")
        app = create_app()
        app.dependency_overrides[get_session_factory] = lambda: async_sessionmaker(engine)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health")
        await engine.dispose()

        assert response.status_code == 503
        assert response.json()["database"] == "disconnected"


class TestSeed:

    @pytest.mark.asyncio
    async def test_seed_inserts_every_section(self, tmp_path):
        engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'seed.db'}")
        data = json.loads(SEED_FILE.read_text(encoding="utf-8"))

        counts = await seed_database(engine, data)
        assert counts == {"users": 2, "folders": 4, "tags": 4, "notes": 4}

        # Seeding again starts from scratch rather than colliding
        assert await seed_database(engine, data) == counts

        sessions = async_sessionmaker(engine, class_=AsyncSession)
        async with sessions() as session:
            assert await session.scalar(select(func.count()).select_from(Note)) == 4
            user = await session.scalar(select(User).where(User.username == "bobuser"))
            assert user.password_hash != "password123"
        await engine.dispose()

    @pytest.mark.asyncio
    async def test_seeded_user_can_log_in(self, tmp_path):
        engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'seed.db'}")
        await seed_database(engine, json.loads(SEED_FILE.read_text(encoding="utf-8")))

        app = create_app()
        sessions = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        app.dependency_overrides[get_session_factory] = lambda: sessions
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.post(
                "/api/login", json={"username": "bobuser", "password": "password123"}
            )
            headers = {"Authorization": f"Bearer {response.json()['authToken']}"}
            notes = (await client.get("/api/notes", params={"searchTerm": "cats"}, headers=headers)).json()
        await engine.dispose()

        assert len(notes) == 2

    def test_cli_reports_bad_file(self, tmp_path):
        assert seed_main([str(tmp_path / "absent.json")]) == 1

    def test_rejects_malformed_ids(self, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"users": [{"id": "1", "username": "x", "password": "y"}]}))
        url = f"sqlite+aiosqlite:///{tmp_path / 'bad.db'}"
        assert seed_main([str(bad), "--database-url", url]) == 1
