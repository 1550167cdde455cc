"""
Noteful Backend — Database Seeding
====================================

What:  Resets the database and loads users, folders, tags and notes from a
       JSON file. Used for local development and demos.

Usage:
    python -m noteful.seed data/seed.json
    python -m noteful.seed data/seed.json --database-url sqlite+aiosqlite:///./dev.db

File format (camelCase, like the API):
    {
        "users":   [{"id": ..., "username": ..., "password": ..., "fullname": ...}],
        "folders": [{"id": ..., "name": ..., "userId": ...}],
        "tags":    [{"id": ..., "name": ..., "userId": ...}],
        "notes":   [{"id": ..., "title": ..., "content": ..., "folderId": ...,
                     "tags": [...], "userId": ...}]
    }

    Ids are optional (generated when absent) but must be 32-character hex
    when given, since records reference each other by id. Passwords are
    plain text in the file and hashed on insert.

WARNING: drops every table first.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

from sqlalchemy import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from noteful.config import settings
from noteful.database import Base, build_engine
from noteful.ids import is_valid_id, new_id
from noteful.models import Folder, Note, Tag, User, note_tags
from noteful.services.auth_service import auth_service

logger = logging.getLogger(__name__)

SECTIONS = ("users", "folders", "tags", "notes")


def _record_id(record: Dict[str, Any], section: str) -> str:
    record_id = record.get("id") or new_id()
    if not is_valid_id(record_id):
        raise ValueError(f"Invalid id {record_id!r} in {section}")
    return record_id


async def reset_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


async def seed_database(engine: AsyncEngine, data: Dict[str, List[Dict[str, Any]]]) -> Dict[str, int]:
    """
    Drop and recreate all tables, then insert the records in `data`.

    Returns the number of inserted records per section.
    """
    await reset_schema(engine)

    sessions = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    counts = {section: len(data.get(section) or []) for section in SECTIONS}

    async with sessions() as session:
        async with session.begin():
            session.add_all(
                User(
                    id=_record_id(user, "users"),
                    username=user["username"],
                    password_hash=auth_service.hash_password(user["password"]),
                    fullname=user.get("fullname"),
                )
                for user in data.get("users") or []
            )
            await session.flush()

            session.add_all(
                Folder(id=_record_id(folder, "folders"), name=folder["name"], user_id=folder["userId"])
                for folder in data.get("folders") or []
            )
            session.add_all(
                Tag(id=_record_id(tag, "tags"), name=tag["name"], user_id=tag["userId"])
                for tag in data.get("tags") or []
            )

            tag_rows = []
            for record in data.get("notes") or []:
                note_id = _record_id(record, "notes")
                session.add(
                    Note(
                        id=note_id,
                        title=record["title"],
                        content=record.get("content"),
                        folder_id=record.get("folderId") or None,
                        user_id=record["userId"],
                    )
                )
                tag_rows.extend(
                    {"note_id": note_id, "tag_id": tag_id}
                    for tag_id in dict.fromkeys(record.get("tags") or [])
                )
            await session.flush()
            if tag_rows:
                await session.execute(insert(note_tags), tag_rows)

    for section, count in counts.items():
        logger.info("Inserted %d %s", count, section)
    return counts


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Reset and seed the Noteful database")
    parser.add_argument("data_file", type=Path, help="JSON file with users, folders, tags and notes")
    parser.add_argument(
        "--database-url",
        default=settings.database_url,
        help="Async SQLAlchemy URL (defaults to DATABASE_URL)",
    )
    return parser.parse_args(argv)


async def _main(args) -> Dict[str, int]:
    data = json.loads(args.data_file.read_text(encoding="utf-8"))
    engine = build_engine(args.database_url)
    try:
        return await seed_database(engine, data)
    finally:
        await engine.dispose()


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    args = parse_args(argv)
    try:
        asyncio.run(_main(args))
    except (OSError, ValueError, KeyError, SQLAlchemyError) as e:
        logger.error("Seeding failed: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
