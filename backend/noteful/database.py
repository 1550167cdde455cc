"""
Noteful Backend — Database Session Management
===============================================

What:  Async SQLAlchemy engine, session factory, and the FastAPI dependency
       that hands the factory to route handlers.
How:   The engine owns the connection pool. Services open short-lived sessions
       through `session_scope()`, which commits on success and rolls back on
       error. A request may hold several sessions at once: the ownership checks
       and the two halves of a cascade delete each run in their own session so
       they can be dispatched concurrently.
Who:   Used by services, the seed script, Alembic, and the health check.
When:  Engine is created at module import; sessions are created per operation.

Connection Pooling Strategy:
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour
"""

import logging
from contextlib import asynccontextmanager, contextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, Iterator, Optional

from sqlalchemy import DateTime
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator

from noteful.config import settings
from noteful.exceptions import DatabaseError

logger = logging.getLogger(__name__)


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    SQLite (used by the test suite and local development) does not accept the
    queue-pool sizing arguments, so they are only passed for server databases.
    """
    kwargs: Dict[str, Any] = {"echo": echo}
    if not database_url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(database_url, **kwargs)


# ── Engine Configuration ──────────────────────────────────────────────────
engine = build_engine(settings.database_url, echo=settings.log_level == "DEBUG")

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: attributes stay readable after commit, which the
# services rely on when building responses outside the session block.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class to register with the shared metadata
    (used by Alembic, the seed script, and the test fixtures).
    """
    pass


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware timestamp column.

    PostgreSQL returns aware values already; SQLite drops the offset, so
    naive values read back are tagged as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


# ── Session Helpers ───────────────────────────────────────────────────────
@asynccontextmanager
async def session_scope(
    factory: Optional[async_sessionmaker] = None,
) -> AsyncIterator[AsyncSession]:
    """
    Transactional scope around a series of store operations.

    How it works:
        1. Creates a new session from the factory (the app factory by default)
        2. Yields it to the caller
        3. On success: commits the transaction
        4. On error: rolls back and re-raises
        5. Always: closes the session (returns connection to pool)

    Example:
        async with session_scope(sessions) as session:
            session.add(folder)
    """
    factory = factory or async_session_factory
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            # Roll back for ANY failure, including non-DB errors raised by the caller
            await session.rollback()
            raise


def get_session_factory() -> async_sessionmaker:
    """
    FastAPI dependency returning the session factory.

    Route handlers pass the factory (not a session) down to services, because
    a single request may need several concurrent sessions. Tests override this
    dependency to point at a throwaway SQLite database.
    """
    return async_session_factory


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()


@contextmanager
def store_errors(action: str, **context: Any) -> Iterator[None]:
    """
    Translate unexpected SQLAlchemy failures into DatabaseError.

    Application errors (NotefulError subclasses, including DuplicateNameError
    produced from IntegrityError by the repositories) pass through untouched.
    Details go to the server log only.
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Database error while %s: %s", action, e, exc_info=True)
        raise DatabaseError(
            context={"action": action, "error_type": type(e).__name__, **context}
        ) from e
