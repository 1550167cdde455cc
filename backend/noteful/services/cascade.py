"""
Noteful Backend — Cascade Coordinator
=======================================

What:  Keeps note references consistent when a folder or tag is deleted.
How:   Dispatches the entity removal and the bulk note cleanup concurrently,
       each in its own session, then waits for both. Neither half's outcome
       stops the other from being attempted.

    delete_folder(F):  DELETE FROM folders WHERE id = F
                       ∥ UPDATE notes SET folder_id = NULL WHERE folder_id = F
    delete_tag(T):     DELETE FROM tags WHERE id = T
                       ∥ DELETE FROM note_tags WHERE tag_id = T

Consistency:
    The two halves are NOT one transaction. If the removal fails, the error
    propagates (500). If the cleanup fails, it is retried a bounded number of
    times for transient database errors (tenacity); if it still fails, the
    failure is logged and the delete is reported as successful. Any dangling
    reference left behind points at an id that no longer exists, which the
    ownership validator would reject on the note's next write.

    Ownership and existence are the caller's concern: the services check the
    entity belongs to the user (404 otherwise) before dispatching here.
"""

import asyncio
import logging
from typing import Awaitable, Callable

from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from noteful.config import settings
from noteful.database import session_scope
from noteful.exceptions import DatabaseError
from noteful.repositories.folders import folder_repository
from noteful.repositories.notes import note_repository
from noteful.repositories.tags import tag_repository

logger = logging.getLogger(__name__)

StoreOperation = Callable[[AsyncSession], Awaitable[object]]


class CascadeCoordinator:

    async def delete_folder(self, sessions: async_sessionmaker, folder_id: str) -> None:
        await self._dispatch(
            sessions,
            resource="folder",
            entity_id=folder_id,
            remove=lambda session: folder_repository.delete(session, folder_id),
            cleanup=lambda session: note_repository.detach_folder(session, folder_id),
        )

    async def delete_tag(self, sessions: async_sessionmaker, tag_id: str) -> None:
        await self._dispatch(
            sessions,
            resource="tag",
            entity_id=tag_id,
            remove=lambda session: tag_repository.delete(session, tag_id),
            cleanup=lambda session: note_repository.detach_tag(session, tag_id),
        )

    async def _dispatch(
        self,
        sessions: async_sessionmaker,
        resource: str,
        entity_id: str,
        remove: StoreOperation,
        cleanup: StoreOperation,
    ) -> None:
        # Both halves are scheduled before either is awaited
        removal_result, cleanup_result = await asyncio.gather(
            self._run(sessions, remove),
            self._run_with_retry(sessions, cleanup),
            return_exceptions=True,
        )

        if isinstance(cleanup_result, BaseException):
            logger.error(
                "Cascade cleanup failed after deleting %s %s; notes may keep a dangling reference: %s",
                resource, entity_id, cleanup_result,
                exc_info=cleanup_result,
            )
        else:
            logger.info("Detached %s %s from %d note(s)", resource, entity_id, cleanup_result)

        if isinstance(removal_result, BaseException):
            logger.error(
                "Failed to delete %s %s: %s", resource, entity_id, removal_result,
                exc_info=removal_result,
            )
            raise DatabaseError(
                context={"resource": resource, "resource_id": entity_id,
                         "error_type": type(removal_result).__name__},
            ) from removal_result

    @staticmethod
    async def _run(sessions: async_sessionmaker, operation: StoreOperation) -> object:
        async with session_scope(sessions) as session:
            return await operation(session)

    async def _run_with_retry(self, sessions: async_sessionmaker, operation: StoreOperation) -> object:
        """Retry only OperationalError (lock timeouts, dropped connections)."""
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(OperationalError),
            stop=stop_after_attempt(settings.cascade_retry_attempts),
            wait=wait_exponential_jitter(
                initial=settings.cascade_retry_min_wait,
                max=settings.cascade_retry_max_wait,
                jitter=settings.cascade_retry_min_wait,
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                return await self._run(sessions, operation)


# ── Singleton Instance ────────────────────────────────────────────────────
cascade_coordinator = CascadeCoordinator()
