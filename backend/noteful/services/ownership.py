"""
Noteful Backend — Ownership Validator
=======================================

What:  The integrity gate for cross-entity references. Confirms that a
       folder id or a set of tag ids names entities owned by the acting user.
How:   Each check opens its own session so the folder check and the tag
       check can run concurrently; `validate_references` dispatches both and
       fails fast on the first rejection.
Who:   Called by the note service before every note create/update.
When:  After the request validators (shape) and before any write.

Contract:
    validate_folder_ownership(folder_id, user_id)
        None / ""                    → ok (no folder)
        malformed id                 → InvalidReferenceError  (400)
        not found / not owned        → ReferenceNotFoundError (400)

    validate_tag_ownership(tag_ids, user_id)
        None                         → ok (no tags)
        not a list                   → InvalidShapeError      (400)
        any malformed id             → InvalidReferenceError  (400)
        owned count != distinct ids  → ReferenceNotFoundError (400)

Privacy:
    "Does not exist" and "exists but belongs to someone else" produce the
    same error and the same message, so a user cannot probe other accounts
    for valid ids.
"""

import asyncio
import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from noteful.database import session_scope, store_errors
from noteful.exceptions import (
    InvalidReferenceError,
    InvalidShapeError,
    ReferenceNotFoundError,
)
from noteful.ids import is_valid_id
from noteful.repositories.folders import folder_repository
from noteful.repositories.tags import tag_repository

logger = logging.getLogger(__name__)


class OwnershipValidator:
    """Stateless; receives the session factory per call like the other services."""

    async def validate_folder_ownership(
        self,
        sessions: async_sessionmaker,
        folder_id: Optional[str],
        user_id: str,
    ) -> None:
        if not folder_id:
            return
        if not is_valid_id(folder_id):
            raise InvalidReferenceError(field="folderId")

        with store_errors("checking folder ownership", folder_id=folder_id):
            async with session_scope(sessions) as session:
                folder = await folder_repository.find_by_id(session, folder_id, user_id)

        if folder is None:
            logger.warning("Rejected folder reference %s for user %s", folder_id, user_id)
            raise ReferenceNotFoundError(field="folderId", message="The folder does not exist")

    async def validate_tag_ownership(
        self,
        sessions: async_sessionmaker,
        tag_ids: Any,
        user_id: str,
    ) -> None:
        if tag_ids is None:
            return
        if not isinstance(tag_ids, (list, tuple)):
            raise InvalidShapeError(message="The `tags` property must be an array", field="tags")
        for tag_id in tag_ids:
            if not is_valid_id(tag_id):
                raise InvalidReferenceError(
                    field="tags", message="The `tags` array contains an invalid id"
                )

        # A tag listed twice is still one reference
        requested = set(tag_ids)
        if not requested:
            return

        with store_errors("checking tag ownership"):
            async with session_scope(sessions) as session:
                owned = await tag_repository.count_owned(session, requested, user_id)

        if owned != len(requested):
            logger.warning(
                "Rejected tag references for user %s: %d of %d owned",
                user_id, owned, len(requested),
            )
            raise ReferenceNotFoundError(field="tags", message="One or more tags are invalid")

    async def validate_references(
        self,
        sessions: async_sessionmaker,
        folder_id: Optional[str],
        tag_ids: Any,
        user_id: str,
    ) -> None:
        """
        Run both checks concurrently; the first rejection wins.

        When one check fails the other is cancelled rather than left running
        against the store after the request has already been answered.
        """
        tasks = [
            asyncio.create_task(self.validate_folder_ownership(sessions, folder_id, user_id)),
            asyncio.create_task(self.validate_tag_ownership(sessions, tag_ids, user_id)),
        ]
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        failures = [
            task.exception() for task in tasks
            if task in done and task.exception() is not None
        ]
        if failures:
            raise failures[0]


# ── Singleton Instance ────────────────────────────────────────────────────
ownership_validator = OwnershipValidator()
