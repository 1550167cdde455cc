"""
Noteful Backend — Note Service (Business Logic Orchestrator)
==============================================================

What:  Central orchestrator for note reads and writes.
How:   Composes the ownership validator and the note repository. Request
       bodies arrive already validated (`NoteDraft`, `NotePatch`, `NoteFilter`).
Who:   Called by the /api/notes route handlers.

Write flow (POST and PUT /api/notes):
    ┌────────────┐    ┌──────────────────────┐    ┌────────────┐
    │  Request   │───▶│  Ownership Validator │───▶│   Store    │
    │ Validators │    │  folder ∥ tags       │    │  (notes +  │
    │  (Route)   │    │  first failure wins  │    │ note_tags) │
    └────────────┘    └──────────────────────┘    └────────────┘

    A rejected reference means nothing is written.

NoteService is stateless: it receives the session factory for each call and
opens one session per store round-trip.
"""

import logging
from typing import List

from sqlalchemy.ext.asyncio import async_sessionmaker

from noteful.database import session_scope, store_errors
from noteful.exceptions import NotFoundError
from noteful.repositories.notes import note_repository
from noteful.schemas.note import (
    NoteDraft,
    NoteFilter,
    NotePatch,
    NoteResponse,
    note_to_response,
)
from noteful.services.ownership import ownership_validator

logger = logging.getLogger(__name__)


class NoteService:
    """
    Business logic layer for note operations.

    Error Handling Strategy:
        Reference problems surface from the ownership validator as 400s.
        Missing or foreign notes raise NotFoundError. Unexpected store
        failures are wrapped in DatabaseError by `store_errors`.
    """

    async def create_note(
        self, sessions: async_sessionmaker, user_id: str, draft: NoteDraft
    ) -> NoteResponse:
        """
        Validate references, then insert the note and its tag rows in one
        transaction.

        Raises:
            InvalidReferenceError: malformed folderId or tag id
            ReferenceNotFoundError: folder or tag not owned by the user
        """
        await ownership_validator.validate_references(
            sessions, draft.folder_id, draft.tags, user_id
        )

        with store_errors("creating note", user_id=user_id):
            async with session_scope(sessions) as session:
                note = await note_repository.create(session, user_id, draft)
                tags = await note_repository.tag_ids_for(session, [note.id])

        logger.info("Created note %s for user %s", note.id, user_id)
        return note_to_response(note, tags[note.id])

    async def get_note(
        self, sessions: async_sessionmaker, user_id: str, note_id: str
    ) -> NoteResponse:
        with store_errors("fetching note", note_id=note_id):
            async with session_scope(sessions) as session:
                note = await note_repository.find_by_id(session, note_id, user_id)
                tags = await note_repository.tag_ids_for(session, [note_id]) if note else {}

        if note is None:
            raise NotFoundError(resource="note", resource_id=note_id)
        return note_to_response(note, tags[note_id])

    async def list_notes(
        self, sessions: async_sessionmaker, user_id: str, note_filter: NoteFilter
    ) -> List[NoteResponse]:
        """
        List the user's notes, most recently updated first.

        Tag references for the whole page are fetched in one query.
        """
        with store_errors("listing notes", user_id=user_id):
            async with session_scope(sessions) as session:
                notes = await note_repository.list(session, user_id, note_filter)
                tags = await note_repository.tag_ids_for(session, [n.id for n in notes])

        return [note_to_response(note, tags[note.id]) for note in notes]

    async def update_note(
        self, sessions: async_sessionmaker, user_id: str, note_id: str, patch: NotePatch
    ) -> NoteResponse:
        """
        Apply a partial update.

        Only references the patch actually changes are checked: a patch that
        leaves `folderId` untouched does not re-validate the stored folder.
        """
        await ownership_validator.validate_references(
            sessions,
            patch.folder_id if patch.changes_folder else None,
            patch.tags if patch.changes_tags else None,
            user_id,
        )

        with store_errors("updating note", note_id=note_id):
            async with session_scope(sessions) as session:
                note = await note_repository.update(session, note_id, user_id, patch)
                tags = await note_repository.tag_ids_for(session, [note_id]) if note else {}

        if note is None:
            raise NotFoundError(resource="note", resource_id=note_id)
        logger.info("Updated note %s", note_id)
        return note_to_response(note, tags[note_id])

    async def delete_note(self, sessions: async_sessionmaker, user_id: str, note_id: str) -> None:
        with store_errors("deleting note", note_id=note_id):
            async with session_scope(sessions) as session:
                deleted = await note_repository.delete(session, note_id, user_id)

        if not deleted:
            raise NotFoundError(resource="note", resource_id=note_id)
        logger.info("Deleted note %s", note_id)


# ── Singleton Instance ────────────────────────────────────────────────────
note_service = NoteService()
