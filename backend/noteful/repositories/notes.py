"""
Noteful Backend — Note Repository
===================================

What:  CRUD over `notes` and its `note_tags` association rows, plus the two
       bulk detach statements the cascade coordinator dispatches.
How:   Tag references are plain rows in `note_tags`; they are read back in
       one batched query per call (`tag_ids_for`) rather than through an ORM
       relationship, since `tag_id` carries no foreign key.

Query patterns:
    list:          SELECT ... WHERE user_id = :owner
                   [AND (title ILIKE :term OR content ILIKE :term)]
                   [AND folder_id = :folder]
                   [AND id IN (SELECT note_id FROM note_tags WHERE tag_id = :tag)]
                   ORDER BY updated_at DESC
    detach_folder: UPDATE notes SET folder_id = NULL WHERE folder_id = :folder
    detach_tag:    DELETE FROM note_tags WHERE tag_id = :tag
"""

import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy import delete, insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from noteful.models.note import Note, note_tags
from noteful.schemas.note import NoteDraft, NoteFilter, NotePatch

logger = logging.getLogger(__name__)


class NoteRepository:
    """Stateless note persistence; every read and write is owner-scoped except the bulk detaches."""

    async def create(self, session: AsyncSession, owner_id: str, draft: NoteDraft) -> Note:
        note = Note(
            title=draft.title,
            content=draft.content,
            folder_id=draft.folder_id,
            user_id=owner_id,
        )
        session.add(note)
        await session.flush()
        await self._replace_tags(session, note.id, draft.tags)
        return note

    async def find_by_id(
        self, session: AsyncSession, note_id: str, owner_id: str
    ) -> Optional[Note]:
        result = await session.execute(
            select(Note).where(Note.id == note_id, Note.user_id == owner_id)
        )
        return result.scalar_one_or_none()

    async def list(
        self, session: AsyncSession, owner_id: str, note_filter: NoteFilter
    ) -> List[Note]:
        """
        List the owner's notes matching every filter present in `note_filter`.

        The search term is matched as a literal substring: `%` and `_` in the
        term are escaped, not treated as wildcards.
        """
        query = select(Note).where(Note.user_id == owner_id)

        if note_filter.search_term:
            term = note_filter.search_term
            query = query.where(
                or_(
                    Note.title.icontains(term, autoescape=True),
                    Note.content.icontains(term, autoescape=True),
                )
            )

        if note_filter.folder_id:
            query = query.where(Note.folder_id == note_filter.folder_id)

        if note_filter.tag_id:
            tagged = select(note_tags.c.note_id).where(note_tags.c.tag_id == note_filter.tag_id)
            query = query.where(Note.id.in_(tagged))

        query = query.order_by(Note.updated_at.desc(), Note.id)
        result = await session.execute(query)
        return list(result.scalars().all())

    async def tag_ids_for(
        self, session: AsyncSession, note_ids: Iterable[str]
    ) -> Dict[str, List[str]]:
        """Map each note id to its tag references (sorted for stable output)."""
        ids = list(note_ids)
        tags_by_note: Dict[str, List[str]] = defaultdict(list)
        if not ids:
            return tags_by_note
        result = await session.execute(
            select(note_tags.c.note_id, note_tags.c.tag_id)
            .where(note_tags.c.note_id.in_(ids))
            .order_by(note_tags.c.note_id, note_tags.c.tag_id)
        )
        for note_id, tag_id in result.all():
            tags_by_note[note_id].append(tag_id)
        return tags_by_note

    async def update(
        self, session: AsyncSession, note_id: str, owner_id: str, patch: NotePatch
    ) -> Optional[Note]:
        """
        Apply the fields present in `patch`. Returns None if the note does not
        exist for this owner.
        """
        note = await self.find_by_id(session, note_id, owner_id)
        if note is None:
            return None

        present = patch.model_fields_set
        if "title" in present:
            note.title = patch.title
        if "content" in present:
            note.content = patch.content
        if patch.changes_folder:
            note.folder_id = patch.folder_id
        if patch.changes_tags:
            await self._replace_tags(session, note.id, patch.tags)

        note.updated_at = datetime.now(timezone.utc)
        await session.flush()
        return note

    async def delete(self, session: AsyncSession, note_id: str, owner_id: str) -> bool:
        """Delete an owned note and its tag rows. Returns False if nothing matched."""
        result = await session.execute(
            delete(Note).where(Note.id == note_id, Note.user_id == owner_id)
        )
        if not result.rowcount:
            return False
        # SQLite only honours ON DELETE CASCADE with foreign keys enabled
        await session.execute(delete(note_tags).where(note_tags.c.note_id == note_id))
        return True

    # ── Cascade targets ───────────────────────────────────────────────────

    async def detach_folder(self, session: AsyncSession, folder_id: str) -> int:
        """Clear the folder reference on every note pointing at `folder_id`."""
        result = await session.execute(
            update(Note)
            .where(Note.folder_id == folder_id)
            .values(folder_id=None)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def detach_tag(self, session: AsyncSession, tag_id: str) -> int:
        """Remove `tag_id` from every note's tag set."""
        result = await session.execute(delete(note_tags).where(note_tags.c.tag_id == tag_id))
        return result.rowcount or 0

    async def _replace_tags(self, session: AsyncSession, note_id: str, tag_ids: List[str]) -> None:
        await session.execute(delete(note_tags).where(note_tags.c.note_id == note_id))
        unique_ids = list(dict.fromkeys(tag_ids))
        if unique_ids:
            await session.execute(
                insert(note_tags),
                [{"note_id": note_id, "tag_id": tag_id} for tag_id in unique_ids],
            )


note_repository = NoteRepository()
