"""
Noteful Backend — Note Schemas
================================

What:  The typed records the request validators produce for note writes and
       list queries, and the note representation returned to clients.

Partial updates:
    `NotePatch` relies on pydantic's `model_fields_set`: a field is applied
    only if the validator explicitly set it, so "absent" and "present but
    null" stay distinguishable. For `folder_id`, present-and-None means
    "detach from any folder".
"""

from datetime import datetime
from typing import Iterable, List, Optional

from pydantic import BaseModel, Field

from noteful.models.note import Note
from noteful.schemas.common import ApiModel


# ══════════════════════════════════════════════════════════════════════════
# Validated inputs
# ══════════════════════════════════════════════════════════════════════════


class NoteDraft(BaseModel):
    """Validated body of POST /api/notes."""
    title: str = Field(min_length=1)
    content: Optional[str] = None
    folder_id: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class NotePatch(BaseModel):
    """
    Validated body of PUT /api/notes/{id}.

    Only fields in `model_fields_set` are applied by the repository.
    """
    title: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = None
    folder_id: Optional[str] = None
    tags: Optional[List[str]] = None

    @property
    def changes_folder(self) -> bool:
        return "folder_id" in self.model_fields_set

    @property
    def changes_tags(self) -> bool:
        return "tags" in self.model_fields_set and self.tags is not None


class NoteFilter(BaseModel):
    """
    Validated query parameters of GET /api/notes.

    All three filters are optional and composable; each is AND-ed with the
    owner filter. `search_term` is a case-insensitive substring match against
    title OR content.
    """
    search_term: Optional[str] = None
    folder_id: Optional[str] = None
    tag_id: Optional[str] = None


# ══════════════════════════════════════════════════════════════════════════
# Response model
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(ApiModel):
    id: str = Field(description="Public note identifier")
    title: str
    content: Optional[str] = None
    folder_id: Optional[str] = Field(default=None, description="Folder reference, null if none")
    tags: List[str] = Field(default_factory=list, description="Tag references")
    user_id: str = Field(description="Owning user")
    created_at: datetime
    updated_at: datetime


def note_to_response(note: Note, tag_ids: Iterable[str]) -> NoteResponse:
    """Pure transform from the ORM row and its tag references to the public representation."""
    return NoteResponse(
        id=note.id,
        title=note.title,
        content=note.content,
        folder_id=note.folder_id,
        tags=list(tag_ids),
        user_id=note.user_id,
        created_at=note.created_at,
        updated_at=note.updated_at,
    )
