"""
Noteful Backend — Note SQLAlchemy Model
=========================================

What:  ORM model for the `notes` table plus the `note_tags` association table.
How:   A note points at zero-or-one folder (`folder_id`) and zero-or-many tags
       (rows in `note_tags`).

Table Design Rationale:
    - `notes.folder_id` and `note_tags.tag_id` deliberately carry NO foreign
      key. Reference integrity is enforced at write time by the ownership
      validator, and dangling references are removed by the cascade
      coordinator when a folder or tag is deleted.
    - `note_tags.note_id` does reference `notes.id`: rows belong to the note
      and go away with it.
    - Index on `note_tags.tag_id`: serves both the `tagId` list filter and the
      bulk detach on tag deletion.
    - Index on `(user_id, updated_at)`: the list endpoint always filters by
      owner and sorts by most recently updated.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, ForeignKey, Index, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column

from noteful.database import Base, UTCDateTime
from noteful.ids import ID_LENGTH, new_id


note_tags = Table(
    "note_tags",
    Base.metadata,
    Column(
        "note_id",
        String(ID_LENGTH),
        ForeignKey("notes.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("tag_id", String(ID_LENGTH), primary_key=True, index=True),
    comment="Tag references of each note (no FK on tag_id; see ownership validator)",
)


class Note(Base):
    """
    A user's note.

    Lifecycle:
        1. Created by POST /api/notes after shape and ownership validation
        2. Partially updated by PUT /api/notes/{id}
        3. Folder reference cleared when its folder is deleted
        4. Tag references removed when a tag is deleted
        5. Deleted by DELETE /api/notes/{id} (its note_tags rows go with it)
    """

    __tablename__ = "notes"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)

    title: Mapped[str] = mapped_column(Text, nullable=False)

    content: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)

    # No FK: see module docstring
    folder_id: Mapped[str | None] = mapped_column(
        String(ID_LENGTH),
        nullable=True,
        default=None,
        index=True,
    )

    user_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_notes_user_updated_at", "user_id", "updated_at"),
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title='{self.title}', user_id={self.user_id})>"
