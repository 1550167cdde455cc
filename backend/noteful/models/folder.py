"""
Noteful Backend — Folder SQLAlchemy Model
===========================================

What:  ORM model for the `folders` table.
How:   `(user_id, name)` is a composite unique constraint: two users may both
       have an "Archive" folder, one user may not have two.
"""

from datetime import datetime, timezone

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from noteful.database import Base, UTCDateTime
from noteful.ids import ID_LENGTH, new_id


class Folder(Base):
    """
    A named container for notes, owned by one user.

    Deleting a folder never deletes its notes; the cascade coordinator
    detaches them instead (see `noteful.services.cascade`).
    """

    __tablename__ = "folders"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    user_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
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
        UniqueConstraint("user_id", "name", name="uq_folders_user_name"),
    )

    def __repr__(self) -> str:
        return f"<Folder(id={self.id}, name='{self.name}', user_id={self.user_id})>"
