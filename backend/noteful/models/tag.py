"""
Noteful Backend — Tag SQLAlchemy Model
========================================

What:  ORM model for the `tags` table. Same ownership and uniqueness rules
       as folders: `(user_id, name)` is unique.
"""

from datetime import datetime, timezone

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from noteful.database import Base, UTCDateTime
from noteful.ids import ID_LENGTH, new_id


class Tag(Base):
    __tablename__ = "tags"

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
        UniqueConstraint("user_id", "name", name="uq_tags_user_name"),
    )

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name='{self.name}', user_id={self.user_id})>"
