"""
Noteful Backend — User SQLAlchemy Model
=========================================

What:  ORM model for the `users` table (the identity store).
How:   `password_hash` holds a passlib hash; it never leaves the service layer.
       Output schemas build from explicit fields, so the hash cannot leak.
"""

from datetime import datetime, timezone

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from noteful.database import Base, UTCDateTime
from noteful.ids import ID_LENGTH, new_id


class User(Base):
    """
    A registered account.

    Lifecycle:
        Created via POST /api/users; immutable afterwards (credential
        rotation is not exposed by the API).
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)

    # Globally unique, enforced by the store; a collision maps to DuplicateNameError
    username: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    fullname: Mapped[str | None] = mapped_column(String(255), nullable=True, default=None)

    password_hash: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
