"""Create users, folders, tags, notes and note_tags

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Initial schema. Every folder, tag and note is owned by a user and
       goes away with it (ON DELETE CASCADE on user_id).
How:   Folder and tag names are unique per owner. `notes.folder_id` and
       `note_tags.tag_id` carry no foreign key: those references are checked
       at write time and cleaned up when the folder or tag is deleted.

Rollback: downgrade() drops all five tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ID = sa.String(32)


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def _owner() -> sa.Column:
    return sa.Column(
        "user_id",
        ID,
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="Owning user",
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", ID, nullable=False),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("fullname", sa.String(255), nullable=True),
        sa.Column("password_hash", sa.Text(), nullable=False, comment="passlib hash"),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )

    for table in ("folders", "tags"):
        op.create_table(
            table,
            sa.Column("id", ID, nullable=False),
            sa.Column("name", sa.String(255), nullable=False),
            _owner(),
            _timestamp("created_at"),
            _timestamp("updated_at"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("user_id", "name", name=f"uq_{table}_user_name"),
        )
        op.create_index(f"ix_{table}_user_id", table, ["user_id"])

    op.create_table(
        "notes",
        sa.Column("id", ID, nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("folder_id", ID, nullable=True, comment="Folder reference, no FK"),
        _owner(),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notes_folder_id", "notes", ["folder_id"])
    # Owner filter + most-recently-updated ordering of the list endpoint
    op.create_index("idx_notes_user_updated_at", "notes", ["user_id", "updated_at"])

    op.create_table(
        "note_tags",
        sa.Column(
            "note_id",
            ID,
            sa.ForeignKey("notes.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("tag_id", ID, nullable=False, comment="Tag reference, no FK"),
        sa.PrimaryKeyConstraint("note_id", "tag_id"),
    )
    op.create_index("ix_note_tags_tag_id", "note_tags", ["tag_id"])


def downgrade() -> None:
    op.drop_index("ix_note_tags_tag_id", table_name="note_tags")
    op.drop_table("note_tags")
    op.drop_index("idx_notes_user_updated_at", table_name="notes")
    op.drop_index("ix_notes_folder_id", table_name="notes")
    op.drop_table("notes")
    for table in ("tags", "folders"):
        op.drop_index(f"ix_{table}_user_id", table_name=table)
        op.drop_table(table)
    op.drop_table("users")
