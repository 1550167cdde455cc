"""
Entity repositories.

Each repository is stateless and receives an `AsyncSession` per call; the
caller decides the transaction boundaries. Every query that addresses an
owned entity filters on the owning user id.
"""

from noteful.repositories.folders import FolderRepository, folder_repository
from noteful.repositories.notes import NoteRepository, note_repository
from noteful.repositories.tags import TagRepository, tag_repository
from noteful.repositories.users import UserRepository, user_repository

__all__ = [
    "FolderRepository",
    "NoteRepository",
    "TagRepository",
    "UserRepository",
    "folder_repository",
    "note_repository",
    "tag_repository",
    "user_repository",
]
