"""Folder repository: CRUD over `folders`, scoped by owner."""

from noteful.models.folder import Folder
from noteful.repositories.named import NamedEntityRepository


class FolderRepository(NamedEntityRepository[Folder]):
    model = Folder
    resource = "folder"


folder_repository = FolderRepository()
