"""
Noteful Backend — Folder Schemas
==================================

What:  The folder payload accepted after request validation and the folder
       representation returned to clients.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from noteful.models.folder import Folder
from noteful.schemas.common import ApiModel


class FolderInput(BaseModel):
    """Validated body of POST/PUT /api/folders."""
    name: str = Field(min_length=1)


class FolderResponse(ApiModel):
    id: str = Field(description="Public folder identifier")
    name: str
    user_id: str = Field(description="Owning user")
    created_at: datetime
    updated_at: datetime


def folder_to_response(folder: Folder) -> FolderResponse:
    """Pure transform from the ORM row to the public representation."""
    return FolderResponse(
        id=folder.id,
        name=folder.name,
        user_id=folder.user_id,
        created_at=folder.created_at,
        updated_at=folder.updated_at,
    )
