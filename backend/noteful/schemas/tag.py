"""
Noteful Backend — Tag Schemas
===============================

What:  The tag payload accepted after request validation and the tag
       representation returned to clients.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from noteful.models.tag import Tag
from noteful.schemas.common import ApiModel


class TagInput(BaseModel):
    """Validated body of POST/PUT /api/tags."""
    name: str = Field(min_length=1)


class TagResponse(ApiModel):
    id: str = Field(description="Public tag identifier")
    name: str
    user_id: str = Field(description="Owning user")
    created_at: datetime
    updated_at: datetime


def tag_to_response(tag: Tag) -> TagResponse:
    """Pure transform from the ORM row to the public representation."""
    return TagResponse(
        id=tag.id,
        name=tag.name,
        user_id=tag.user_id,
        created_at=tag.created_at,
        updated_at=tag.updated_at,
    )
