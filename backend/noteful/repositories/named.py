"""
Noteful Backend — Named Entity Repository
===========================================

What:  Shared CRUD for the two "owned, uniquely named per user" entities:
       folders and tags.
How:   Subclasses bind `model` and `resource`. Name uniqueness is left to the
       store's `(user_id, name)` unique constraint; the resulting
       IntegrityError is translated into DuplicateNameError here, so no
       check-then-insert race exists.

Query patterns:
    find_by_id: SELECT ... WHERE id = :id AND user_id = :owner
    list:       SELECT ... WHERE user_id = :owner ORDER BY name
    delete:     DELETE ... WHERE id = :id (ownership checked by the caller)
"""

import logging
from datetime import datetime, timezone
from typing import ClassVar, Generic, List, Optional, Type, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from noteful.exceptions import DuplicateNameError
from noteful.models.folder import Folder
from noteful.models.tag import Tag

logger = logging.getLogger(__name__)

NamedModel = TypeVar("NamedModel", Folder, Tag)


class NamedEntityRepository(Generic[NamedModel]):
    """CRUD over a model with `id`, `name`, `user_id` and timestamp columns."""

    model: ClassVar[Type]
    resource: ClassVar[str]

    async def create(self, session: AsyncSession, owner_id: str, name: str) -> NamedModel:
        """
        Insert a new row owned by `owner_id`.

        Raises:
            DuplicateNameError: the owner already has an entity with this name
        """
        entity = self.model(name=name, user_id=owner_id)
        session.add(entity)
        await self._flush_unique(session, name)
        return entity

    async def find_by_id(
        self, session: AsyncSession, entity_id: str, owner_id: str
    ) -> Optional[NamedModel]:
        result = await session.execute(
            select(self.model).where(
                self.model.id == entity_id,
                self.model.user_id == owner_id,
            )
        )
        return result.scalar_one_or_none()

    async def list(self, session: AsyncSession, owner_id: str) -> List[NamedModel]:
        result = await session.execute(
            select(self.model)
            .where(self.model.user_id == owner_id)
            .order_by(self.model.name)
        )
        return list(result.scalars().all())

    async def update(
        self, session: AsyncSession, entity_id: str, owner_id: str, name: str
    ) -> Optional[NamedModel]:
        """
        Rename an owned entity. Returns None if it does not exist for this owner.

        `updated_at` is set explicitly so it advances even when the new name
        equals the old one (no net change means no UPDATE, and no onupdate).
        """
        entity = await self.find_by_id(session, entity_id, owner_id)
        if entity is None:
            return None
        entity.name = name
        entity.updated_at = datetime.now(timezone.utc)
        await self._flush_unique(session, name)
        return entity

    async def delete(self, session: AsyncSession, entity_id: str) -> None:
        await session.execute(delete(self.model).where(self.model.id == entity_id))

    async def _flush_unique(self, session: AsyncSession, name: str) -> None:
        try:
            await session.flush()
        except IntegrityError as e:
            logger.info("Duplicate %s name rejected: %r", self.resource, name)
            raise DuplicateNameError(self.resource) from e
