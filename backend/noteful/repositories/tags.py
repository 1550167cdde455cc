"""Tag repository: CRUD over `tags`, scoped by owner, plus the bulk ownership count."""

from typing import Collection

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from noteful.models.tag import Tag
from noteful.repositories.named import NamedEntityRepository


class TagRepository(NamedEntityRepository[Tag]):
    model = Tag
    resource = "tag"

    async def count_owned(
        self, session: AsyncSession, tag_ids: Collection[str], owner_id: str
    ) -> int:
        """
        Count how many of `tag_ids` exist AND belong to `owner_id`.

        Query plan:
            SELECT count(id) FROM tags WHERE id IN (:ids) AND user_id = :owner
        """
        if not tag_ids:
            return 0
        result = await session.execute(
            select(func.count(Tag.id)).where(
                Tag.id.in_(list(tag_ids)),
                Tag.user_id == owner_id,
            )
        )
        return result.scalar() or 0


tag_repository = TagRepository()
