"""
Noteful Backend — Folder and Tag Services
===========================================

What:  CRUD workflows for the two named, user-owned entities.
How:   One generic service bound to a repository, a response transform and
       the cascade operation that runs on delete. Folders and tags differ
       only in those three bindings.

Delete flow:
    1. Look the entity up scoped to the caller      → 404 if absent or foreign
    2. Hand it to the cascade coordinator           → removal ∥ reference cleanup
"""

import logging
from typing import Awaitable, Callable, Generic, List, TypeVar

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import async_sessionmaker

from noteful.database import session_scope, store_errors
from noteful.exceptions import NotFoundError
from noteful.repositories.folders import folder_repository
from noteful.repositories.named import NamedEntityRepository
from noteful.repositories.tags import tag_repository
from noteful.schemas.folder import folder_to_response
from noteful.schemas.tag import tag_to_response
from noteful.services.cascade import cascade_coordinator

logger = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT", bound=BaseModel)
CascadeDelete = Callable[[async_sessionmaker, str], Awaitable[None]]


class NamedEntityService(Generic[ResponseT]):

    def __init__(
        self,
        repository: NamedEntityRepository,
        to_response: Callable[..., ResponseT],
        cascade_delete: CascadeDelete,
    ):
        self.repository = repository
        self.to_response = to_response
        self.cascade_delete = cascade_delete

    @property
    def resource(self) -> str:
        return self.repository.resource

    async def create(self, sessions: async_sessionmaker, user_id: str, name: str) -> ResponseT:
        with store_errors(f"creating {self.resource}", user_id=user_id):
            async with session_scope(sessions) as session:
                entity = await self.repository.create(session, user_id, name)
        logger.info("Created %s %s for user %s", self.resource, entity.id, user_id)
        return self.to_response(entity)

    async def get(self, sessions: async_sessionmaker, user_id: str, entity_id: str) -> ResponseT:
        with store_errors(f"fetching {self.resource}", resource_id=entity_id):
            async with session_scope(sessions) as session:
                entity = await self.repository.find_by_id(session, entity_id, user_id)
        if entity is None:
            raise NotFoundError(resource=self.resource, resource_id=entity_id)
        return self.to_response(entity)

    async def list(self, sessions: async_sessionmaker, user_id: str) -> List[ResponseT]:
        with store_errors(f"listing {self.resource}s", user_id=user_id):
            async with session_scope(sessions) as session:
                entities = await self.repository.list(session, user_id)
        return [self.to_response(entity) for entity in entities]

    async def update(
        self, sessions: async_sessionmaker, user_id: str, entity_id: str, name: str
    ) -> ResponseT:
        with store_errors(f"updating {self.resource}", resource_id=entity_id):
            async with session_scope(sessions) as session:
                entity = await self.repository.update(session, entity_id, user_id, name)
        if entity is None:
            raise NotFoundError(resource=self.resource, resource_id=entity_id)
        logger.info("Renamed %s %s", self.resource, entity_id)
        return self.to_response(entity)

    async def delete(self, sessions: async_sessionmaker, user_id: str, entity_id: str) -> None:
        with store_errors(f"fetching {self.resource} for delete", resource_id=entity_id):
            async with session_scope(sessions) as session:
                entity = await self.repository.find_by_id(session, entity_id, user_id)
        if entity is None:
            raise NotFoundError(resource=self.resource, resource_id=entity_id)

        await self.cascade_delete(sessions, entity_id)
        logger.info("Deleted %s %s for user %s", self.resource, entity_id, user_id)


# ── Singleton Instances ───────────────────────────────────────────────────
folder_service = NamedEntityService(
    folder_repository, folder_to_response, cascade_coordinator.delete_folder
)
tag_service = NamedEntityService(
    tag_repository, tag_to_response, cascade_coordinator.delete_tag
)
