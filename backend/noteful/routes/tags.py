"""Tag route handlers: CRUD over the caller's tags under /api/tags."""

import logging
from typing import Any, List

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import async_sessionmaker

from noteful.database import get_session_factory
from noteful.dependencies import get_current_user, json_body
from noteful.schemas.common import ErrorResponse
from noteful.schemas.tag import TagResponse
from noteful.schemas.user import AuthenticatedUser
from noteful.services.named_entity_service import tag_service
from noteful.services.request_validation import validate_path_id, validate_tag_input

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/tags",
    tags=["Tags"],
    responses={
        401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
)


@router.get("", response_model=List[TagResponse], summary="List tags by name")
async def list_tags(
    user: AuthenticatedUser = Depends(get_current_user),
    sessions: async_sessionmaker = Depends(get_session_factory),
) -> List[TagResponse]:
    return await tag_service.list(sessions, user.id)


@router.get(
    "/{tag_id}",
    response_model=TagResponse,
    responses={
        400: {"description": "Malformed id", "model": ErrorResponse},
        404: {"description": "Tag not found", "model": ErrorResponse},
    },
    summary="Get a single tag",
)
async def get_tag(
    tag_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    sessions: async_sessionmaker = Depends(get_session_factory),
) -> TagResponse:
    validate_path_id(tag_id)
    return await tag_service.get(sessions, user.id, tag_id)


@router.post(
    "",
    response_model=TagResponse,
    status_code=201,
    responses={400: {"description": "Missing or duplicate name", "model": ErrorResponse}},
    summary="Create a tag",
)
async def create_tag(
    request: Request,
    response: Response,
    user: AuthenticatedUser = Depends(get_current_user),
    body: Any = Depends(json_body),
    sessions: async_sessionmaker = Depends(get_session_factory),
) -> TagResponse:
    tag_input = validate_tag_input(body)
    tag = await tag_service.create(sessions, user.id, tag_input.name)
    response.headers["Location"] = f"{request.url.path}/{tag.id}"
    return tag


@router.put(
    "/{tag_id}",
    response_model=TagResponse,
    responses={
        400: {"description": "Malformed id, missing or duplicate name", "model": ErrorResponse},
        404: {"description": "Tag not found", "model": ErrorResponse},
    },
    summary="Rename a tag",
)
async def update_tag(
    tag_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    body: Any = Depends(json_body),
    sessions: async_sessionmaker = Depends(get_session_factory),
) -> TagResponse:
    validate_path_id(tag_id)
    tag_input = validate_tag_input(body)
    return await tag_service.update(sessions, user.id, tag_id, tag_input.name)


@router.delete(
    "/{tag_id}",
    status_code=204,
    responses={
        400: {"description": "Malformed id", "model": ErrorResponse},
        404: {"description": "Tag not found", "model": ErrorResponse},
    },
    summary="Delete a tag and remove it from every note",
)
async def delete_tag(
    tag_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    sessions: async_sessionmaker = Depends(get_session_factory),
) -> Response:
    validate_path_id(tag_id)
    await tag_service.delete(sessions, user.id, tag_id)
    return Response(status_code=204)
