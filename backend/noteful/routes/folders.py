"""
Noteful Backend — Folder Route Handlers
=========================================

What:  CRUD over the caller's folders under /api/folders.
How:   Validates the path id and body, then delegates to `folder_service`.
       Every handler takes `get_current_user` as a dependency, so a bearer
       token is required before the body is read.

Deleting a folder does not delete its notes: they are detached (their
`folderId` becomes null).
"""

import logging
from typing import Any, List

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import async_sessionmaker

from noteful.database import get_session_factory
from noteful.dependencies import get_current_user, json_body
from noteful.schemas.common import ErrorResponse
from noteful.schemas.folder import FolderResponse
from noteful.schemas.user import AuthenticatedUser
from noteful.services.named_entity_service import folder_service
from noteful.services.request_validation import validate_folder_input, validate_path_id

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/folders",
    tags=["Folders"],
    responses={
        401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
)


@router.get("", response_model=List[FolderResponse], summary="List folders by name")
async def list_folders(
    user: AuthenticatedUser = Depends(get_current_user),
    sessions: async_sessionmaker = Depends(get_session_factory),
) -> List[FolderResponse]:
    return await folder_service.list(sessions, user.id)


@router.get(
    "/{folder_id}",
    response_model=FolderResponse,
    responses={
        400: {"description": "Malformed id", "model": ErrorResponse},
        404: {"description": "Folder not found", "model": ErrorResponse},
    },
    summary="Get a single folder",
)
async def get_folder(
    folder_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    sessions: async_sessionmaker = Depends(get_session_factory),
) -> FolderResponse:
    validate_path_id(folder_id)
    return await folder_service.get(sessions, user.id, folder_id)


@router.post(
    "",
    response_model=FolderResponse,
    status_code=201,
    responses={400: {"description": "Missing or duplicate name", "model": ErrorResponse}},
    summary="Create a folder",
)
async def create_folder(
    request: Request,
    response: Response,
    user: AuthenticatedUser = Depends(get_current_user),
    body: Any = Depends(json_body),
    sessions: async_sessionmaker = Depends(get_session_factory),
) -> FolderResponse:
    folder_input = validate_folder_input(body)
    folder = await folder_service.create(sessions, user.id, folder_input.name)
    response.headers["Location"] = f"{request.url.path}/{folder.id}"
    return folder


@router.put(
    "/{folder_id}",
    response_model=FolderResponse,
    responses={
        400: {"description": "Malformed id, missing or duplicate name", "model": ErrorResponse},
        404: {"description": "Folder not found", "model": ErrorResponse},
    },
    summary="Rename a folder",
)
async def update_folder(
    folder_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    body: Any = Depends(json_body),
    sessions: async_sessionmaker = Depends(get_session_factory),
) -> FolderResponse:
    validate_path_id(folder_id)
    folder_input = validate_folder_input(body)
    return await folder_service.update(sessions, user.id, folder_id, folder_input.name)


@router.delete(
    "/{folder_id}",
    status_code=204,
    responses={
        400: {"description": "Malformed id", "model": ErrorResponse},
        404: {"description": "Folder not found", "model": ErrorResponse},
    },
    summary="Delete a folder and detach its notes",
)
async def delete_folder(
    folder_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    sessions: async_sessionmaker = Depends(get_session_factory),
) -> Response:
    validate_path_id(folder_id)
    await folder_service.delete(sessions, user.id, folder_id)
    return Response(status_code=204)
