"""
Noteful Backend — Notes Route Handlers
========================================

What:  CRUD over the caller's notes under /api/notes, plus filtered listing.
How:   Validates path, query and body, then delegates to NoteService.

Listing filters (all optional, combined with AND):
    searchTerm   case-insensitive substring of title or content
    folderId     notes in this folder
    tagId        notes carrying this tag

    GET /api/notes?searchTerm=milk&tagId=5f0e...
"""

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import async_sessionmaker

from noteful.database import get_session_factory
from noteful.dependencies import get_current_user, json_body
from noteful.schemas.common import ErrorResponse
from noteful.schemas.note import NoteResponse
from noteful.schemas.user import AuthenticatedUser
from noteful.services.note_service import note_service
from noteful.services.request_validation import (
    validate_note_draft,
    validate_note_filter,
    validate_note_patch,
    validate_path_id,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/notes",
    tags=["Notes"],
    responses={
        401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
)


@router.get(
    "",
    response_model=List[NoteResponse],
    responses={400: {"description": "Malformed folderId or tagId", "model": ErrorResponse}},
    summary="List notes, most recently updated first",
)
async def list_notes(
    search_term: Optional[str] = Query(default=None, alias="searchTerm"),
    folder_id: Optional[str] = Query(default=None, alias="folderId"),
    tag_id: Optional[str] = Query(default=None, alias="tagId"),
    user: AuthenticatedUser = Depends(get_current_user),
    sessions: async_sessionmaker = Depends(get_session_factory),
) -> List[NoteResponse]:
    note_filter = validate_note_filter(search_term, folder_id, tag_id)
    return await note_service.list_notes(sessions, user.id, note_filter)


@router.get(
    "/{note_id}",
    response_model=NoteResponse,
    responses={
        400: {"description": "Malformed id", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
    },
    summary="Get a single note",
)
async def get_note(
    note_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    sessions: async_sessionmaker = Depends(get_session_factory),
) -> NoteResponse:
    validate_path_id(note_id)
    return await note_service.get_note(sessions, user.id, note_id)


@router.post(
    "",
    response_model=NoteResponse,
    status_code=201,
    responses={
        400: {"description": "Missing title, bad shape, or rejected folder/tag reference",
              "model": ErrorResponse},
    },
    summary="Create a note",
)
async def create_note(
    request: Request,
    response: Response,
    user: AuthenticatedUser = Depends(get_current_user),
    body: Any = Depends(json_body),
    sessions: async_sessionmaker = Depends(get_session_factory),
) -> NoteResponse:
    """
    Body: `{"title": str, "content"?: str, "folderId"?: id, "tags"?: [id, ...]}`.

    `folderId` and every tag id must name an entity the caller owns; a foreign
    id is rejected exactly like a nonexistent one.
    """
    draft = validate_note_draft(body)
    note = await note_service.create_note(sessions, user.id, draft)
    response.headers["Location"] = f"{request.url.path}/{note.id}"
    return note


@router.put(
    "/{note_id}",
    response_model=NoteResponse,
    responses={
        400: {"description": "Malformed id, bad shape, or rejected reference",
              "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
    },
    summary="Update a note",
)
async def update_note(
    note_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    body: Any = Depends(json_body),
    sessions: async_sessionmaker = Depends(get_session_factory),
) -> NoteResponse:
    """
    Partial update: only keys present in the body change.

    `"folderId": null` (or `""`) detaches the note from its folder;
    `"tags": []` clears its tags while `"tags": null` leaves them as they are.
    """
    validate_path_id(note_id)
    patch = validate_note_patch(body)
    return await note_service.update_note(sessions, user.id, note_id, patch)


@router.delete(
    "/{note_id}",
    status_code=204,
    responses={
        400: {"description": "Malformed id", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
    },
    summary="Delete a note",
)
async def delete_note(
    note_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    sessions: async_sessionmaker = Depends(get_session_factory),
) -> Response:
    validate_path_id(note_id)
    await note_service.delete_note(sessions, user.id, note_id)
    return Response(status_code=204)
