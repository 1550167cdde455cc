"""
Noteful Backend — User Registration Route
===========================================

What:  POST /api/users creates an account. This is the only unauthenticated
       write in the API.

Error contract:
    Validation failures are 422 and name the offending field:
        {"error": "invalid_shape", "code": 422, "reason": "ValidationError",
         "message": "Missing field", "location": "username", ...}
    A taken username is a 400 duplicate_name.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import async_sessionmaker

from noteful.database import get_session_factory
from noteful.dependencies import registration_body
from noteful.schemas.common import ErrorResponse
from noteful.schemas.user import UserResponse
from noteful.services.request_validation import validate_registration
from noteful.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.post(
    "",
    response_model=UserResponse,
    status_code=201,
    responses={
        400: {"description": "Username already exists", "model": ErrorResponse},
        422: {"description": "Registration payload failed validation", "model": ErrorResponse},
    },
    summary="Register a new user",
)
async def register_user(
    request: Request,
    response: Response,
    body: Any = Depends(registration_body),
    sessions: async_sessionmaker = Depends(get_session_factory),
) -> UserResponse:
    registration = validate_registration(body)
    user = await user_service.register(sessions, registration)
    response.headers["Location"] = f"{request.url.path}/{user.id}"
    return user
