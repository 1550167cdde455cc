"""
Noteful Backend — Auth Route Handlers
=======================================

What:  POST /api/login   username + password → `{"authToken": ...}`
       POST /api/refresh  valid bearer token  → fresh `{"authToken": ...}`
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import async_sessionmaker

from noteful.database import get_session_factory
from noteful.dependencies import get_current_user, json_body
from noteful.schemas.common import ErrorResponse
from noteful.schemas.user import AuthenticatedUser, TokenResponse
from noteful.services.auth_service import auth_service
from noteful.services.request_validation import validate_login

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Auth"])


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={
        400: {"description": "Missing username or password", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
    summary="Exchange credentials for a bearer token",
)
async def login(
    body: Any = Depends(json_body),
    sessions: async_sessionmaker = Depends(get_session_factory),
) -> TokenResponse:
    credentials = validate_login(body)
    return await auth_service.authenticate(sessions, credentials)


@router.post(
    "/refresh",
    response_model=TokenResponse,
    responses={401: {"description": "Missing, invalid or expired token", "model": ErrorResponse}},
    summary="Reissue a bearer token with a new expiry",
)
async def refresh(
    user: AuthenticatedUser = Depends(get_current_user),
    sessions: async_sessionmaker = Depends(get_session_factory),
) -> TokenResponse:
    return await auth_service.refresh(sessions, user)
