"""
Noteful Backend — Route Dependencies
======================================

What:  FastAPI dependencies shared by the route modules.

    json_body           raw JSON body; unparseable input → InvalidShapeError (400)
    registration_body   same, but failures are registration errors (422)
    get_current_user    verified bearer token → AuthenticatedUser, else 401

Bodies are read as plain JSON rather than bound to pydantic models so that
the request validators, not FastAPI's default 422 handler, decide which
error a malformed payload produces.
"""

import json
from typing import Any, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from noteful.exceptions import (
    InvalidShapeError,
    RegistrationValidationError,
    UnauthorizedError,
)
from noteful.schemas.user import AuthenticatedUser
from noteful.services.auth_service import auth_service

# auto_error=False: a missing header must produce our 401 body, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False, description="Token from POST /api/login")


async def _read_json(request: Request) -> Any:
    body = await request.body()
    if not body:
        return None
    return json.loads(body)


async def json_body(request: Request) -> Any:
    try:
        return await _read_json(request)
    except ValueError as e:
        raise InvalidShapeError(message="The request body must be valid JSON") from e


async def registration_body(request: Request) -> Any:
    try:
        return await _read_json(request)
    except ValueError as e:
        raise RegistrationValidationError(
            "The request body must be valid JSON", location="body"
        ) from e


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthenticatedUser:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()
    return auth_service.decode_auth_token(credentials.credentials)
