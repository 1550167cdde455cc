"""
Noteful Backend — User and Auth Schemas
=========================================

What:  Registration and login payloads, the public user representation, and
       the token response.

Security:
    `UserResponse` is built from explicit fields. The password hash has no
    field here, so it can never be serialized.
"""

from typing import Optional

from pydantic import BaseModel, Field

from noteful.models.user import User
from noteful.schemas.common import ApiModel


class RegistrationInput(BaseModel):
    """Validated body of POST /api/users."""
    username: str
    password: str
    fullname: Optional[str] = None


class LoginInput(BaseModel):
    """Validated body of POST /api/login."""
    username: str
    password: str


class UserResponse(ApiModel):
    id: str = Field(description="Public user identifier")
    username: str
    fullname: Optional[str] = None


class TokenResponse(ApiModel):
    auth_token: str = Field(description="Signed bearer token (JWT)")


def user_to_response(user: User) -> UserResponse:
    """Pure transform from the ORM row to the public representation."""
    return UserResponse(id=user.id, username=user.username, fullname=user.fullname)


class AuthenticatedUser(BaseModel):
    """The identity carried by a verified bearer token (the `user` claim)."""
    id: str
    username: str
    fullname: Optional[str] = None
