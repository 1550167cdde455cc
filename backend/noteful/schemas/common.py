"""
Noteful Backend — Shared Schema Pieces
========================================

What:  Base model with the API's camelCase naming, plus the error and health
       response models shared by every route.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """
    Base for every response model.

    Fields are declared in snake_case and serialized in camelCase
    (`folder_id` → `folderId`). FastAPI serializes response models by alias.
    """

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "reference_not_found",
            "message": "The folder does not exist",
            "details": {"field": "folderId"},
            "request_id": "3f2a9c1e"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer probes."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
