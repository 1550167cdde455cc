"""
Noteful Backend — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions, each tagged with an `ErrorKind`.
How:   Services and validators raise these; a single boundary in
       `noteful.main.register_exception_handlers` maps the kind to an HTTP
       status and a JSON error body. Nothing below the routes knows about
       status codes.
Who:   Raised by request validators, the ownership validator, repositories,
       and the auth service.

Exception Hierarchy:
    NotefulError (base)
    ├── InvalidShapeError               INVALID_SHAPE           → 400
    │   └── RegistrationValidationError INVALID_SHAPE           → 422
    ├── MissingRequiredFieldError       MISSING_REQUIRED_FIELD  → 400
    ├── InvalidReferenceError           INVALID_REFERENCE       → 400
    ├── ReferenceNotFoundError          REFERENCE_NOT_FOUND     → 400
    ├── DuplicateNameError              DUPLICATE_NAME          → 400
    ├── NotFoundError                   NOT_FOUND               → 404
    ├── UnauthorizedError               UNAUTHORIZED            → 401
    └── DatabaseError                   DATABASE                → 500
"""

import enum
from typing import Any, Dict, Optional


class ErrorKind(str, enum.Enum):
    """Machine-readable error category; also used as the `error` field of responses."""

    INVALID_SHAPE = "invalid_shape"
    MISSING_REQUIRED_FIELD = "missing_required_field"
    INVALID_REFERENCE = "invalid_reference"
    REFERENCE_NOT_FOUND = "reference_not_found"
    DUPLICATE_NAME = "duplicate_name"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    DATABASE = "database_error"


class NotefulError(Exception):
    """
    Base exception for all Noteful application errors.

    Attributes:
        kind:            Error category, mapped to a status code at the HTTP boundary
        message:         User-facing error description (safe to return in API response)
        context:         Additional debug info, returned as `details` except for
                         DATABASE errors, where it is only logged
        status_override: Forces a specific status for this instance (registration
                         validation errors use 422)
    """

    kind: ErrorKind = ErrorKind.DATABASE
    status_override: Optional[int] = None

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class InvalidShapeError(NotefulError):
    """
    The request body (or a field in it) has the wrong structure or type.

    When: body is not a JSON object, `tags` is not an array, a string field
    holds a number, etc.
    """

    kind = ErrorKind.INVALID_SHAPE

    def __init__(
        self,
        message: str = "The request body is malformed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class RegistrationValidationError(InvalidShapeError):
    """
    A user registration payload failed validation.

    HTTP: 422 Unprocessable Entity. The response additionally carries the
    offending field as `location` and `reason: "ValidationError"`.
    """

    status_override = 422

    def __init__(self, message: str, location: str):
        super().__init__(message=message, field=location)
        self.location = location


class MissingRequiredFieldError(NotefulError):
    """A required field is absent or empty, e.g. a note without a title."""

    kind = ErrorKind.MISSING_REQUIRED_FIELD

    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(
            message=message or f"Missing `{field}` in request body",
            context={"field": field},
        )
        self.field = field


class InvalidReferenceError(NotefulError):
    """
    An identifier is malformed (not a 32-character hex token).

    Used both for the addressed resource id in the path and for ids nested in
    a payload (`folderId`, elements of `tags`).
    """

    kind = ErrorKind.INVALID_REFERENCE

    def __init__(self, field: str = "id", message: Optional[str] = None):
        super().__init__(
            message=message or f"The `{field}` is not valid",
            context={"field": field},
        )
        self.field = field


class ReferenceNotFoundError(NotefulError):
    """
    A well-formed nested reference does not name an entity owned by the caller.

    Returned as 400, not 404: the addressed resource exists, its payload does
    not. Nonexistent ids and ids owned by another user are reported identically.
    """

    kind = ErrorKind.REFERENCE_NOT_FOUND

    def __init__(self, field: str, message: str):
        super().__init__(message=message, context={"field": field})
        self.field = field


class DuplicateNameError(NotefulError):
    """
    A folder, tag, or username collides with an existing one of the same owner.

    HTTP: 400 Bad Request (not 409, matching the established API contract).
    """

    kind = ErrorKind.DUPLICATE_NAME

    def __init__(self, resource: str, message: Optional[str] = None):
        super().__init__(
            message=message or f"The {resource} name already exists",
            context={"resource": resource},
        )
        self.resource = resource


class NotFoundError(NotefulError):
    """
    The addressed resource does not exist or is not owned by the caller.

    Also raised for unmatched routes so every 404 shares one body format.
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class UnauthorizedError(NotefulError):
    """Missing, malformed, or expired identity assertion, or bad login credentials."""

    kind = ErrorKind.UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message=message)


class DatabaseError(NotefulError):
    """
    Raised when a store operation fails unexpectedly.

    The message returned to the client is always generic; `context` is
    logged server-side only.
    """

    kind = ErrorKind.DATABASE

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
