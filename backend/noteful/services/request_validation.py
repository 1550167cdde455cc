"""
Noteful Backend — Request Validators
======================================

What:  Structural checks on request bodies and path/query values: required
       fields, types, id format, credential trimming rules.
How:   Pure functions of their input. No store access, no I/O. Each returns a
       typed schema record on success or raises a `NotefulError` subclass.
Who:   Called first by every mutating route, strictly before the ownership
       validator; a failure here never touches the store.

Failure mapping:
    Registration payloads → RegistrationValidationError (422)
    Everything else       → InvalidShapeError / MissingRequiredFieldError /
                            InvalidReferenceError (400)

Reference fields (`folderId`, `tags`) are only type-checked here. Whether the
ids are well-formed and owned by the caller is the ownership validator's job.
"""

from typing import Any, Dict, Optional

from noteful.exceptions import (
    InvalidReferenceError,
    InvalidShapeError,
    MissingRequiredFieldError,
    RegistrationValidationError,
)
from noteful.ids import is_valid_id
from noteful.schemas.folder import FolderInput
from noteful.schemas.note import NoteDraft, NoteFilter, NotePatch
from noteful.schemas.tag import TagInput
from noteful.schemas.user import LoginInput, RegistrationInput

# ── Registration rules ────────────────────────────────────────────────────
REQUIRED_REGISTRATION_FIELDS = ("username", "password")
STRING_REGISTRATION_FIELDS = ("username", "password", "fullname")
# Credentials are compared byte-for-byte at login; surrounding whitespace is
# rejected rather than silently stripped.
TRIMMED_REGISTRATION_FIELDS = ("username", "password")
# Names and usernames are stored in VARCHAR(255) columns
NAME_MAX_LENGTH = 255
# Upper bound on password length matches the bcrypt input limit
FIELD_SIZES = {
    "username": {"min": 1, "max": NAME_MAX_LENGTH},
    "password": {"min": 8, "max": 72},
    "fullname": {"max": NAME_MAX_LENGTH},
}


def require_json_object(body: Any) -> Dict[str, Any]:
    """Reject anything that is not a JSON object."""
    if not isinstance(body, dict):
        raise InvalidShapeError(message="The request body must be a JSON object")
    return body


def validate_path_id(value: Any, field: str = "id") -> str:
    """Check the id of the addressed resource (from the URL path)."""
    if not is_valid_id(value):
        raise InvalidReferenceError(field=field)
    return value


# ══════════════════════════════════════════════════════════════════════════
# Folders and tags
# ══════════════════════════════════════════════════════════════════════════


def _validate_name(body: Any) -> str:
    body = require_json_object(body)
    name = body.get("name")
    if name is None or name == "":
        raise MissingRequiredFieldError("name")
    if not isinstance(name, str):
        raise InvalidShapeError(message="The `name` field must be a string", field="name")
    if not name.strip():
        raise MissingRequiredFieldError("name")
    if len(name) > NAME_MAX_LENGTH:
        raise InvalidShapeError(
            message=f"The `name` field must be at most {NAME_MAX_LENGTH} characters long",
            field="name",
        )
    return name


def validate_folder_input(body: Any) -> FolderInput:
    return FolderInput(name=_validate_name(body))


def validate_tag_input(body: Any) -> TagInput:
    return TagInput(name=_validate_name(body))


# ══════════════════════════════════════════════════════════════════════════
# Notes
# ══════════════════════════════════════════════════════════════════════════


def _validate_title(body: Dict[str, Any]) -> str:
    title = body.get("title")
    if title is None or title == "":
        raise MissingRequiredFieldError("title")
    if not isinstance(title, str):
        raise InvalidShapeError(message="The `title` field must be a string", field="title")
    if not title.strip():
        raise MissingRequiredFieldError("title")
    return title


def _validate_content(body: Dict[str, Any]) -> Optional[str]:
    content = body.get("content")
    if content is not None and not isinstance(content, str):
        raise InvalidShapeError(message="The `content` field must be a string", field="content")
    return content


def _validate_folder_ref(body: Dict[str, Any]) -> Optional[str]:
    """Empty string and null both mean "no folder"."""
    folder_id = body.get("folderId")
    if folder_id is None or folder_id == "":
        return None
    if not isinstance(folder_id, str):
        raise InvalidReferenceError(field="folderId")
    return folder_id


def _validate_tag_refs(body: Dict[str, Any]) -> Optional[list]:
    tags = body.get("tags")
    if tags is None:
        return None
    if not isinstance(tags, list):
        raise InvalidShapeError(message="The `tags` property must be an array", field="tags")
    for tag_id in tags:
        if not isinstance(tag_id, str):
            raise InvalidReferenceError(field="tags", message="The `tags` array contains an invalid id")
    return tags


def validate_note_draft(body: Any) -> NoteDraft:
    """Body of POST /api/notes. Title is required; everything else is optional."""
    body = require_json_object(body)
    return NoteDraft(
        title=_validate_title(body),
        content=_validate_content(body),
        folder_id=_validate_folder_ref(body),
        tags=_validate_tag_refs(body) or [],
    )


def validate_note_patch(body: Any) -> NotePatch:
    """
    Body of PUT /api/notes/{id}.

    Only keys present in the body end up in the patch. A present title must
    be non-empty; `tags: null` is treated as absent.
    """
    body = require_json_object(body)
    fields: Dict[str, Any] = {}
    if "title" in body:
        fields["title"] = _validate_title(body)
    if "content" in body:
        fields["content"] = _validate_content(body)
    if "folderId" in body:
        fields["folder_id"] = _validate_folder_ref(body)
    if "tags" in body:
        tags = _validate_tag_refs(body)
        if tags is not None:
            fields["tags"] = tags
    return NotePatch(**fields)


def validate_note_filter(
    search_term: Optional[str] = None,
    folder_id: Optional[str] = None,
    tag_id: Optional[str] = None,
) -> NoteFilter:
    """Query parameters of GET /api/notes. Empty values impose no constraint."""
    if folder_id and not is_valid_id(folder_id):
        raise InvalidReferenceError(field="folderId")
    if tag_id and not is_valid_id(tag_id):
        raise InvalidReferenceError(field="tagId")
    return NoteFilter(
        search_term=search_term or None,
        folder_id=folder_id or None,
        tag_id=tag_id or None,
    )


# ══════════════════════════════════════════════════════════════════════════
# Users and login
# ══════════════════════════════════════════════════════════════════════════


def validate_registration(body: Any) -> RegistrationInput:
    """
    Body of POST /api/users.

    Checks run in a fixed order (presence, type, whitespace, size) and the
    first failing field is reported as the error `location`.
    """
    if not isinstance(body, dict):
        raise RegistrationValidationError("The request body must be a JSON object", location="body")

    for field in REQUIRED_REGISTRATION_FIELDS:
        if field not in body or body[field] is None:
            raise RegistrationValidationError("Missing field", location=field)

    for field in STRING_REGISTRATION_FIELDS:
        if body.get(field) is not None and not isinstance(body[field], str):
            raise RegistrationValidationError(
                "Incorrect field type: expected string", location=field
            )

    for field in TRIMMED_REGISTRATION_FIELDS:
        if body[field].strip() != body[field]:
            raise RegistrationValidationError(
                "Cannot start or end with whitespace", location=field
            )

    for field, bounds in FIELD_SIZES.items():
        if body.get(field) is None:
            continue
        length = len(body[field])
        if "min" in bounds and length < bounds["min"]:
            raise RegistrationValidationError(
                f"Must be at least {bounds['min']} characters long", location=field
            )
        if "max" in bounds and length > bounds["max"]:
            raise RegistrationValidationError(
                f"Must be at most {bounds['max']} characters long", location=field
            )

    fullname = body.get("fullname")
    return RegistrationInput(
        username=body["username"],
        password=body["password"],
        fullname=fullname.strip() if fullname else None,
    )


def validate_login(body: Any) -> LoginInput:
    body = require_json_object(body)
    for field in ("username", "password"):
        value = body.get(field)
        if not value:
            raise MissingRequiredFieldError(field)
        if not isinstance(value, str):
            raise InvalidShapeError(message=f"The `{field}` field must be a string", field=field)
    return LoginInput(username=body["username"], password=body["password"])
