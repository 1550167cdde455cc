"""
Identifier helpers.

Every entity id is a 32-character lowercase hexadecimal token (a UUID4 without
dashes). Ids are generated in Python so a record's id is known before flush.
"""

import re
import uuid
from typing import Any

ID_LENGTH = 32

_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")


def new_id() -> str:
    """Generate a fresh entity id."""
    return uuid.uuid4().hex


def is_valid_id(value: Any) -> bool:
    """True if `value` is a well-formed entity id."""
    return isinstance(value, str) and bool(_ID_PATTERN.match(value))
