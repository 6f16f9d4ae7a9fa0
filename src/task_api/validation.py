"""Field rules shared by filter compilation, task creation and partial updates."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Optional

from .errors import InvalidInputError
from .models import VALID_PRIORITIES, VALID_STATUSES

# YYYY-MM-DD or YYYY-MM-DDTHH:MM:SSZ
DUE_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}(T\d{2}:\d{2}:\d{2}Z)?", re.ASCII)

_DATE_FORMATS = {10: "%Y-%m-%d", 20: "%Y-%m-%dT%H:%M:%SZ"}


def is_valid_due_date(value: Any) -> bool:
    """Return True for a real calendar date or UTC date-time in one of the two accepted shapes."""
    if not isinstance(value, str) or not DUE_DATE_PATTERN.fullmatch(value):
        return False
    try:
        datetime.strptime(value, _DATE_FORMATS[len(value)])
    except ValueError:
        return False
    return True


def validate_status(value: Any) -> str:
    if value not in VALID_STATUSES:
        raise InvalidInputError(f"Invalid status. Must be one of: {', '.join(VALID_STATUSES)}")
    return value


def validate_priority(value: Any) -> str:
    if value not in VALID_PRIORITIES:
        raise InvalidInputError(f"Invalid priority. Must be one of: {', '.join(VALID_PRIORITIES)}")
    return value


def validate_due_date(value: Any, field: str = "due_date") -> Optional[str]:
    """Accept None (no date) or one of the two textual date shapes."""
    if value is None:
        return None
    if not is_valid_due_date(value):
        raise InvalidInputError(
            f"{field} must be a valid ISO 8601 date (YYYY-MM-DD or YYYY-MM-DDTHH:MM:SSZ)"
        )
    return value


def validate_description(value: Any) -> Optional[str]:
    if value is not None and not isinstance(value, str):
        raise InvalidInputError("description must be a string or null")
    return value


def normalize_title(value: Any, *, required_message: str = "title is required") -> str:
    """Trim a title, rejecting anything that is not a string or that trims to nothing."""
    if value is not None and not isinstance(value, str):
        raise InvalidInputError("title must be a string")
    trimmed = (value or "").strip()
    if not trimmed:
        raise InvalidInputError(required_message)
    return trimmed
