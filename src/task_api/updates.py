"""
Partial update construction.

An update document is a plain mapping, and key *presence* decides which
columns are touched:

- key absent             -> column left as is, no assignment emitted
- key present, null      -> column cleared (description, due_date)
- key present, value     -> column validated and assigned

Every present field is validated before the plan is returned, so a bad value
anywhere in the document fails the whole update without touching the row.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Tuple

from .errors import InvalidInputError
from .validation import (
    normalize_title,
    validate_description,
    validate_due_date,
    validate_priority,
    validate_status,
)


def _title(value: Any) -> str:
    return normalize_title(value, required_message="title cannot be empty")


# Column order here fixes the order of assignments, so equal key sets share one statement.
_FIELD_RULES: Dict[str, Callable[[Any], Any]] = {
    "title": _title,
    "description": validate_description,
    "status": validate_status,
    "priority": validate_priority,
    "due_date": validate_due_date,
}

UPDATABLE_FIELDS = tuple(_FIELD_RULES)


@dataclass(frozen=True)
class UpdatePlan:
    """Validated assignments for one update; ``columns`` is the statement shape."""

    columns: Tuple[str, ...]
    values: Tuple[Any, ...]


# PUBLIC_INTERFACE
def build_update(document: Mapping[str, Any]) -> UpdatePlan:
    """
    Turn a sparse update document into an UpdatePlan.

    Keys outside the updatable set are ignored. Raises InvalidInputError when
    any present field is invalid or when no updatable field is present.
    """
    if not isinstance(document, Mapping):
        raise InvalidInputError("Request body must be a JSON object")

    columns = []
    values = []
    for field, rule in _FIELD_RULES.items():
        if field not in document:
            continue
        values.append(rule(document[field]))
        columns.append(field)

    if not columns:
        raise InvalidInputError("No fields to update")
    return UpdatePlan(columns=tuple(columns), values=tuple(values))
