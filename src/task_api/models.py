from __future__ import annotations

from enum import Enum
from typing import Optional, TypedDict


class TaskStatus(str, Enum):
    """Enumeration of task workflow states."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class TaskPriority(str, Enum):
    """Enumeration of task priorities."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


VALID_STATUSES = tuple(s.value for s in TaskStatus)
VALID_PRIORITIES = tuple(p.value for p in TaskPriority)

# Largest value sqlite3 can bind as INTEGER.
MAX_SQLITE_INTEGER = 2 ** 63 - 1

# Explicit column list, shared by every statement that returns task rows.
TASK_COLUMNS = (
    "id",
    "user_id",
    "title",
    "description",
    "status",
    "priority",
    "due_date",
    "created_at",
    "updated_at",
)


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    A task row as stored.

    Fields:
    - id: Store-assigned positive integer, immutable
    - user_id: Owner principal, bound at creation and never changed
    - title: Trimmed non-empty title
    - description: Optional free text
    - status: One of todo, in_progress, done
    - priority: One of low, medium, high, urgent
    - due_date: Optional 'YYYY-MM-DD' or 'YYYY-MM-DDTHH:MM:SSZ' text
    - created_at: Store-generated UTC timestamp ('YYYY-MM-DDTHH:MM:SSZ')
    - updated_at: Store-generated UTC timestamp, reset on every update
    """

    id: int
    user_id: str
    title: str
    description: Optional[str]
    status: str
    priority: str
    due_date: Optional[str]
    created_at: str
    updated_at: str
