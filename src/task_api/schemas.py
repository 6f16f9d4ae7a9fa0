from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import TaskPriority, TaskStatus
from .validation import (
    normalize_title,
    validate_description,
    validate_due_date,
    validate_priority,
    validate_status,
)

TASK_EXAMPLE = {
    "id": 123,
    "user_id": "42",
    "title": "Buy groceries",
    "description": "Milk, eggs, bread",
    "status": TaskStatus.TODO.value,
    "priority": TaskPriority.MEDIUM.value,
    "due_date": "2025-02-01",
    "created_at": "2025-01-25T10:15:30Z",
    "updated_at": "2025-01-26T09:00:00Z",
}


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Schema for creating a new task. Only title is required; the rest take
    their defaults (description/due_date null, status todo, priority medium).
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "priority": TaskPriority.HIGH.value,
                "due_date": "2025-02-01",
            }
        }
    )

    title: Optional[str] = Field(default=None, validate_default=True, description="Short title, trimmed")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    status: str = Field(default=TaskStatus.TODO.value, description="todo, in_progress or done")
    priority: str = Field(default=TaskPriority.MEDIUM.value, description="low, medium, high or urgent")
    due_date: Optional[str] = Field(
        default=None,
        description="Due date as 'YYYY-MM-DD' or 'YYYY-MM-DDTHH:MM:SSZ'",
    )

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, v: Any) -> str:
        return normalize_title(v)

    @field_validator("description", mode="before")
    @classmethod
    def check_description(cls, v: Any) -> Optional[str]:
        return validate_description(v)

    @field_validator("status", mode="before")
    @classmethod
    def check_status(cls, v: Any) -> str:
        return validate_status(v)

    @field_validator("priority", mode="before")
    @classmethod
    def check_priority(cls, v: Any) -> str:
        return validate_priority(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def check_due_date(cls, v: Any) -> Optional[str]:
        return validate_due_date(v)


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """Schema returned by the API for a task."""

    model_config = ConfigDict(json_schema_extra={"example": TASK_EXAMPLE})

    id: int = Field(..., description="Unique identifier of the task")
    user_id: str = Field(..., description="Owner of the task")
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[str] = None
    created_at: str = Field(..., description="Creation timestamp (UTC)")
    updated_at: str = Field(..., description="Last update timestamp (UTC)")


class TaskEnvelope(BaseModel):
    data: TaskOut


class ListMeta(BaseModel):
    total: int = Field(..., description="Number of tasks matching the query, ignoring limit/offset")
    limit: int
    offset: int


class TaskListEnvelope(BaseModel):
    """Envelope for paginated list responses."""

    data: List[TaskOut]
    meta: ListMeta


class DeleteResult(BaseModel):
    deleted: bool


class DeleteEnvelope(BaseModel):
    data: DeleteResult


class ErrorResponse(BaseModel):
    error: str
