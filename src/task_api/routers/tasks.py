from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from ..auth import get_current_user_id
from ..errors import NotFoundError
from ..filters import TaskFilter, compile_filter
from ..models import MAX_SQLITE_INTEGER
from ..pagination import Page, pagination_envelope
from ..repositories import Repository, get_repository
from ..schemas import (
    DeleteEnvelope,
    ErrorResponse,
    TaskCreate,
    TaskEnvelope,
    TaskListEnvelope,
)
from ..updates import build_update

router = APIRouter(
    prefix="/tasks",
    tags=["tasks"],
    dependencies=[Depends(get_current_user_id)],
    responses={401: {"model": ErrorResponse, "description": "Missing or invalid bearer token"}},
)

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Task not found"}}
_INVALID = {400: {"model": ErrorResponse, "description": "Invalid input"}}


def parse_task_id(raw: str) -> int:
    """
    Parse a path id as a positive canonical integer ("12", not "012", "1.5" or "abc").

    Anything else is reported as not-found, never as a different error kind.
    """
    if not raw.isdigit() or not raw.isascii():
        raise NotFoundError()
    task_id = int(raw)
    if task_id <= 0 or task_id > MAX_SQLITE_INTEGER or str(task_id) != raw:
        raise NotFoundError()
    return task_id


def _envelope(task: Dict[str, Any]) -> Dict[str, Any]:
    return {"data": task}


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=TaskListEnvelope,
    summary="List Tasks",
    description=(
        "List the caller's tasks, newest first.\n\n"
        "Query parameters:\n"
        "- status, priority: equality filters\n"
        "- due_before, due_after: exclusive due date bounds (YYYY-MM-DD or YYYY-MM-DDTHH:MM:SSZ)\n"
        "- include_overdue: 'true' also includes overdue tasks (due in the past and not done); "
        "combined with other filters this is a union, not an extra condition. "
        "Any other value leaves it off\n"
        "- limit: page size, default 50, clamped to 1..500\n"
        "- offset: rows to skip, default 0"
    ),
    responses=_INVALID,
)
def list_tasks(
    status_filter: Optional[str] = Query(None, alias="status"),
    priority: Optional[str] = Query(None),
    due_before: Optional[str] = Query(None),
    due_after: Optional[str] = Query(None),
    include_overdue: Optional[str] = Query(None),
    limit: Optional[str] = Query(None, description="Maximum number of tasks to return"),
    offset: Optional[str] = Query(None, description="Number of tasks to skip"),
    owner: str = Depends(get_current_user_id),
    repo: Repository = Depends(get_repository),
) -> Dict[str, Any]:
    compiled = compile_filter(
        TaskFilter(
            status=status_filter,
            priority=priority,
            due_before=due_before,
            due_after=due_after,
            include_overdue=include_overdue == "true",
        )
    )
    page = Page.from_query(limit, offset)
    items, total = repo.list(owner, compiled, page)
    return pagination_envelope(items, total, page)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TaskEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    responses=_INVALID,
)
def create_task(
    payload: TaskCreate,
    owner: str = Depends(get_current_user_id),
    repo: Repository = Depends(get_repository),
) -> Dict[str, Any]:
    """Create a task owned by the caller and return the stored row."""
    return _envelope(repo.create(owner, payload))


# PUBLIC_INTERFACE
@router.get("/{task_id}", response_model=TaskEnvelope, summary="Get Task", responses=_NOT_FOUND)
def get_task(
    task_id: str,
    owner: str = Depends(get_current_user_id),
    repo: Repository = Depends(get_repository),
) -> Dict[str, Any]:
    task = repo.get(owner, parse_task_id(task_id))
    if task is None:
        raise NotFoundError()
    return _envelope(task)


# PUBLIC_INTERFACE
@router.patch(
    "/{task_id}",
    response_model=TaskEnvelope,
    summary="Update Task",
    description=(
        "Partially update a task. Only keys present in the body are touched; "
        "a key sent as null clears that field (description, due_date)."
    ),
    responses={**_INVALID, **_NOT_FOUND},
)
def update_task(
    task_id: str,
    payload: Optional[Dict[str, Any]] = Body(None),
    owner: str = Depends(get_current_user_id),
    repo: Repository = Depends(get_repository),
) -> Dict[str, Any]:
    parsed_id = parse_task_id(task_id)
    plan = build_update(payload or {})
    task = repo.update(owner, parsed_id, plan)
    if task is None:
        raise NotFoundError()
    return _envelope(task)


# PUBLIC_INTERFACE
@router.delete("/{task_id}", response_model=DeleteEnvelope, summary="Delete Task", responses=_NOT_FOUND)
def delete_task(
    task_id: str,
    owner: str = Depends(get_current_user_id),
    repo: Repository = Depends(get_repository),
) -> Dict[str, Any]:
    """Delete a task permanently. A second delete of the same id is not-found."""
    if not repo.delete(owner, parse_task_id(task_id)):
        raise NotFoundError()
    return {"data": {"deleted": True}}
