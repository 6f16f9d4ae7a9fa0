"""
Filter predicate compilation for task list queries.

A request's filters are split into a *shape* (which toggles are active) and
the *values* bound at execution time. SQL text depends only on the shape, so
the statement cache stays bounded no matter how many distinct values callers
send.

Overdue is not a fifth conjunctive filter. When it is combined with explicit
filters the result is the union of the two branches, each scoped to the owner.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, NamedTuple, Optional, Tuple

from .validation import validate_due_date, validate_priority, validate_status

# Store-side clock, evaluated when the statement runs. Same text form as the
# stored timestamps so that plain string comparison orders correctly.
NOW_EXPR = "strftime('%Y-%m-%dT%H:%M:%SZ', 'now')"
OVERDUE_CLAUSE = f"due_date < {NOW_EXPR} AND status != 'done'"
OWNER_CLAUSE = "user_id = ?"

# Clause per explicit toggle, in FilterShape field order.
_FILTER_CLAUSES = (
    "status = ?",
    "priority = ?",
    "due_date < ?",
    "due_date > ?",
)


class FilterShape(NamedTuple):
    """Which filter toggles are active; the statement cache key."""

    status: bool = False
    priority: bool = False
    due_before: bool = False
    due_after: bool = False
    include_overdue: bool = False

    @property
    def has_filters(self) -> bool:
        return any(self[: len(_FILTER_CLAUSES)])


class Predicate(NamedTuple):
    """SQL text for the two possible branches of a list predicate."""

    filter_where: Optional[str]
    overdue_where: Optional[str]

    @property
    def is_union(self) -> bool:
        return self.filter_where is not None and self.overdue_where is not None

    @property
    def where(self) -> str:
        """The single-branch WHERE text; union predicates have no single form."""
        return self.filter_where or self.overdue_where or OWNER_CLAUSE


@dataclass(frozen=True)
class TaskFilter:
    """
    Filter options for listing tasks. Values are raw caller input until
    ``compile_filter`` validates them.
    """

    status: Optional[str] = None
    priority: Optional[str] = None
    due_before: Optional[str] = None
    due_after: Optional[str] = None
    include_overdue: bool = False


@dataclass(frozen=True)
class CompiledFilter:
    """A validated filter: its shape plus the values bound into the explicit-filter clauses."""

    shape: FilterShape
    values: Tuple[Any, ...]

    def count_params(self, owner: str) -> Tuple[Any, ...]:
        params: List[Any] = [owner]
        if self.shape.has_filters:
            params.extend(self.values)
            if self.shape.include_overdue:
                params.append(owner)
        return tuple(params)

    def list_params(self, owner: str, limit: int, offset: int) -> Tuple[Any, ...]:
        return self.count_params(owner) + (limit, offset)


def compile_filter(options: TaskFilter) -> CompiledFilter:
    """
    Validate filter options and reduce them to a shape and its bound values.

    Raises InvalidInputError for an unknown status/priority or a malformed date bound.
    """
    if options.status is not None:
        validate_status(options.status)
    if options.priority is not None:
        validate_priority(options.priority)
    validate_due_date(options.due_before, "due_before")
    validate_due_date(options.due_after, "due_after")

    raw = (options.status, options.priority, options.due_before, options.due_after)
    shape = FilterShape(*(v is not None for v in raw), include_overdue=bool(options.include_overdue))
    values = tuple(v for v in raw if v is not None)
    return CompiledFilter(shape=shape, values=values)


def predicate_for(shape: FilterShape) -> Predicate:
    """Build the owner-scoped predicate text for a shape."""
    conditions = [clause for active, clause in zip(shape, _FILTER_CLAUSES) if active]
    filter_where = " AND ".join([OWNER_CLAUSE, *conditions]) if conditions else None
    overdue_where = f"{OWNER_CLAUSE} AND {OVERDUE_CLAUSE}" if shape.include_overdue else None
    return Predicate(filter_where=filter_where, overdue_where=overdue_where)
