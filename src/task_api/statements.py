"""
Statement cache for task queries.

SQL text is memoized per statement *shape*: the list/count filter shape or
the set of columns an update assigns. Filter values never reach the key, so
the cache converges to a small fixed size (32 list shapes, 32 count shapes,
31 update shapes) and stops growing.

sqlite3 prepares and caches statements per connection keyed by their text,
so one text per shape also means one prepared statement per shape.
"""

from __future__ import annotations

import logging
from threading import RLock
from typing import Callable, Dict, Hashable, Tuple

from .filters import NOW_EXPR, FilterShape, predicate_for
from .models import TASK_COLUMNS

logger = logging.getLogger(__name__)

COLUMNS_SQL = ", ".join(TASK_COLUMNS)

# Newest first; id breaks created_at ties so limit/offset pages do not overlap.
_ORDER_SQL = "ORDER BY created_at DESC, id DESC"

# Upper bound on distinct statement texts: list + count + update shapes, plus the static ones.
MAX_STATEMENT_SHAPES = 2 * 2 ** len(FilterShape._fields) + 2 ** 5 + 8


def build_list_sql(shape: FilterShape) -> str:
    predicate = predicate_for(shape)
    if predicate.is_union:
        # Each branch keeps a plain owner-scoped predicate; UNION collapses duplicates.
        return (
            f"SELECT {COLUMNS_SQL} FROM tasks WHERE {predicate.filter_where} "
            f"UNION SELECT {COLUMNS_SQL} FROM tasks WHERE {predicate.overdue_where} "
            f"{_ORDER_SQL} LIMIT ? OFFSET ?"
        )
    return f"SELECT {COLUMNS_SQL} FROM tasks WHERE {predicate.where} {_ORDER_SQL} LIMIT ? OFFSET ?"


def build_count_sql(shape: FilterShape) -> str:
    predicate = predicate_for(shape)
    if predicate.is_union:
        return (
            "SELECT COUNT(*) AS total FROM ("
            f"SELECT id FROM tasks WHERE {predicate.filter_where} "
            f"UNION SELECT id FROM tasks WHERE {predicate.overdue_where})"
        )
    return f"SELECT COUNT(*) AS total FROM tasks WHERE {predicate.where}"


def build_update_sql(columns: Tuple[str, ...]) -> str:
    assignments = [f"{column} = ?" for column in columns]
    assignments.append(f"updated_at = {NOW_EXPR}")
    return (
        f"UPDATE tasks SET {', '.join(assignments)} "
        f"WHERE id = ? AND user_id = ? RETURNING {COLUMNS_SQL}"
    )


INSERT_SQL = (
    "INSERT INTO tasks (user_id, title, description, status, priority, due_date) "
    f"VALUES (?, ?, ?, ?, ?, ?) RETURNING {COLUMNS_SQL}"
)
SELECT_BY_ID_SQL = f"SELECT {COLUMNS_SQL} FROM tasks WHERE id = ? AND user_id = ?"
DELETE_SQL = "DELETE FROM tasks WHERE id = ? AND user_id = ?"


# PUBLIC_INTERFACE
class StatementCache:
    """
    Thread-safe memo of compiled SQL text keyed by statement shape.

    Two threads racing on a new shape may both build the text; the first
    stored result wins and the other is discarded. Built text is immutable,
    so the race is harmless.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._statements: Dict[Hashable, str] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._statements)

    def _get(self, key: Hashable, build: Callable[[], str]) -> str:
        with self._lock:
            sql = self._statements.get(key)
        if sql is not None:
            return sql
        sql = build()
        with self._lock:
            cached = self._statements.setdefault(key, sql)
        if cached is sql:
            logger.debug("Compiled statement for %r", key)
        return cached

    def list_statement(self, shape: FilterShape) -> str:
        return self._get(("list", shape), lambda: build_list_sql(shape))

    def count_statement(self, shape: FilterShape) -> str:
        return self._get(("count", shape), lambda: build_count_sql(shape))

    def update_statement(self, columns: Tuple[str, ...]) -> str:
        return self._get(("update", columns), lambda: build_update_sql(columns))
