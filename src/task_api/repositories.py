from __future__ import annotations

import logging
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Generator, List, Optional, Tuple

from fastapi import Request

from .db import Database
from .errors import StorageError
from .filters import CompiledFilter
from .models import TaskEntity
from .pagination import Page
from .schemas import TaskCreate
from .statements import DELETE_SQL, INSERT_SQL, SELECT_BY_ID_SQL, StatementCache
from .updates import UpdatePlan

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class Repository(ABC):
    """
    Owner-scoped repository contract for task storage.

    Every method takes the caller's principal and conjoins it with the lookup
    key, so a task owned by someone else behaves exactly like a missing one.
    """

    @abstractmethod
    def create(self, owner: str, data: TaskCreate) -> TaskEntity:
        """Insert a task for owner and return the stored row."""

    @abstractmethod
    def get(self, owner: str, task_id: int) -> Optional[TaskEntity]:
        """Return the owner's task by id, or None."""

    @abstractmethod
    def update(self, owner: str, task_id: int, plan: UpdatePlan) -> Optional[TaskEntity]:
        """Apply an update plan and return the committed row, or None if no owned task matched."""

    @abstractmethod
    def delete(self, owner: str, task_id: int) -> bool:
        """Delete the owner's task. Return True if a row was removed."""

    @abstractmethod
    def list(self, owner: str, compiled: CompiledFilter, page: Page) -> Tuple[List[TaskEntity], int]:
        """Return one page of the owner's matching tasks and the total match count."""


def _row_to_entity(row: sqlite3.Row) -> TaskEntity:
    return {
        "id": int(row["id"]),
        "user_id": str(row["user_id"]),
        "title": str(row["title"]),
        "description": row["description"],
        "status": str(row["status"]),
        "priority": str(row["priority"]),
        "due_date": row["due_date"],
        "created_at": str(row["created_at"]),
        "updated_at": str(row["updated_at"]),
    }  # type: ignore[return-value]


class SQLiteTaskRepository(Repository):
    """
    Repository backed by a shared sqlite3 Database handle.

    Each mutation is a single predicate-qualified statement with RETURNING,
    so the ownership check and the write cannot be separated by another
    request, and the returned row is exactly what was committed.
    """

    def __init__(self, database: Database, statements: Optional[StatementCache] = None) -> None:
        self._db = database
        self._statements = statements or StatementCache()

    @property
    def statements(self) -> StatementCache:
        return self._statements

    @contextmanager
    def _transaction(self) -> Generator[sqlite3.Connection, None, None]:
        try:
            with self._db.transaction() as conn:
                yield conn
        except sqlite3.Error as exc:
            logger.exception("Task store operation failed")
            raise StorageError() from exc

    def create(self, owner: str, data: TaskCreate) -> TaskEntity:
        with self._transaction() as conn:
            rows = conn.execute(
                INSERT_SQL,
                (owner, data.title, data.description, data.status, data.priority, data.due_date),
            ).fetchall()
        task = _row_to_entity(rows[0])
        logger.info("Created task %s for user %s", task["id"], owner)
        return task

    def get(self, owner: str, task_id: int) -> Optional[TaskEntity]:
        with self._transaction() as conn:
            row = conn.execute(SELECT_BY_ID_SQL, (task_id, owner)).fetchone()
        return _row_to_entity(row) if row else None

    def update(self, owner: str, task_id: int, plan: UpdatePlan) -> Optional[TaskEntity]:
        sql = self._statements.update_statement(plan.columns)
        with self._transaction() as conn:
            # Drain RETURNING fully before the commit.
            rows = conn.execute(sql, (*plan.values, task_id, owner)).fetchall()
        if not rows:
            return None
        logger.info("Updated task %s for user %s (%s)", task_id, owner, ", ".join(plan.columns))
        return _row_to_entity(rows[0])

    def delete(self, owner: str, task_id: int) -> bool:
        with self._transaction() as conn:
            cur = conn.execute(DELETE_SQL, (task_id, owner))
            deleted = cur.rowcount > 0
        if deleted:
            logger.info("Deleted task %s for user %s", task_id, owner)
        return deleted

    def list(self, owner: str, compiled: CompiledFilter, page: Page) -> Tuple[List[TaskEntity], int]:
        list_sql = self._statements.list_statement(compiled.shape)
        count_sql = self._statements.count_statement(compiled.shape)
        # Page and total read under one lock hold, against the same predicate.
        with self._transaction() as conn:
            rows = conn.execute(list_sql, compiled.list_params(owner, page.limit, page.offset)).fetchall()
            count_row = conn.execute(count_sql, compiled.count_params(owner)).fetchone()
        total = int(count_row["total"]) if count_row else 0
        return [_row_to_entity(r) for r in rows], total


# PUBLIC_INTERFACE
def get_repository(request: Request) -> Repository:
    """FastAPI dependency returning the repository the application was built with."""
    return request.app.state.repository
