from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from threading import RLock
from typing import Generator

from .models import VALID_PRIORITIES, VALID_STATUSES
from .statements import MAX_STATEMENT_SHAPES

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"

# Stored timestamps use the same text form as due dates so they compare as strings.
_NOW_DEFAULT = "(strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))"


def _quoted(values) -> str:
    return ", ".join(f"'{v}'" for v in values)


SCHEMA_STATEMENTS = (
    f"""
    CREATE TABLE IF NOT EXISTS tasks (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id     TEXT NOT NULL,
        title       TEXT NOT NULL CHECK (length(trim(title)) > 0),
        description TEXT NULL,
        status      TEXT NOT NULL DEFAULT 'todo'
                      CHECK (status IN ({_quoted(VALID_STATUSES)})),
        priority    TEXT NOT NULL DEFAULT 'medium'
                      CHECK (priority IN ({_quoted(VALID_PRIORITIES)})),
        due_date    TEXT NULL,
        created_at  TEXT NOT NULL DEFAULT {_NOW_DEFAULT},
        updated_at  TEXT NOT NULL DEFAULT {_NOW_DEFAULT}
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_tasks_user_created_at ON tasks(user_id, created_at)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_user_due_date ON tasks(user_id, due_date)",
)


# PUBLIC_INTERFACE
def initialize_schema(conn: sqlite3.Connection) -> None:
    """Create the tasks table and its indexes if they do not exist yet."""
    for statement in SCHEMA_STATEMENTS:
        conn.execute(statement)
    conn.commit()


# PUBLIC_INTERFACE
class Database:
    """
    The store handle: one sqlite3 connection shared by every request.

    Access is serialised with a re-entrant lock, since a sqlite3 connection
    must not run statements from two threads at once. Construct one per
    application (or per test, with ':memory:') and pass it in explicitly.
    """

    def __init__(self, db_path: str) -> None:
        if db_path != MEMORY_PATH:
            os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._lock = RLock()
        self._conn = sqlite3.connect(
            db_path,
            check_same_thread=False,
            cached_statements=MAX_STATEMENT_SHAPES,
        )
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")
        if db_path != MEMORY_PATH:
            self._conn.execute("PRAGMA journal_mode = WAL")
        initialize_schema(self._conn)
        logger.info("Opened task store at %s", db_path)

    @property
    def path(self) -> str:
        return self._db_path

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """Yield the connection under the lock; commit on success, roll back on error."""
        with self._lock:
            try:
                yield self._conn
                self._conn.commit()
            except BaseException:
                self._conn.rollback()
                raise

    def close(self) -> None:
        with self._lock:
            self._conn.close()
