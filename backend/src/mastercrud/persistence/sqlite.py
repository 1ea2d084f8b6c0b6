"""SQLite persistence adapter."""

import sqlite3
import threading
from pathlib import Path
from typing import Any

from mastercrud.metadata.loader import EntityDescriptor
from mastercrud.query.builder import QueryBuilder, Statement
from mastercrud.query.dialect import SQLITE


class SQLiteAdapter:
    """Simple SQLite persistence adapter.

    One connection shared across worker threads; a lock serialises
    statements, which also serialises concurrent updates to the same row.
    """

    dialect = SQLITE

    def __init__(self, db_path: Path | str = ":memory:"):
        self.db_path = str(db_path)
        self.conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    def connect(self) -> None:
        """Establish database connection."""
        self.conn = sqlite3.connect(
            self.db_path,
            check_same_thread=False,
            isolation_level=None,  # autocommit; one statement per operation
        )
        self.conn.row_factory = sqlite3.Row

    def close(self) -> None:
        if self.conn:
            self.conn.close()
            self.conn = None

    def _require_conn(self) -> sqlite3.Connection:
        if not self.conn:
            raise RuntimeError("Database not connected")
        return self.conn

    def ping(self) -> bool:
        with self._lock:
            self._require_conn().execute("SELECT 1").fetchone()
        return True

    def initialize_entity(self, entity: EntityDescriptor) -> None:
        """Create the entity's table if it doesn't exist."""
        self.execute(QueryBuilder(self.dialect).build_create_table(entity))

    def fetch_one(self, statement: Statement) -> dict[str, Any] | None:
        with self._lock:
            cursor = self._require_conn().execute(statement.sql, statement.params)
            row = cursor.fetchone()
            # Drain so RETURNING statements complete before the lock is released.
            cursor.fetchall()
        return dict(row) if row else None

    def fetch_all(self, statement: Statement) -> list[dict[str, Any]]:
        with self._lock:
            rows = self._require_conn().execute(statement.sql, statement.params).fetchall()
        return [dict(row) for row in rows]

    def execute(self, statement: Statement) -> int:
        """Run a statement and return the number of affected rows."""
        with self._lock:
            cursor = self._require_conn().execute(statement.sql, statement.params)
            return cursor.rowcount
