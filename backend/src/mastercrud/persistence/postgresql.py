"""PostgreSQL persistence adapter.

Uses psycopg v3 through a psycopg_pool ConnectionPool. Connections are in
autocommit mode, so every statement is its own transaction and concurrent
requests only share the pool.
"""

from __future__ import annotations

import logging
from typing import Any

from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from mastercrud.metadata.loader import EntityDescriptor
from mastercrud.query.builder import QueryBuilder, Statement
from mastercrud.query.dialect import POSTGRESQL

logger = logging.getLogger(__name__)


class PostgreSQLAdapter:
    """PostgreSQL persistence adapter using a psycopg v3 connection pool."""

    dialect = POSTGRESQL

    def __init__(
        self,
        url: str,
        min_size: int = 1,
        max_size: int = 10,
        connect_timeout: float = 5.0,
    ):
        # psycopg wants a plain libpq URL; strip the SQLAlchemy-style driver suffix.
        self.url = url.replace("postgresql+psycopg://", "postgresql://")
        self.min_size = min_size
        self.max_size = max_size
        self.connect_timeout = connect_timeout
        self.pool: ConnectionPool | None = None

    def connect(self) -> None:
        """Open the pool and wait until ``min_size`` connections are ready.

        Raises:
            psycopg_pool.PoolTimeout: If the server is unreachable
        """
        pool = ConnectionPool(
            conninfo=self.url,
            min_size=self.min_size,
            max_size=self.max_size,
            kwargs={"autocommit": True, "row_factory": dict_row},
            open=False,
        )
        try:
            pool.open(wait=True, timeout=self.connect_timeout)
        except Exception:
            pool.close()
            raise
        self.pool = pool
        logger.info("Connected to PostgreSQL (pool %d-%d)", self.min_size, self.max_size)

    def close(self) -> None:
        if self.pool:
            self.pool.close()
            self.pool = None

    def _require_pool(self) -> ConnectionPool:
        if not self.pool:
            raise RuntimeError("Database not connected")
        return self.pool

    def ping(self) -> bool:
        with self._require_pool().connection() as conn:
            conn.execute("SELECT 1")
        return True

    def initialize_entity(self, entity: EntityDescriptor) -> None:
        """Create the entity's table if it doesn't exist."""
        self.execute(QueryBuilder(self.dialect).build_create_table(entity))

    def fetch_one(self, statement: Statement) -> dict[str, Any] | None:
        with self._require_pool().connection() as conn:
            row = conn.execute(statement.sql, statement.params).fetchone()
        return dict(row) if row else None

    def fetch_all(self, statement: Statement) -> list[dict[str, Any]]:
        with self._require_pool().connection() as conn:
            rows = conn.execute(statement.sql, statement.params).fetchall()
        return [dict(row) for row in rows]

    def execute(self, statement: Statement) -> int:
        """Run a statement and return the number of affected rows."""
        with self._require_pool().connection() as conn:
            cursor = conn.execute(statement.sql, statement.params)
            return cursor.rowcount
