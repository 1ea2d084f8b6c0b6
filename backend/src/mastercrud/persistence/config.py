"""Database configuration, adapter factory and start-up connection."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from tenacity import Retrying, before_sleep_log, stop_after_attempt, wait_fixed

if TYPE_CHECKING:
    from mastercrud.persistence.adapter import PersistenceAdapter

logger = logging.getLogger(__name__)


@dataclass
class DatabaseConfig:
    """Database connection configuration.

    Supports sqlite:/// and postgresql:// URL schemes.
    """

    url: str
    pool_max_size: int = 10
    connect_retries: int = 5
    connect_retry_wait: float = 2.0

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> DatabaseConfig:
        """Create config from environment variables.

        Resolution order for the URL:
        1. DATABASE_URL env var (standard)
        2. MASTERCRUD_DB_PATH env var (converted to sqlite:/// URL)
        3. Default: sqlite:///{base_path}/data/mastercrud.db
        """
        url = os.environ.get("DATABASE_URL")
        if not url:
            db_path = os.environ.get("MASTERCRUD_DB_PATH")
            if db_path:
                url = f"sqlite:///{db_path}"
            elif base_path:
                url = f"sqlite:///{base_path / 'data' / 'mastercrud.db'}"
            else:
                url = "sqlite:///mastercrud.db"

        return cls(
            url=url,
            pool_max_size=int(os.environ.get("MASTERCRUD_POOL_MAX_SIZE", "10")),
            connect_retries=int(os.environ.get("MASTERCRUD_CONNECT_RETRIES", "5")),
            connect_retry_wait=float(os.environ.get("MASTERCRUD_CONNECT_RETRY_WAIT", "2")),
        )

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_postgresql(self) -> bool:
        return self.url.startswith("postgresql") or self.url.startswith("postgres://")

    @property
    def sqlite_path(self) -> str:
        """Filesystem path of a sqlite:/// URL (``:memory:`` when empty)."""
        return self.url.replace("sqlite:///", "", 1) or ":memory:"

    def redacted_url(self) -> str:
        """URL with any password removed, safe for logs."""
        if "@" not in self.url or "://" not in self.url:
            return self.url
        scheme, rest = self.url.split("://", 1)
        credentials, host = rest.rsplit("@", 1)
        user = credentials.split(":", 1)[0]
        return f"{scheme}://{user}:***@{host}"


def create_adapter(config: DatabaseConfig) -> PersistenceAdapter:
    """Create a persistence adapter based on the database URL scheme.

    Returns:
        A PersistenceAdapter instance (not yet connected).

    Raises:
        ValueError: For unsupported URL schemes.
    """
    if config.is_sqlite:
        from mastercrud.persistence.sqlite import SQLiteAdapter

        db_path = config.sqlite_path
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        return SQLiteAdapter(db_path)

    if config.is_postgresql:
        from mastercrud.persistence.postgresql import PostgreSQLAdapter

        return PostgreSQLAdapter(config.url, max_size=config.pool_max_size)

    raise ValueError(f"Unsupported database URL scheme: {config.url}")


def connect_with_retry(adapter: PersistenceAdapter, config: DatabaseConfig) -> None:
    """Connect ``adapter``, retrying start-up failures.

    Only the initial connection is retried; statement failures during
    request handling are never retried.
    """
    retrying = Retrying(
        stop=stop_after_attempt(max(config.connect_retries, 1)),
        wait=wait_fixed(config.connect_retry_wait),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    for attempt in retrying:
        with attempt:
            try:
                adapter.connect()
                adapter.ping()
            except Exception:
                adapter.close()
                raise
    logger.info("Connected to database %s", config.redacted_url())
