"""Persistence layer - store adapters and configuration."""

from mastercrud.persistence.adapter import PersistenceAdapter
from mastercrud.persistence.config import DatabaseConfig, connect_with_retry, create_adapter

__all__ = ["PersistenceAdapter", "DatabaseConfig", "connect_with_retry", "create_adapter"]
