"""PersistenceAdapter Protocol: the shared interface for all store adapters."""

from typing import Any, Protocol, runtime_checkable

from mastercrud.metadata.loader import EntityDescriptor
from mastercrud.query.builder import Statement
from mastercrud.query.dialect import Dialect


@runtime_checkable
class PersistenceAdapter(Protocol):
    """Interface all persistence adapters must implement.

    Adapters execute statements produced by the QueryBuilder; they never
    build SQL from request data themselves. Each call is one statement
    committed on its own.
    """

    dialect: Dialect

    def connect(self) -> None: ...

    def close(self) -> None: ...

    def ping(self) -> bool: ...

    def initialize_entity(self, entity: EntityDescriptor) -> None: ...

    def fetch_one(self, statement: Statement) -> dict[str, Any] | None: ...

    def fetch_all(self, statement: Statement) -> list[dict[str, Any]]: ...

    def execute(self, statement: Statement) -> int: ...
