"""Hook system types.

- Operation: the mutating operation a hook guards
- HookContext: runtime state passed to hook functions
- HookResult: return value from hook functions
- HookSet: the resolved hooks of one entity
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any


class Operation(Enum):
    """The mutating operation a before-hook runs for."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class HookContext:
    """Runtime context passed to every hook function.

    Attributes:
        entity_key: Key of the entity being operated on
        operation: CREATE, UPDATE or DELETE
        record: Partial record supplied by the caller (empty for delete).
            A copy; changes made by a hook are discarded.
        id: Target row id (None for create)
    """

    entity_key: str
    operation: Operation
    record: dict[str, Any]
    id: int | None = None


@dataclass
class HookResult:
    """Return value from a hook.

    Attributes:
        abort: Error message rejecting the operation
    """

    abort: str | None = None


# Hook function signature: async (HookContext) -> HookResult | None
HookFn = Callable[[HookContext], Awaitable[HookResult | None]]


@dataclass(frozen=True)
class HookSet:
    """Hooks of one entity, resolved once at start-up.

    Each entry is a ``(name, fn)`` pair kept in declared order.
    """

    before_create: tuple[tuple[str, HookFn], ...] = ()
    before_update: tuple[tuple[str, HookFn], ...] = ()
    before_delete: tuple[tuple[str, HookFn], ...] = ()

    def for_operation(self, operation: Operation) -> tuple[tuple[str, HookFn], ...]:
        if operation is Operation.CREATE:
            return self.before_create
        if operation is Operation.UPDATE:
            return self.before_update
        return self.before_delete


EMPTY_HOOK_SET = HookSet()
