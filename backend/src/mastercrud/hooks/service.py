"""Hook execution service.

Runs the before-hooks of an entity ahead of every mutating statement.
A rejection short-circuits the request before the store is touched.
"""

import logging
from typing import Any

from mastercrud.core.errors import ValidationFailed
from mastercrud.hooks.registry import HookRegistry
from mastercrud.hooks.types import EMPTY_HOOK_SET, HookContext, HookSet, Operation
from mastercrud.metadata.loader import EntityRegistry

logger = logging.getLogger(__name__)


class HookService:
    """Orchestrates before-hooks for entity mutations.

    Hooks within a hook point execute sequentially in declared order; the
    first abort wins.
    """

    def __init__(self, hook_sets: dict[str, HookSet] | None = None):
        self._hook_sets = dict(hook_sets or {})

    @classmethod
    def build(cls, entities: EntityRegistry, hooks: HookRegistry) -> "HookService":
        """Resolve every entity's hook names into a HookSet.

        Raises:
            ValueError: If metadata references an unregistered hook
        """
        hook_sets: dict[str, HookSet] = {}
        for entity in entities:
            resolved = {}
            for point, attr in (
                ("beforeCreate", "before_create"),
                ("beforeUpdate", "before_update"),
                ("beforeDelete", "before_delete"),
            ):
                names = entity.hooks.get(point, ())
                try:
                    resolved[attr] = tuple((name, hooks.get(name)) for name in names)
                except ValueError as e:
                    raise ValueError(f"Entity '{entity.key}' {point}: {e}") from e
            hook_sets[entity.key] = HookSet(**resolved)
        return cls(hook_sets)

    def hook_set(self, entity_key: str) -> HookSet:
        return self._hook_sets.get(entity_key, EMPTY_HOOK_SET)

    async def run_before(
        self,
        operation: Operation,
        entity_key: str,
        payload: dict[str, Any] | None = None,
        id: int | None = None,
    ) -> None:
        """Run the before-hooks for ``operation``.

        Args:
            operation: CREATE, UPDATE or DELETE
            entity_key: Entity being mutated
            payload: Partial record (create/update); ignored for delete
            id: Target row id (update/delete)

        Raises:
            ValidationFailed: If any hook aborts or raises
        """
        hooks = self.hook_set(entity_key).for_operation(operation)
        if not hooks:
            return

        record = {} if operation is Operation.DELETE else dict(payload or {})

        for name, hook_fn in hooks:
            context = HookContext(
                entity_key=entity_key,
                operation=operation,
                record=dict(record),
                id=id,
            )
            try:
                result = await hook_fn(context)
            except Exception as e:
                logger.warning("Hook '%s' on %s failed: %s", name, entity_key, e)
                raise ValidationFailed(f"Hook '{name}' failed: {e}") from e

            if result is not None and result.abort:
                logger.info(
                    "Hook '%s' rejected %s on %s: %s",
                    name,
                    operation.value,
                    entity_key,
                    result.abort,
                )
                raise ValidationFailed(result.abort)
