"""Entity before-hooks.

Provides validation points that run before each mutating operation:
- beforeCreate: receives the partial record (can abort)
- beforeUpdate: receives the partial record and target id (can abort)
- beforeDelete: receives the target id only (can abort)

Usage:
    from mastercrud.hooks import HookRegistry, HookContext, HookResult

    registry = HookRegistry()

    @registry.hook("requireKode")
    async def require_kode(ctx: HookContext) -> HookResult | None:
        if not ctx.record.get("kode"):
            return HookResult(abort="kode is required")
        return None
"""

from mastercrud.hooks.builtins import register_builtin_hooks
from mastercrud.hooks.registry import HookRegistry
from mastercrud.hooks.service import HookService
from mastercrud.hooks.types import (
    HookContext,
    HookFn,
    HookResult,
    HookSet,
    Operation,
)

__all__ = [
    "HookContext",
    "HookFn",
    "HookRegistry",
    "HookResult",
    "HookService",
    "HookSet",
    "Operation",
    "register_builtin_hooks",
]
