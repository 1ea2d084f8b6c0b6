"""Hook registry.

Provides registration and lookup for hook implementations. A registry is an
ordinary object built at application start-up and handed to the hook
service; there is no module-level table.
"""

from collections.abc import Callable

from mastercrud.hooks.types import HookFn


class HookRegistry:
    """Registry for hook implementations.

    Hooks must be registered before entity metadata can reference them.

    Example:
        registry = HookRegistry()

        @registry.hook("requireKode")
        async def require_kode(ctx: HookContext) -> HookResult | None:
            ...
    """

    def __init__(self) -> None:
        self._hooks: dict[str, HookFn] = {}

    def register(self, name: str, hook_fn: HookFn) -> None:
        """Register a hook function by name.

        Raises:
            ValueError: If a different function is already registered as ``name``
        """
        existing = self._hooks.get(name)
        if existing is not None and existing is not hook_fn:
            raise ValueError(f"Hook '{name}' is already registered")
        self._hooks[name] = hook_fn

    def get(self, name: str) -> HookFn:
        """Get a registered hook function by name.

        Raises:
            ValueError: If hook is not registered
        """
        if name not in self._hooks:
            raise ValueError(
                f"Hook '{name}' is not registered. "
                "Hooks must be registered before metadata is loaded."
            )
        return self._hooks[name]

    def is_registered(self, name: str) -> bool:
        return name in self._hooks

    def list_registered(self) -> list[str]:
        return sorted(self._hooks.keys())

    def hook(self, name: str) -> Callable[[HookFn], HookFn]:
        """Decorator registering the wrapped function as ``name``."""

        def decorator(fn: HookFn) -> HookFn:
            self.register(name, fn)
            return fn

        return decorator
