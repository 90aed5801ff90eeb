"""
Hook Registry - Explicit Callback Dispatch

🚀 Ordered callbacks per (hook, target):
Callbacks are registered against a hook name and an optional target (an
entity type id for entity hooks, a form id for form hooks). Invoking a
hook for a target calls the target-specific callbacks first, then the
generic ones, each group in weight order and then registration order.

Every callback is called as ``callback(context, *args)``. Exceptions
raised by callbacks propagate to the caller unchanged; the host decides
what to roll back.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple
from dataclasses import dataclass, field
from datetime import datetime
import itertools
import logging
import uuid

from ..exceptions import HookRegistrationError
from .context import HookContext

logger = logging.getLogger(__name__)

HookCallback = Callable[..., Any]


@dataclass
class HookHandler:
    """A registered callback"""
    hook: str
    callback: HookCallback
    target: Optional[str] = None
    module: str = "entity_test"
    weight: int = 0
    handler_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    sequence: int = 0
    created_at: datetime = field(default_factory=datetime.now)
    calls: int = 0

    @property
    def name(self) -> str:
        return getattr(self.callback, "__name__", repr(self.callback))

    def __call__(self, context: HookContext, *args, **kwargs) -> Any:
        self.calls += 1
        return self.callback(context, *args, **kwargs)


def deep_merge(base: Dict[str, Any], other: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``other`` into ``base``; later scalars win"""
    for key, value in other.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            deep_merge(base[key], value)
        else:
            base[key] = value
    return base


class HookRegistry:
    """
    Registry mapping (hook, target) to ordered callback handles.

    Example:
        registry = HookRegistry(context)

        @registry.hook("presave")
        def record_presave(context, entity):
            context.state.set("presaved", entity.id())

        registry.invoke_entity_hook("presave", entity)
    """

    def __init__(self, context: Optional[HookContext] = None):
        self.context = context or HookContext()
        self._handlers: Dict[Tuple[str, Optional[str]], List[HookHandler]] = {}
        self._by_id: Dict[str, HookHandler] = {}
        self._sequence = itertools.count()

    # Registration
    def register(
        self,
        hook: str,
        callback: HookCallback,
        target: Optional[str] = None,
        module: str = "entity_test",
        weight: int = 0
    ) -> str:
        """Register a callback and return its handler id"""
        if not hook:
            raise HookRegistrationError("Hook name is required")
        if not callable(callback):
            raise HookRegistrationError(f"Callback for hook '{hook}' is not callable")

        handler = HookHandler(
            hook=hook,
            callback=callback,
            target=target,
            module=module,
            weight=weight,
            sequence=next(self._sequence)
        )
        handlers = self._handlers.setdefault((hook, target), [])
        handlers.append(handler)
        handlers.sort(key=lambda h: (h.weight, h.sequence))
        self._by_id[handler.handler_id] = handler

        logger.debug(f"Registered {module}:{handler.name} for hook {hook}" + (f"[{target}]" if target else ""))
        return handler.handler_id

    def hook(self, hook: str, target: Optional[str] = None, module: str = "entity_test", weight: int = 0):
        """Decorator form of ``register``"""
        def decorator(callback: HookCallback) -> HookCallback:
            self.register(hook, callback, target=target, module=module, weight=weight)
            return callback
        return decorator

    def unregister(self, handler_id: str) -> bool:
        handler = self._by_id.pop(handler_id, None)
        if handler is None:
            return False
        self._handlers[(handler.hook, handler.target)].remove(handler)
        return True

    def clear(self):
        self._handlers.clear()
        self._by_id.clear()

    # Lookup
    def get_handlers(self, hook: str, target: Optional[str] = None,
                     include_generic: bool = True) -> List[HookHandler]:
        """Target-specific handlers followed by generic ones"""
        handlers: List[HookHandler] = []
        if target is not None:
            handlers.extend(self._handlers.get((hook, target), []))
        if include_generic:
            handlers.extend(self._handlers.get((hook, None), []))
        return handlers

    def has_handlers(self, hook: str, target: Optional[str] = None) -> bool:
        return bool(self.get_handlers(hook, target))

    def get_modules(self) -> List[str]:
        return sorted({handler.module for handler in self._by_id.values()})

    # Invocation
    def invoke(self, handler: HookHandler, *args, **kwargs) -> Any:
        logger.debug(f"Invoking {handler.module}:{handler.name} for hook {handler.hook}")
        return handler(self.context, *args, **kwargs)

    def invoke_all(self, hook: str, *args, target: Optional[str] = None, **kwargs) -> List[Any]:
        """Invoke every handler and return their non-None results in order"""
        results = []
        for handler in self.get_handlers(hook, target):
            result = self.invoke(handler, *args, **kwargs)
            if result is not None:
                results.append(result)
        return results

    def invoke_all_keyed(self, hook: str, *args, target: Optional[str] = None, **kwargs) -> Dict[str, Any]:
        """Invoke every handler; results keyed by module, later ones win"""
        results: Dict[str, Any] = {}
        for handler in self.get_handlers(hook, target):
            result = self.invoke(handler, *args, **kwargs)
            if result is not None:
                results[handler.module] = result
        return results

    def invoke_all_merged(self, hook: str, *args, target: Optional[str] = None, **kwargs) -> Dict[str, Any]:
        """Invoke every handler and deep-merge the returned mappings"""
        merged: Dict[str, Any] = {}
        for result in self.invoke_all(hook, *args, target=target, **kwargs):
            deep_merge(merged, result)
        return merged

    def invoke_entity_hook(self, hook: str, entity, *args, **kwargs) -> List[Any]:
        """Invoke a hook for an entity: type-specific callbacks, then generic"""
        return self.invoke_all(hook, entity, *args, target=entity.entity_type_id, **kwargs)

    def alter(self, hook: str, data: Any, *context_args, target: Optional[str] = None,
              include_generic: bool = True) -> Any:
        """Let every handler mutate ``data`` in place; returns ``data``"""
        for handler in self.get_handlers(hook, target, include_generic):
            self.invoke(handler, data, *context_args)
        return data

    def get_stats(self) -> Dict[str, Any]:
        return {
            "handlers": len(self._by_id),
            "hooks": sorted({hook for hook, _ in self._handlers}),
            "calls": {handler.handler_id: handler.calls for handler in self._by_id.values()}
        }


# Export main components
__all__ = ["HookCallback", "HookHandler", "HookRegistry", "deep_merge"]
