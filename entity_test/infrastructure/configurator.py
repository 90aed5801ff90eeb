"""
Entity Test Configurator

🚀 One call to a working host:
Wires the hook context, the hook registry, the module's callbacks and the
entity type manager together in the right order, and hands back a kernel
exposing them. Every kernel owns its own state store, so separately
configured kernels never see each other's state.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

from ..access.account import Account
from ..entities.definitions import EntityTypeDefinition
from ..entities.manager import EntityTypeManager
from ..hooks.context import HookContext
from ..hooks.module import register_hooks
from ..hooks.registry import HookRegistry
from ..persistence.state import StateStore
from .configuration import EntityTestSettings, configure_logging, get_settings

logger = logging.getLogger(__name__)


@dataclass
class EntityTestKernel:
    """Configured collaborators of one module instance"""
    context: HookContext
    registry: HookRegistry
    manager: EntityTypeManager

    @property
    def state(self) -> StateStore:
        return self.context.state

    @property
    def settings(self) -> EntityTestSettings:
        return self.context.settings

    def storage(self, entity_type_id: str):
        return self.manager.get_storage(entity_type_id)

    def access_handler(self, entity_type_id: str):
        return self.manager.get_access_control_handler(entity_type_id)

    def set_current_account(self, account: Account):
        self.context.set_current_account(account)

    def rebuild(self):
        """Drop cached definitions so state-gated alterations take effect"""
        self.manager.clear_cached_definitions()


class EntityTestConfigurator:
    """
    Builds an EntityTestKernel.

    Example:
        kernel = (EntityTestConfigurator(settings)
                  .with_state({"entity_test.translation": True})
                  .configure())
        storage = kernel.storage("entity_test_mul")
    """

    def __init__(self, settings: Optional[EntityTestSettings] = None):
        self.settings = settings or get_settings()
        self._state: Dict[str, Any] = {}
        self._account: Optional[Account] = None
        self._definitions: Optional[Dict[str, EntityTypeDefinition]] = None
        self._register_module_hooks = True
        self._configure_logging = False

    def with_state(self, values: Dict[str, Any]) -> 'EntityTestConfigurator':
        self._state.update(values)
        return self

    def with_account(self, account: Account) -> 'EntityTestConfigurator':
        self._account = account
        return self

    def with_definitions(self, definitions: Dict[str, EntityTypeDefinition]) -> 'EntityTestConfigurator':
        self._definitions = definitions
        return self

    def without_module_hooks(self) -> 'EntityTestConfigurator':
        self._register_module_hooks = False
        return self

    def with_logging(self) -> 'EntityTestConfigurator':
        self._configure_logging = True
        return self

    def configure(self) -> EntityTestKernel:
        # 1. Logging first so the rest of the wiring is visible
        if self._configure_logging:
            configure_logging(self.settings)

        # 2. Context with its own state store
        context = HookContext(
            state=StateStore(self._state),
            settings=self.settings,
            current_account=self._account or Account(),
        )

        # 3. Registry and the module's callbacks
        registry = HookRegistry(context)
        if self._register_module_hooks:
            register_hooks(registry)

        # 4. Manager, which attaches itself to the context
        manager = EntityTypeManager(registry, definitions=self._definitions)

        logger.info(f"Configured {self.settings.provider} for {self.settings.environment.value}")
        return EntityTestKernel(context=context, registry=registry, manager=manager)


def configure_entity_test(settings: Optional[EntityTestSettings] = None,
                          state: Optional[Dict[str, Any]] = None,
                          account: Optional[Account] = None) -> EntityTestKernel:
    """Shortcut for the common configurator chain"""
    configurator = EntityTestConfigurator(settings).with_state(state or {})
    if account is not None:
        configurator.with_account(account)
    return configurator.configure()


__all__ = ["EntityTestKernel", "EntityTestConfigurator", "configure_entity_test"]
