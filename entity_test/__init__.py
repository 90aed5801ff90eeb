"""
Entity Test - host-side harness and hook callbacks for entity API tests.

🧪 What the module provides:
- Entity type variants (plain, multilingual, revisionable, both, bundled)
- Hook callbacks altering types, fields, bundles, forms and displays
- Access callbacks and the host arbitration that folds their verdicts
- A recorder of translation lifecycle hooks
- An injected key-value state store shared by all callbacks
"""

from .access.account import Account
from .access.result import AccessResult, combine
from .entities.entity import ContentEntity
from .entities.manager import EntityTypeManager
from .exceptions import EntityStorageError, EntityTestError, HookError
from .hooks.context import HookContext
from .hooks.module import register_hooks
from .hooks.registry import HookRegistry
from .infrastructure.configuration import EntityTestSettings
from .infrastructure.configurator import EntityTestConfigurator, EntityTestKernel, configure_entity_test
from .persistence.state import StateStore

__version__ = "0.1.0"

# Export main components
__all__ = [
    "Account", "AccessResult", "combine", "ContentEntity", "EntityTypeManager",
    "EntityStorageError", "EntityTestError", "HookError", "HookContext",
    "register_hooks", "HookRegistry", "EntityTestSettings", "EntityTestConfigurator",
    "EntityTestKernel", "configure_entity_test", "StateStore",
]
