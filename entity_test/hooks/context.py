"""
Hook Context - what every callback receives.

Callbacks never reach for globals: the state store, the settings, the
acting account and the entity type manager all arrive through the
context passed as their first argument.
"""

from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING

from ..access.account import Account
from ..infrastructure.configuration import EntityTestSettings
from ..persistence.state import StateStore

if TYPE_CHECKING:
    from ..entities.manager import EntityTypeManager


@dataclass
class HookContext:
    """Explicitly injected collaborators of the hook callbacks"""
    state: StateStore = field(default_factory=StateStore)
    settings: EntityTestSettings = field(default_factory=EntityTestSettings)
    current_account: Account = field(default_factory=Account)
    entity_type_manager: Optional['EntityTypeManager'] = None

    @property
    def provider(self) -> str:
        return self.settings.provider

    def set_current_account(self, account: Account):
        self.current_account = account


__all__ = ["HookContext"]
