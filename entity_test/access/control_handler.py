"""
Access Control Handlers - Verdict Arbitration

🔐 General rule proposes, specific rule disposes:
For an entity operation the handler first folds the verdicts of the
generic ``entity_access`` callbacks and the type-specific ``access``
callbacks. Unless that is already forbidden, it folds in its own
``check_access`` verdict. The entity_test handler forbids entities
labelled ``forbid_access`` there, overriding the allowed verdict the
generic callback proposes for them.

Field access starts from an allowed default grant, adds one grant per
module implementing ``entity_field_access``, lets
``entity_field_access_alter`` rewrite the grants and folds them.
"""

from typing import Any, Dict, Optional, TYPE_CHECKING
import logging

from .account import Account
from .result import AccessResult, combine
from ..entities.definitions import EntityTypeDefinition
from ..infrastructure.configuration import PROVIDER

if TYPE_CHECKING:
    from ..entities.entity import ContentEntity
    from ..entities.fields import FieldDefinition, FieldItemList
    from ..hooks.registry import HookRegistry

logger = logging.getLogger(__name__)


class EntityAccessControlHandler:
    """Host access arbitration for one entity type"""

    def __init__(self, entity_type: EntityTypeDefinition, registry: 'HookRegistry'):
        self.entity_type = entity_type
        self.registry = registry

    def _account(self, account: Optional[Account]) -> Account:
        return account or self.registry.context.current_account

    def access(self, entity: 'ContentEntity', operation: str, account: Optional[Account] = None,
               return_as_object: bool = False):
        account = self._account(account)

        results = self.registry.invoke_all("entity_access", entity, operation, account)
        results += self.registry.invoke_all("access", entity, operation, account, target=entity.entity_type_id)
        result = combine(results)

        if not result.is_forbidden():
            result = result.or_if(self.check_access(entity, operation, account))

        logger.debug(f"Access {operation} on {entity!r} for uid {account.uid}: {result.verdict.value}")
        return result if return_as_object else result.is_allowed()

    def create_access(self, entity_bundle: Optional[str] = None, account: Optional[Account] = None,
                      context: Optional[Dict[str, Any]] = None, return_as_object: bool = False):
        account = self._account(account)
        context = dict(context or {})
        context.setdefault("entity_type_id", self.entity_type.id)
        context.setdefault("langcode", "und")

        results = self.registry.invoke_all("entity_create_access", account, context, entity_bundle)
        results += self.registry.invoke_all(
            "create_access", account, context, entity_bundle, target=self.entity_type.id
        )
        result = combine(results)

        if not result.is_forbidden():
            result = result.or_if(self.check_create_access(account, context, entity_bundle))

        return result if return_as_object else result.is_allowed()

    def field_access(self, operation: str, field_definition: 'FieldDefinition',
                     account: Optional[Account] = None, items: Optional['FieldItemList'] = None,
                     return_as_object: bool = False):
        account = self._account(account)

        default = self.check_field_access(operation, field_definition, account, items) \
            if items is not None else AccessResult.allowed()
        grants: Dict[str, AccessResult] = {":default": default}
        grants.update(self.registry.invoke_all_keyed(
            "entity_field_access", operation, field_definition, account, items
        ))

        context = {
            "operation": operation,
            "field_definition": field_definition,
            "items": items,
            "account": account,
        }
        self.registry.alter("entity_field_access_alter", grants, context)

        result = combine(grants.values())
        return result if return_as_object else result.is_allowed()

    # Handler-specific rules
    def check_access(self, entity: 'ContentEntity', operation: str, account: Account) -> AccessResult:
        if self.entity_type.admin_permission:
            return AccessResult.allowed_if_has_permission(account, self.entity_type.admin_permission)
        return AccessResult.neutral()

    def check_create_access(self, account: Account, context: Dict[str, Any],
                            entity_bundle: Optional[str]) -> AccessResult:
        if self.entity_type.admin_permission:
            return AccessResult.allowed_if_has_permission(account, self.entity_type.admin_permission)
        return AccessResult.neutral()

    def check_field_access(self, operation: str, field_definition: 'FieldDefinition', account: Account,
                           items: Optional['FieldItemList']) -> AccessResult:
        return AccessResult.allowed()


class EntityTestAccessControlHandler(EntityAccessControlHandler):
    """Access rules of the entity_test entity types"""

    def check_access(self, entity: 'ContentEntity', operation: str, account: Account) -> AccessResult:
        if entity.label() == "forbid_access":
            return AccessResult.forbidden()

        if operation == "view":
            if not entity.is_default_translation():
                return AccessResult.allowed_if_has_permission(account, "view test entity translations")
            return AccessResult.allowed_if_has_permission(account, "view test entity")
        if operation in ("update", "delete"):
            return AccessResult.allowed_if_has_permission(account, "administer entity_test content")

        return AccessResult.neutral()

    def check_create_access(self, account: Account, context: Dict[str, Any],
                            entity_bundle: Optional[str]) -> AccessResult:
        return AccessResult.allowed_if_has_permission(account, "administer entity_test content")


def handler_for(entity_type: EntityTypeDefinition, registry: 'HookRegistry') -> EntityAccessControlHandler:
    """Access control handler class for an entity type"""
    if entity_type.provider == PROVIDER:
        return EntityTestAccessControlHandler(entity_type, registry)
    return EntityAccessControlHandler(entity_type, registry)


# Export main components
__all__ = ["EntityAccessControlHandler", "EntityTestAccessControlHandler", "handler_for"]
