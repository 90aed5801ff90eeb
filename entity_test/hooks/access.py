"""
Access callbacks.

Each callback contributes one verdict; the host access control handler
folds them. Several callbacks only record that they fired, so tests can
check that generic and type-specific callbacks are both invoked.
"""

from typing import Any, Dict, Optional

from ..access.account import Account
from ..access.result import UNCACHEABLE, AccessResult
from ..entities.display import AlterableQuery
from ..entities.entity import ContentEntity
from ..entities.fields import FieldDefinition, FieldItemList
from .context import HookContext

FIELD_TEST_TEXT = "field_test_text"


def entity_access(context: HookContext, entity: ContentEntity, operation: str, account: Account) -> AccessResult:
    if entity.get_entity_type().provider != context.provider:
        return AccessResult.neutral()

    context.state.set("entity_test_entity_access", True)

    # Allowed here, but EntityTestAccessControlHandler.check_access() forbids it
    # and a forbidden verdict wins the fold.
    if entity.label() == "forbid_access":
        return AccessResult.allowed()

    if entity.label() == "Accessible":
        return AccessResult.allowed()
    if entity.label() == "Inaccessible":
        return AccessResult.forbidden()

    # Depends on a state value outside the cache tag system, so uncacheable.
    granted = context.state.get(f"entity_test_entity_access.{operation}.{entity.id()}", False)
    result = AccessResult.allowed() if granted else AccessResult.forbidden()
    return result.set_cache_max_age(UNCACHEABLE)


def entity_test_access(context: HookContext, entity: ContentEntity, operation: str, account: Account) -> AccessResult:
    context.state.set("entity_test_entity_test_access", True)
    return AccessResult.neutral()


def entity_create_access(context: HookContext, account: Account, create_context: Dict[str, Any],
                         entity_bundle: Optional[str]) -> AccessResult:
    context.state.set("entity_test_entity_create_access", True)
    context.state.set("entity_test_entity_create_access_context", create_context)
    return AccessResult.neutral()


def entity_test_create_access(context: HookContext, account: Account, create_context: Dict[str, Any],
                              entity_bundle: Optional[str]) -> AccessResult:
    context.state.set("entity_test_entity_test_create_access", True)
    return AccessResult.neutral()


def entity_field_access(context: HookContext, operation: str, field_definition: FieldDefinition,
                        account: Account, items: Optional[FieldItemList] = None) -> AccessResult:
    if field_definition.name == FIELD_TEST_TEXT and items is not None:
        if items.value == "no access value":
            return AccessResult.forbidden().add_cacheable_dependency(items.get_entity())
        if items.value == "custom cache tag value":
            return (
                AccessResult.allowed()
                .add_cacheable_dependency(items.get_entity())
                .add_cache_tags(["entity_test_access:field_test_text"])
            )
        if operation == "edit" and items.value == "no edit access value":
            return AccessResult.forbidden().add_cacheable_dependency(items.get_entity())

    gated_field = context.state.get("views_field_access_test-field")
    if gated_field and field_definition.name == gated_field:
        result = AccessResult.allowed_if_has_permission(account, "view test entity field")
        # Deny actively rather than leaving the decision open.
        if result.is_neutral():
            result = AccessResult.forbidden()
        return result

    return AccessResult.neutral()


def entity_field_access_alter(context: HookContext, grants: Dict[str, AccessResult], access_context: Dict[str, Any]):
    items = access_context.get("items")
    if (access_context["field_definition"].name == FIELD_TEST_TEXT
            and items is not None and items.value == "access alter value"):
        grants[":default"] = (
            AccessResult.forbidden()
            .inherit_cacheability(grants[":default"])
            .add_cacheable_dependency(items.get_entity())
        )


def query_entity_test_access_alter(context: HookContext, query: AlterableQuery):
    if not context.state.get("entity_test_query_access"):
        return

    if not context.current_account.has_permission("view all entity_test_query_access entities"):
        query.condition("entity_test_query_access.name", "published entity")


__all__ = [
    "FIELD_TEST_TEXT", "entity_access", "entity_test_access", "entity_create_access",
    "entity_test_create_access", "entity_field_access", "entity_field_access_alter",
    "query_entity_test_access_alter"
]
