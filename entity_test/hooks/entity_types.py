"""
Entity type and field alteration callbacks.

These run while the host builds its entity type and field caches. Each
alteration is gated by a state flag so that a test can switch a fixture
on, clear the caches and observe the changed definitions.
"""

from typing import Any, Dict

from ..entities.definitions import EntityTypeDefinition, entity_test_entity_types
from ..entities.fields import CARDINALITY_UNLIMITED, FieldDefinition
from .context import HookContext

DEFAULT_BUNDLE_LABEL = "Entity Test Bundle"


def entity_type_alter(context: HookContext, entity_types: Dict[str, EntityTypeDefinition]):
    state = context.state

    if state.get("entity_test.translation"):
        for entity_type_id in entity_test_entity_types():
            if entity_type_id in entity_types:
                entity_types[entity_type_id].translatable = True

    replacement = state.get("entity_test_with_bundle.entity_type")
    if replacement is not None:
        entity_types["entity_test_with_bundle"] = replacement

    # entity_test_new only exists while a test asks for it
    if not state.get("entity_test_new"):
        entity_types.pop("entity_test_new", None)


def entity_base_field_info(context: HookContext, entity_type: EntityTypeDefinition) -> Dict[str, FieldDefinition]:
    fields: Dict[str, FieldDefinition] = {}
    if entity_type.id != "entity_test_mulrev":
        return fields

    if context.state.get("entity_test.field_test_item"):
        fields["field_test_item"] = (
            FieldDefinition.create("field_test")
            .set_label("Field test")
            .set_description("A field test.")
            .set_revisionable(True)
            .set_translatable(True)
        )

    if context.state.get("entity_test.multi_column"):
        fields["description"] = (
            FieldDefinition.create("shape")
            .set_label("Some custom description")
            .set_translatable(True)
        )

    return fields


def entity_base_field_info_alter(context: HookContext, fields: Dict[str, FieldDefinition],
                                 entity_type: EntityTypeDefinition):
    state = context.state

    if entity_type.id == "entity_test_mulrev":
        for name, value in (state.get("entity_test.field_definitions.translatable") or {}).items():
            if name in fields:
                fields[name].set_translatable(value)

    if entity_type.id == "node" and state.get("entity_test.node_remove_status_field"):
        fields.pop("status", None)

    if entity_type.id == "entity_test" and state.get("entity_test.remove_name_field"):
        fields.pop("name", None)

    # Update 8001 deploys a user_id definition with multiple values.
    if entity_type.id == "entity_test" and state.get("entity_test.db_updates.entity_definition_updates") == 8001:
        fields["user_id"].set_cardinality(CARDINALITY_UNLIMITED)


def default_bundles(entity_type_id: str) -> Dict[str, Dict[str, Any]]:
    return {entity_type_id: {"label": DEFAULT_BUNDLE_LABEL}}


def entity_bundle_info(context: HookContext) -> Dict[str, Dict[str, Dict[str, Any]]]:
    bundles = {}
    for entity_type_id, entity_type in context.entity_type_manager.get_definitions().items():
        if entity_type.provider == context.provider and entity_type_id != "entity_test_with_bundle":
            bundles[entity_type_id] = context.state.get(f"{entity_type_id}.bundles", default_bundles(entity_type_id))
    return bundles


def entity_view_mode_info_alter(context: HookContext, view_modes: Dict[str, Dict[str, Any]]):
    for entity_type_id, entity_type in context.entity_type_manager.get_definitions().items():
        if entity_type.provider == context.provider and entity_type_id not in view_modes:
            view_modes[entity_type_id] = {
                "full": {"label": "Full object", "status": True, "cache": True},
                "teaser": {"label": "Teaser", "status": True, "cache": True},
            }


def entity_form_mode_info_alter(context: HookContext, form_modes: Dict[str, Dict[str, Any]]):
    for entity_type_id, entity_type in context.entity_type_manager.get_definitions().items():
        if entity_type.provider == context.provider:
            form_modes[entity_type_id] = {
                "compact": {"label": "Compact version", "status": True},
            }


def entity_extra_field_info(context: HookContext) -> Dict[str, Any]:
    # Placeholders only; they render nothing and exist for display tests.
    return {
        "entity_test": {
            "bundle_with_extra_fields": {
                "display": {
                    "display_extra_field": {
                        "label": "Display extra field",
                        "description": "An extra field on the display side.",
                        "weight": 5,
                        "visible": True,
                    },
                    "display_extra_field_hidden": {
                        "label": "Display extra field (hidden)",
                        "description": "An extra field on the display side, hidden by default.",
                        "visible": False,
                    },
                },
            },
        },
    }


__all__ = [
    "DEFAULT_BUNDLE_LABEL", "entity_type_alter", "entity_base_field_info",
    "entity_base_field_info_alter", "default_bundles", "entity_bundle_info",
    "entity_view_mode_info_alter", "entity_form_mode_info_alter", "entity_extra_field_info"
]
