"""
Module wiring - every entity_test callback and where it plugs in.

🔌 One table, one call:
``HOOK_IMPLEMENTATIONS`` lists (hook, target, callback) for each callback
the module provides; ``register_hooks`` puts them all into a registry.
Translation recorders are generated per entity type variant.
"""

from typing import List
import logging

from . import access, display, entity_types, lifecycle
from .registry import HookRegistry

logger = logging.getLogger(__name__)

MODULE = "entity_test"

HOOK_IMPLEMENTATIONS = [
    # Entity types and fields
    ("entity_type_alter", None, entity_types.entity_type_alter),
    ("entity_base_field_info", None, entity_types.entity_base_field_info),
    ("entity_base_field_info_alter", None, entity_types.entity_base_field_info_alter),
    ("entity_bundle_info", None, entity_types.entity_bundle_info),
    ("entity_view_mode_info", None, entity_types.entity_view_mode_info_alter),
    ("entity_form_mode_info", None, entity_types.entity_form_mode_info_alter),
    ("entity_extra_field_info", None, entity_types.entity_extra_field_info),

    # Lifecycle
    ("presave", None, lifecycle.entity_presave),
    ("predelete", None, lifecycle.entity_predelete),
    ("insert", "entity_test", lifecycle.entity_test_insert),
    ("insert", None, lifecycle.entity_insert),
    ("update", None, lifecycle.entity_update),

    # Access
    ("entity_access", None, access.entity_access),
    ("access", "entity_test", access.entity_test_access),
    ("entity_create_access", None, access.entity_create_access),
    ("create_access", "entity_test", access.entity_test_create_access),
    ("entity_field_access", None, access.entity_field_access),
    ("entity_field_access_alter", None, access.entity_field_access_alter),
    ("query_alter", "entity_test_access", access.query_entity_test_access_alter),

    # Forms and displays
    ("form_alter", "entity_test_form", display.form_entity_test_form_alter),
    ("form_alter", "node_form", display.form_node_form_alter),
    ("entity_form_display_alter", None, display.entity_form_display_alter),
    ("entity_prepare_view", None, display.entity_prepare_view),
    ("entity_display_build_alter", None, display.entity_display_build_alter),
]


def register_hooks(registry: HookRegistry, module: str = MODULE) -> List[str]:
    """Register every entity_test callback; returns the handler ids"""
    handler_ids = [
        registry.register(hook, callback, target=target, module=module)
        for hook, target, callback in HOOK_IMPLEMENTATIONS
    ]
    for entry in lifecycle.translation_recorders():
        handler_ids.append(registry.register(entry["hook"], entry["callback"], target=entry["target"], module=module))

    logger.info(f"Registered {len(handler_ids)} {module} hook implementations")
    return handler_ids


__all__ = ["MODULE", "HOOK_IMPLEMENTATIONS", "register_hooks"]
