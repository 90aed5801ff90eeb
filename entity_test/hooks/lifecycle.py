"""
Lifecycle and translation recorder callbacks.

The presave, predelete and insert callbacks fail on demand so that the
storage rollback can be tested. The translation callbacks only record the
language of the translation they saw, keyed by hook and entity type
variant, in the ``entity_test.hooks`` state record.
"""

from typing import Any, Callable, Dict, List
import logging

from ..entities.entity import ContentEntity
from ..exceptions import HookError
from .context import HookContext

logger = logging.getLogger(__name__)

HOOKS_STATE_KEY = "entity_test.hooks"

# Variants whose translation hooks are recorded; "entity" is the generic hook
TRANSLATION_HOOK_VARIANTS = [
    "entity",
    "entity_test_mul",
    "entity_test_mul_changed",
    "entity_test_mulrev",
    "entity_test_mulrev_changed",
    "entity_test_mul_langcode_key",
]

TRANSLATION_EVENTS = ["create", "insert", "delete"]


def record_hooks(context: HookContext, hook: str, data: Any):
    """Store the data a hook was called with under the hook's name"""
    hooks = context.state.get(HOOKS_STATE_KEY) or {}
    hooks[hook] = data
    context.state.set(HOOKS_STATE_KEY, hooks)
    logger.debug(f"Recorded hook {hook}: {data!r}")


def translation_recorder(variant: str, event: str) -> Callable[[HookContext, ContentEntity], None]:
    """Callback recording ``<variant>_translation_<event>`` with the langcode"""
    hook_name = f"{variant}_translation_{event}"

    def record(context: HookContext, translation: ContentEntity):
        record_hooks(context, hook_name, translation.language())

    record.__name__ = f"{variant}_translation_{event}"
    return record


def translation_recorders() -> List[Dict[str, Any]]:
    """Registration entries for every variant and translation event"""
    entries = []
    for variant in TRANSLATION_HOOK_VARIANTS:
        target = None if variant == "entity" else variant
        for event in TRANSLATION_EVENTS:
            entries.append({
                "hook": f"translation_{event}",
                "target": target,
                "callback": translation_recorder(variant, event),
            })
    return entries


def entity_presave(context: HookContext, entity: ContentEntity):
    if context.settings.throw_exception:
        raise HookError("Entity presave exception", code=1)


def entity_predelete(context: HookContext, entity: ContentEntity):
    if context.settings.throw_exception:
        raise HookError("Entity predelete exception", code=2)


def entity_test_insert(context: HookContext, entity: ContentEntity):
    if entity.has_field("name") and entity.get("name").value == "fail_insert":
        raise HookError("Test exception rollback.")


def entity_insert(context: HookContext, entity: ContentEntity):
    # Re-saving without a new revision must keep the loaded revision id.
    if entity.entity_type_id == "entity_test_mulrev" and entity.label() == "EntityLoadedRevisionTest":
        entity.set_new_revision(False)
        context.entity_type_manager.get_storage(entity.entity_type_id).save(entity)


def entity_update(context: HookContext, entity: ContentEntity):
    if entity.entity_type_id == "entity_test_mulrev":
        context.state.set("entity_test.loadedRevisionId", entity.get_loaded_revision_id())


__all__ = [
    "HOOKS_STATE_KEY", "TRANSLATION_HOOK_VARIANTS", "TRANSLATION_EVENTS",
    "record_hooks", "translation_recorder", "translation_recorders",
    "entity_presave", "entity_predelete", "entity_test_insert",
    "entity_insert", "entity_update"
]
