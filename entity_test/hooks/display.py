"""
Form and display alteration callbacks.
"""

from functools import partial
from typing import Any, Dict, List

from ..entities.display import EntityFormDisplay, EntityViewDisplay
from ..entities.entity import ContentEntity
from ..entities.forms import FormState
from .access import FIELD_TEST_TEXT
from .context import HookContext

DISPLAY_BUILD_ALTER_BUNDLE = "display_build_alter_bundle"


def entity_test_form_validate(form: Dict[str, Any], form_state: FormState):
    form["#entity_test_form_validate"] = True


def entity_test_form_validate_check(context: HookContext, form: Dict[str, Any], form_state: FormState):
    if form.get("#entity_test_form_validate"):
        context.state.set("entity_test.form.validate.result", True)


def form_entity_test_form_alter(context: HookContext, form: Dict[str, Any], form_state: FormState, form_id: str):
    mode = context.state.get("entity_test.form.validate.test")
    if mode == "form-level":
        form["#validate"].append(entity_test_form_validate)
        form["#validate"].append(partial(entity_test_form_validate_check, context))
    elif mode == "button-level":
        form["actions"]["submit"]["#validate"].append(entity_test_form_validate)


def form_node_form_alter(context: HookContext, form: Dict[str, Any], form_state: FormState, form_id: str):
    context.state.set("entity_test.form_langcode", form_state.get_form_langcode())


def entity_form_display_alter(context: HookContext, form_display: EntityFormDisplay, display_context: Dict[str, Any]):
    if display_context["entity_type"] != "entity_test":
        return

    component = form_display.get_component(FIELD_TEST_TEXT)
    if component is not None:
        component.setdefault("settings", {})["size"] = 42
        form_display.set_component(FIELD_TEST_TEXT, component)


def entity_prepare_view(context: HookContext, entity_type_id: str, entities: List[ContentEntity],
                        displays: Dict[str, EntityViewDisplay], view_mode: str):
    if entity_type_id != "entity_test":
        return

    for entity in entities:
        display = displays.get(entity.bundle())
        if display is not None and display.get_component(FIELD_TEST_TEXT) is not None and entity.has_field(FIELD_TEST_TEXT):
            for item in entity.get(FIELD_TEST_TEXT):
                item.attributes.setdefault("data-field-item-attr", "foobar")

        for name, definition in entity.get_field_definitions().items():
            if definition.type == "daterange":
                for item in entity.get(name):
                    item.attributes.setdefault("data-field-item-attr", "foobar")


def entity_display_build_alter(context: HookContext, build: Dict[str, Any], build_context: Dict[str, Any]):
    entity = build_context["entity"]
    if entity.entity_type_id == "entity_test" and entity.bundle() == DISPLAY_BUILD_ALTER_BUNDLE:
        build["entity_display_build_alter"] = {
            "#markup": f"Content added in hook_entity_display_build_alter for entity id {entity.id()}"
        }


__all__ = [
    "DISPLAY_BUILD_ALTER_BUNDLE", "entity_test_form_validate", "entity_test_form_validate_check",
    "form_entity_test_form_alter", "form_node_form_alter", "entity_form_display_alter",
    "entity_prepare_view", "entity_display_build_alter"
]
