"""
Entity forms - build, alter, validate.

🧩 Form build pipeline:
An entity form is a plain nested dict. Building one collects the altered
form display, adds a widget per visible component, then runs the form
alter callbacks: generic ones first, then those registered for the base
form id, then those registered for the concrete form id. Submitting runs
the validation handlers collected on the form or on the triggering button.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple, TYPE_CHECKING
import logging

from .entity import ContentEntity

if TYPE_CHECKING:
    from .manager import EntityTypeManager

logger = logging.getLogger(__name__)

FormValidator = Callable[[Dict[str, Any], 'FormState'], None]


class FormState:
    """Per-request state of a form being built and submitted"""

    def __init__(self, entity: Optional[ContentEntity] = None, langcode: Optional[str] = None,
                 operation: str = "default"):
        self.entity = entity
        self.operation = operation
        self.langcode = langcode
        self.values: Dict[str, Any] = {}
        self.errors: Dict[str, str] = {}
        self.submitted = False

    def get_form_langcode(self) -> Optional[str]:
        """Language the form is built in; defaults to the entity language"""
        if self.langcode:
            return self.langcode
        return self.entity.language() if self.entity is not None else None

    def set_value(self, name: str, value: Any):
        self.values[name] = value

    def get_value(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)

    def set_error(self, name: str, message: str):
        self.errors[name] = message

    def has_errors(self) -> bool:
        return bool(self.errors)


def form_ids(entity: ContentEntity, operation: str = "default") -> Tuple[str, str]:
    """Base form id and form id of an entity form"""
    base_form_id = f"{entity.entity_type_id}_form"
    if operation == "default":
        return base_form_id, base_form_id
    return base_form_id, f"{entity.entity_type_id}_{operation}_form"


class EntityFormBuilder:
    """Builds entity forms and runs their validation handlers"""

    def __init__(self, manager: 'EntityTypeManager'):
        self.manager = manager

    @property
    def registry(self):
        return self.manager.registry

    def get_form(self, entity: ContentEntity, operation: str = "default", form_mode: str = "default",
                 langcode: Optional[str] = None) -> Tuple[Dict[str, Any], FormState]:
        form_state = FormState(entity, langcode=langcode, operation=operation)
        base_form_id, form_id = form_ids(entity, operation)

        display = self.manager.collect_form_display(entity, form_mode)
        form: Dict[str, Any] = {
            "#form_id": form_id,
            "#base_form_id": base_form_id,
            "#entity": entity,
            "#form_display": display,
            "#validate": [],
            "actions": {"submit": {"#type": "submit", "#value": "Save", "#validate": []}},
        }

        for name, options in sorted(display.get_components().items(), key=lambda c: c[1].get("weight", 0)):
            if not entity.has_field(name):
                continue
            form[name] = {
                "#type": "widget",
                "#default_value": entity.get(name).get_value(),
                "#weight": options.get("weight", 0),
                "#settings": dict(options.get("settings", {})),
            }

        self.registry.alter("form_alter", form, form_state, form_id)
        self.registry.alter("form_alter", form, form_state, form_id, target=base_form_id, include_generic=False)
        if form_id != base_form_id:
            self.registry.alter("form_alter", form, form_state, form_id, target=form_id, include_generic=False)

        logger.debug(f"Built form {form_id} for {entity.entity_type_id}")
        return form, form_state

    def submit(self, form: Dict[str, Any], form_state: FormState,
               values: Optional[Dict[str, Any]] = None, button: str = "submit") -> FormState:
        """Run validation; button-level handlers replace the form-level ones"""
        for name, value in (values or {}).items():
            form_state.set_value(name, value)

        validators: List[FormValidator] = form["actions"][button]["#validate"] or form["#validate"]
        for validator in validators:
            validator(form, form_state)

        form_state.submitted = not form_state.has_errors()
        return form_state


__all__ = ["FormState", "FormValidator", "EntityFormBuilder", "form_ids"]
