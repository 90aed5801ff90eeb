"""
Entity Type Manager - Definitions, Fields, Bundles and Handlers

🏗️ Host-side registry of entity types:
Collects the module's entity type definitions together with the host's
own, lets the alteration callbacks reshape them once, and caches the
result. Field definitions, bundle info, view/form modes and extra fields
are derived the same way: built, passed through their hooks, cached, and
invalidated when bundles change.
"""

from typing import Any, Dict, Optional, TYPE_CHECKING
import copy
import logging

from ..exceptions import UnknownEntityTypeError
from .definitions import EntityTypeDefinition, base_field_definitions, build_entity_types, host_entity_types
from .display import EntityFormDisplay, EntityViewDisplay
from .fields import FieldDefinition
from .forms import EntityFormBuilder
from .view_builder import EntityViewBuilder

if TYPE_CHECKING:
    from ..access.control_handler import EntityAccessControlHandler
    from ..hooks.registry import HookRegistry
    from ..persistence.storage import EntityStorage

logger = logging.getLogger(__name__)


class EntityTypeManager:
    """
    Owns altered entity type definitions and per-type handlers.

    Definitions are built lazily on first access: the module's variants
    and the host types are collected, then ``entity_type_alter`` runs once.
    """

    def __init__(self, registry: 'HookRegistry',
                 definitions: Optional[Dict[str, EntityTypeDefinition]] = None,
                 include_host_types: bool = True):
        self.registry = registry
        self._initial = definitions
        self._include_host_types = include_host_types

        self._definitions: Optional[Dict[str, EntityTypeDefinition]] = None
        self._base_fields: Dict[str, Dict[str, FieldDefinition]] = {}
        self._configurable_fields: Dict[str, Dict[str, Dict[str, FieldDefinition]]] = {}
        self._bundle_info: Optional[Dict[str, Dict[str, Dict[str, Any]]]] = None
        self._view_modes: Optional[Dict[str, Dict[str, Dict[str, Any]]]] = None
        self._form_modes: Optional[Dict[str, Dict[str, Dict[str, Any]]]] = None
        self._extra_fields: Optional[Dict[str, Any]] = None

        self._form_displays: Dict[tuple, EntityFormDisplay] = {}
        self._view_displays: Dict[tuple, EntityViewDisplay] = {}
        self._storages: Dict[str, 'EntityStorage'] = {}
        self._access_handlers: Dict[str, 'EntityAccessControlHandler'] = {}

        registry.context.entity_type_manager = self

    # Entity types
    def get_definitions(self) -> Dict[str, EntityTypeDefinition]:
        if self._definitions is None:
            definitions = copy.deepcopy(self._initial) if self._initial is not None else build_entity_types()
            if self._include_host_types:
                for entity_type_id, definition in host_entity_types().items():
                    definitions.setdefault(entity_type_id, definition)

            self.registry.alter("entity_type_alter", definitions)
            self._definitions = definitions
            logger.info(f"Entity types initialized: {', '.join(sorted(definitions))}")
        return self._definitions

    def get_definition(self, entity_type_id: str, exception_on_invalid: bool = True) -> Optional[EntityTypeDefinition]:
        definition = self.get_definitions().get(entity_type_id)
        if definition is None and exception_on_invalid:
            raise UnknownEntityTypeError(f"The \"{entity_type_id}\" entity type does not exist.")
        return definition

    def has_definition(self, entity_type_id: str) -> bool:
        return entity_type_id in self.get_definitions()

    def clear_cached_definitions(self):
        self._definitions = None
        self._base_fields.clear()
        self._bundle_info = None
        self._view_modes = None
        self._form_modes = None
        self._extra_fields = None
        self._storages.clear()
        self._access_handlers.clear()

    # Fields
    def get_base_field_definitions(self, entity_type_id: str) -> Dict[str, FieldDefinition]:
        if entity_type_id not in self._base_fields:
            definition = self.get_definition(entity_type_id)
            fields = base_field_definitions(definition)

            for module, provided in self.registry.invoke_all_keyed("entity_base_field_info", definition).items():
                for name, field in provided.items():
                    field.name = field.name or name
                    field.provider = field.provider or module
                    fields[name] = field

            self.registry.alter("entity_base_field_info_alter", fields, definition)
            self._base_fields[entity_type_id] = fields
        return dict(self._base_fields[entity_type_id])

    def add_field(self, entity_type_id: str, field: FieldDefinition, bundle: Optional[str] = None):
        """Attach a configurable field to one bundle, or every bundle when None"""
        self.get_definition(entity_type_id)
        bundles = self._configurable_fields.setdefault(entity_type_id, {})
        bundles.setdefault(bundle or "*", {})[field.name] = field

    def remove_field(self, entity_type_id: str, field_name: str, bundle: Optional[str] = None) -> bool:
        fields = self._configurable_fields.get(entity_type_id, {}).get(bundle or "*", {})
        return fields.pop(field_name, None) is not None

    def get_field_definitions(self, entity_type_id: str, bundle: Optional[str] = None) -> Dict[str, FieldDefinition]:
        fields = self.get_base_field_definitions(entity_type_id)
        configurable = self._configurable_fields.get(entity_type_id, {})
        fields.update(configurable.get("*", {}))
        if bundle:
            fields.update(configurable.get(bundle, {}))
        return fields

    # Bundles
    def get_all_bundle_info(self) -> Dict[str, Dict[str, Dict[str, Any]]]:
        if self._bundle_info is None:
            info = self.registry.invoke_all_merged("entity_bundle_info")
            for entity_type_id, definition in self.get_definitions().items():
                if not info.get(entity_type_id) and not definition.bundle_entity_type:
                    info[entity_type_id] = {entity_type_id: {"label": definition.label}}
            self.registry.alter("entity_bundle_info_alter", info)
            self._bundle_info = info
        return copy.deepcopy(self._bundle_info)

    def get_bundle_info(self, entity_type_id: str) -> Dict[str, Dict[str, Any]]:
        return self.get_all_bundle_info().get(entity_type_id, {})

    def clear_cached_bundles(self):
        self._bundle_info = None
        self._extra_fields = None

    def _clear_displays(self, entity_type_id: str, bundle: str):
        for displays in (self._form_displays, self._view_displays):
            for key in [key for key in displays if key[:2] == (entity_type_id, bundle)]:
                del displays[key]

    def on_bundle_create(self, bundle: str, entity_type_id: str):
        self.clear_cached_bundles()
        self._base_fields.pop(entity_type_id, None)
        logger.info(f"Bundle created: {entity_type_id}.{bundle}")
        self.registry.invoke_all("entity_bundle_create", entity_type_id, bundle)

    def on_bundle_rename(self, bundle_old: str, bundle_new: str, entity_type_id: str):
        self.clear_cached_bundles()
        self._clear_displays(entity_type_id, bundle_old)
        configurable = self._configurable_fields.get(entity_type_id, {})
        if bundle_old in configurable:
            configurable[bundle_new] = configurable.pop(bundle_old)
        logger.info(f"Bundle renamed: {entity_type_id}.{bundle_old} -> {bundle_new}")
        self.registry.invoke_all("entity_bundle_rename", entity_type_id, bundle_old, bundle_new)

    def on_bundle_delete(self, bundle: str, entity_type_id: str):
        self.clear_cached_bundles()
        self._clear_displays(entity_type_id, bundle)
        self._configurable_fields.get(entity_type_id, {}).pop(bundle, None)
        logger.info(f"Bundle deleted: {entity_type_id}.{bundle}")
        self.registry.invoke_all("entity_bundle_delete", entity_type_id, bundle)

    # Modes and extra fields
    def get_view_modes(self, entity_type_id: Optional[str] = None) -> Dict[str, Any]:
        if self._view_modes is None:
            self._view_modes = {}
            self.registry.alter("entity_view_mode_info", self._view_modes)
        modes = copy.deepcopy(self._view_modes)
        return modes.get(entity_type_id, {}) if entity_type_id else modes

    def get_form_modes(self, entity_type_id: Optional[str] = None) -> Dict[str, Any]:
        if self._form_modes is None:
            self._form_modes = {}
            self.registry.alter("entity_form_mode_info", self._form_modes)
        modes = copy.deepcopy(self._form_modes)
        return modes.get(entity_type_id, {}) if entity_type_id else modes

    def get_extra_fields(self, entity_type_id: str, bundle: str) -> Dict[str, Any]:
        if self._extra_fields is None:
            extra = self.registry.invoke_all_merged("entity_extra_field_info")
            self.registry.alter("entity_extra_field_info_alter", extra)
            self._extra_fields = extra
        return copy.deepcopy(self._extra_fields.get(entity_type_id, {}).get(bundle, {}))

    # Displays
    def get_form_display(self, entity_type_id: str, bundle: str, mode: str = "default") -> EntityFormDisplay:
        key = (entity_type_id, bundle, mode)
        if key not in self._form_displays:
            components = {name: {"weight": weight} for weight, name in
                          enumerate(self.get_field_definitions(entity_type_id, bundle))}
            self._form_displays[key] = EntityFormDisplay(entity_type_id, bundle, mode, components)
        return self._form_displays[key]

    def collect_form_display(self, entity, mode: str = "default") -> EntityFormDisplay:
        """A copy of the form display for an entity, after alteration"""
        display = copy.deepcopy(self.get_form_display(entity.entity_type_id, entity.bundle(), mode))
        context = {"entity_type": entity.entity_type_id, "bundle": entity.bundle(), "form_mode": mode}
        self.registry.alter("entity_form_display_alter", display, context)
        return display

    def get_view_display(self, entity_type_id: str, bundle: str, mode: str = "default") -> EntityViewDisplay:
        key = (entity_type_id, bundle, mode)
        if key not in self._view_displays:
            components = {name: {"weight": weight} for weight, name in
                          enumerate(self.get_field_definitions(entity_type_id, bundle))}
            self._view_displays[key] = EntityViewDisplay(entity_type_id, bundle, mode, components)
        return self._view_displays[key]

    # Handlers
    def get_storage(self, entity_type_id: str) -> 'EntityStorage':
        if entity_type_id not in self._storages:
            from ..persistence.storage import EntityStorage
            self._storages[entity_type_id] = EntityStorage(entity_type_id, self)
        return self._storages[entity_type_id]

    def get_access_control_handler(self, entity_type_id: str) -> 'EntityAccessControlHandler':
        if entity_type_id not in self._access_handlers:
            from ..access.control_handler import handler_for
            self._access_handlers[entity_type_id] = handler_for(self.get_definition(entity_type_id), self.registry)
        return self._access_handlers[entity_type_id]

    def get_form_builder(self) -> EntityFormBuilder:
        return EntityFormBuilder(self)

    def get_view_builder(self) -> EntityViewBuilder:
        return EntityViewBuilder(self)


# Export main components
__all__ = ["EntityTypeManager"]
