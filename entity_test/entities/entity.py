"""
Content Entities - Field Values, Translations and Revisions

An entity object is a view of shared entity data in one active language.
``get_translation`` returns another view over the same data, so changes
to untranslatable fields are visible from every translation while
translatable fields keep a value per language.
"""

from typing import Any, Dict, List, Optional, Set

from ..access.result import PERMANENT
from ..exceptions import UnknownFieldError
from .definitions import EntityTypeDefinition
from .fields import FieldDefinition, FieldItemList

LANGCODE_NOT_SPECIFIED = "und"

# Translation status values tracked between saves
TRANSLATION_EXISTING = "existing"
TRANSLATION_CREATED = "created"
TRANSLATION_REMOVED = "removed"


class EntityData:
    """State shared by all translations of one entity"""

    def __init__(self, default_langcode: str):
        self.default_langcode = default_langcode
        self.values: Dict[str, Dict[str, FieldItemList]] = {default_langcode: {}}
        self.translation_status: Dict[str, str] = {default_langcode: TRANSLATION_EXISTING}
        self.is_new = True
        self.new_revision = False
        self.loaded_revision_id: Optional[int] = None


class ContentEntity:
    """A fieldable entity bound to its type definition"""

    def __init__(
        self,
        entity_type: EntityTypeDefinition,
        field_definitions: Dict[str, FieldDefinition],
        values: Optional[Dict[str, Any]] = None,
        langcode: Optional[str] = None,
        _data: Optional[EntityData] = None,
    ):
        self.entity_type = entity_type
        self.field_definitions = field_definitions

        if _data is None:
            values = dict(values or {})
            langcode_key = entity_type.get_key("langcode")
            langcode = langcode or values.pop(langcode_key, None) or LANGCODE_NOT_SPECIFIED
            _data = EntityData(langcode)
            self._data = _data
            self.active_langcode = langcode
            if entity_type.revisionable:
                _data.new_revision = True
            if langcode_key and langcode_key in field_definitions:
                self.set(langcode_key, langcode)
            default_key = entity_type.get_key("default_langcode")
            if default_key and default_key in field_definitions:
                self.set(default_key, True)
            bundle_key = entity_type.get_key("bundle")
            if bundle_key and bundle_key in field_definitions and bundle_key not in values:
                values[bundle_key] = entity_type.id
            for name, value in values.items():
                self.set(name, value)
            self._apply_default_values()
        else:
            self._data = _data
            self.active_langcode = langcode or _data.default_langcode

    # Identity
    @property
    def entity_type_id(self) -> str:
        return self.entity_type.id

    def get_entity_type(self) -> EntityTypeDefinition:
        return self.entity_type

    def id(self) -> Any:
        return self.get(self.entity_type.get_key("id")).value

    def uuid(self) -> Optional[str]:
        key = self.entity_type.get_key("uuid")
        return self.get(key).value if key and self.has_field(key) else None

    def bundle(self) -> str:
        key = self.entity_type.get_key("bundle")
        if key and self.has_field(key) and self.get(key).value is not None:
            return self.get(key).value
        return self.entity_type.id

    def label(self) -> Optional[str]:
        key = self.entity_type.get_key("label")
        if key and self.has_field(key):
            return self.get(key).value
        return None

    def is_new(self) -> bool:
        return self._data.is_new

    def enforce_is_new(self, value: bool = True):
        self._data.is_new = value

    # Revisions
    def get_revision_id(self) -> Optional[int]:
        key = self.entity_type.get_key("revision")
        return self.get(key).value if key else None

    def get_loaded_revision_id(self) -> Optional[int]:
        return self._data.loaded_revision_id

    def update_loaded_revision_id(self):
        self._data.loaded_revision_id = self.get_revision_id()

    def is_new_revision(self) -> bool:
        return self._data.new_revision

    def set_new_revision(self, value: bool = True):
        if value and not self.entity_type.is_revisionable():
            raise ValueError(f"Entity type '{self.entity_type_id}' does not support revisions")
        self._data.new_revision = value

    # Fields
    def has_field(self, name: Optional[str]) -> bool:
        return name is not None and name in self.field_definitions

    def get_field_definition(self, name: str) -> FieldDefinition:
        if name not in self.field_definitions:
            raise UnknownFieldError(f"Field '{name}' is unknown on {self.entity_type_id}")
        return self.field_definitions[name]

    def get_field_definitions(self) -> Dict[str, FieldDefinition]:
        return dict(self.field_definitions)

    def _storage_langcode(self, definition: FieldDefinition) -> str:
        if definition.translatable and self.entity_type.is_translatable():
            return self.active_langcode
        return self._data.default_langcode

    def get(self, name: str) -> FieldItemList:
        """Field item list of a field in the active language"""
        definition = self.get_field_definition(name)
        langcode = self._storage_langcode(definition)
        values = self._data.values.setdefault(langcode, {})
        if name not in values:
            owner = self if langcode == self.active_langcode else self.get_translation(langcode)
            values[name] = FieldItemList(definition, owner)
        return values[name]

    def set(self, name: str, value: Any) -> 'ContentEntity':
        self.get(name).set_value(value)
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {name: self.get(name).get_value() for name in self.field_definitions}

    def _apply_default_values(self):
        for name, definition in self.field_definitions.items():
            if definition.default_value_callback and self.get(name).is_empty():
                self.get(name).set_value(definition.get_default_value(self))

    # Translations
    def language(self) -> str:
        return self.active_langcode

    def is_default_translation(self) -> bool:
        return self.active_langcode == self._data.default_langcode

    def get_untranslated(self) -> 'ContentEntity':
        return self.get_translation(self._data.default_langcode)

    def is_translatable(self) -> bool:
        return self.entity_type.is_translatable()

    def has_translation(self, langcode: str) -> bool:
        status = self._data.translation_status.get(langcode)
        return status is not None and status != TRANSLATION_REMOVED

    def get_translation_languages(self, include_default: bool = True) -> List[str]:
        return [
            langcode for langcode in self._data.translation_status
            if self.has_translation(langcode)
            and (include_default or langcode != self._data.default_langcode)
        ]

    def get_translation(self, langcode: str) -> 'ContentEntity':
        if langcode == self.active_langcode:
            return self
        if langcode not in self._data.values:
            raise ValueError(f"Invalid translation language ({langcode}) specified.")
        return ContentEntity(self.entity_type, self.field_definitions, langcode=langcode, _data=self._data)

    def add_translation(self, langcode: str, values: Optional[Dict[str, Any]] = None) -> 'ContentEntity':
        """Add a translation; storage hooks are fired by the entity storage"""
        if not self.is_translatable():
            raise ValueError(f"The {self.entity_type_id} entity type does not support translations.")
        if self.has_translation(langcode):
            raise ValueError(f"The {langcode} translation already exists.")
        if langcode == LANGCODE_NOT_SPECIFIED:
            raise ValueError(f"Invalid translation language ({langcode}) specified.")

        status = self._data.translation_status.get(langcode)
        self._data.translation_status[langcode] = (
            TRANSLATION_EXISTING if status == TRANSLATION_REMOVED else TRANSLATION_CREATED
        )
        self._data.values[langcode] = {}
        translation = ContentEntity(self.entity_type, self.field_definitions, langcode=langcode, _data=self._data)

        langcode_key = self.entity_type.get_key("langcode")
        if langcode_key and self.has_field(langcode_key):
            translation.set(langcode_key, langcode)
        default_key = self.entity_type.get_key("default_langcode")
        if default_key and self.has_field(default_key):
            translation.set(default_key, False)
        for name, value in (values or {}).items():
            translation.set(name, value)
        return translation

    def remove_translation(self, langcode: str):
        if langcode == self._data.default_langcode:
            raise ValueError("The default translation cannot be removed.")
        if not self.has_translation(langcode):
            raise ValueError(f"The specified translation ({langcode}) cannot be removed.")

        # Values of a stored translation are kept until the next save so the
        # translation can still be passed to the translation delete hooks.
        if self._data.translation_status[langcode] == TRANSLATION_CREATED:
            del self._data.translation_status[langcode]
            self._data.values.pop(langcode, None)
        else:
            self._data.translation_status[langcode] = TRANSLATION_REMOVED

    def get_translation_status(self, langcode: str) -> Optional[str]:
        return self._data.translation_status.get(langcode)

    def translations_by_status(self, status: str) -> List[str]:
        return [langcode for langcode, value in self._data.translation_status.items() if value == status]

    def reset_translation_status(self):
        for langcode in self.translations_by_status(TRANSLATION_REMOVED):
            self._data.values.pop(langcode, None)
        self._data.translation_status = {
            langcode: TRANSLATION_EXISTING
            for langcode, status in self._data.translation_status.items()
            if status != TRANSLATION_REMOVED
        }

    # Cacheability
    def get_cache_tags(self) -> Set[str]:
        return {f"{self.entity_type_id}:{self.id()}"}

    def get_cache_contexts(self) -> Set[str]:
        return set()

    def get_cache_max_age(self) -> int:
        return PERMANENT

    def __eq__(self, other):
        return (
            isinstance(other, ContentEntity)
            and other._data is self._data
            and other.active_langcode == self.active_langcode
        )

    def __hash__(self):
        return hash((id(self._data), self.active_langcode))

    def __repr__(self):
        return f"{self.__class__.__name__}({self.entity_type_id}:{self.id()}, {self.active_langcode})"


# Export main components
__all__ = [
    "LANGCODE_NOT_SPECIFIED", "TRANSLATION_EXISTING", "TRANSLATION_CREATED",
    "TRANSLATION_REMOVED", "EntityData", "ContentEntity"
]
