"""
Field Definitions and Field Values

A field definition describes one property of an entity type; a field item
list holds the values of that field on one entity translation. Field item
lists know their owning entity so that access results can depend on it.
"""

from typing import Any, Callable, Dict, Iterator, List, Optional, TYPE_CHECKING
from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from .entity import ContentEntity

CARDINALITY_UNLIMITED = -1


class FieldDefinition(BaseModel):
    """
    Definition of a base or configurable field.

    Setters return the definition so alteration callbacks can chain them
    the same way definitions are declared.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=True)

    name: str
    type: str
    label: str = ""
    description: str = ""
    translatable: bool = False
    revisionable: bool = False
    cardinality: int = 1
    required: bool = False
    provider: Optional[str] = None
    target_entity_type_id: Optional[str] = None
    settings: Dict[str, Any] = Field(default_factory=dict)
    default_value_callback: Optional[Callable[..., List[Dict[str, Any]]]] = None

    @classmethod
    def create(cls, field_type: str, name: str = "", **kwargs) -> 'FieldDefinition':
        return cls(type=field_type, name=name, **kwargs)

    def set_name(self, name: str) -> 'FieldDefinition':
        self.name = name
        return self

    def set_label(self, label: str) -> 'FieldDefinition':
        self.label = label
        return self

    def set_description(self, description: str) -> 'FieldDefinition':
        self.description = description
        return self

    def set_translatable(self, translatable: bool) -> 'FieldDefinition':
        self.translatable = translatable
        return self

    def set_revisionable(self, revisionable: bool) -> 'FieldDefinition':
        self.revisionable = revisionable
        return self

    def set_cardinality(self, cardinality: int) -> 'FieldDefinition':
        if cardinality != CARDINALITY_UNLIMITED and cardinality < 1:
            raise ValueError(f"Invalid cardinality: {cardinality}")
        self.cardinality = cardinality
        return self

    def set_setting(self, name: str, value: Any) -> 'FieldDefinition':
        self.settings[name] = value
        return self

    def set_default_value_callback(self, callback: Callable) -> 'FieldDefinition':
        self.default_value_callback = callback
        return self

    def is_multiple(self) -> bool:
        return self.cardinality == CARDINALITY_UNLIMITED or self.cardinality > 1

    def get_default_value(self, entity: 'ContentEntity') -> List[Dict[str, Any]]:
        if self.default_value_callback is None:
            return []
        return self.default_value_callback(entity, self)


class FieldItem:
    """One value of a field; render attributes are collected alongside"""

    def __init__(self, values: Dict[str, Any]):
        self.values = dict(values)
        self.attributes: Dict[str, Any] = {}

    @property
    def value(self) -> Any:
        return self.values.get("value")

    def __repr__(self):
        return f"FieldItem({self.values})"


class FieldItemList:
    """Values of one field on one entity translation"""

    def __init__(self, definition: FieldDefinition, entity: 'ContentEntity', items: Optional[List[FieldItem]] = None):
        self.definition = definition
        self._entity = entity
        self._items: List[FieldItem] = items or []
        self.attributes: Dict[str, Any] = {}

    @staticmethod
    def normalize(value: Any) -> List[Dict[str, Any]]:
        """Accept a scalar, an item dict or a list of either"""
        if value is None:
            return []
        if not isinstance(value, list):
            value = [value]
        return [item if isinstance(item, dict) else {"value": item} for item in value]

    def set_value(self, value: Any):
        items = self.normalize(value)
        cardinality = self.definition.cardinality
        if cardinality != CARDINALITY_UNLIMITED and len(items) > cardinality:
            raise ValueError(
                f"Field '{self.definition.name}' accepts at most {cardinality} value(s), got {len(items)}"
            )
        self._items = [FieldItem(item) for item in items]

    def get_value(self) -> List[Dict[str, Any]]:
        return [dict(item.values) for item in self._items]

    @property
    def value(self) -> Any:
        """The main property of the first item"""
        return self._items[0].value if self._items else None

    def get_entity(self) -> 'ContentEntity':
        return self._entity

    def is_empty(self) -> bool:
        return not self._items

    def __iter__(self) -> Iterator[FieldItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, delta: int) -> FieldItem:
        return self._items[delta]

    def __repr__(self):
        return f"FieldItemList({self.definition.name}={self.get_value()})"


def field_default_value(entity: 'ContentEntity', definition: FieldDefinition) -> List[Dict[str, Any]]:
    """Default value callback: the field name suffixed with the entity language"""
    return [{"value": f"{definition.name}_{entity.language()}"}]


# Export main components
__all__ = [
    "CARDINALITY_UNLIMITED", "FieldDefinition", "FieldItem", "FieldItemList",
    "field_default_value"
]
