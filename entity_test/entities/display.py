"""
Entity displays and alterable entity queries.

A display maps field names to component options for one entity type,
bundle and mode. An alterable query collects conditions and tags so that
query-alter callbacks can restrict it before the host executes it.
"""

from typing import Any, Dict, List, Optional, Set, Tuple
import copy


class EntityDisplay:
    """Component configuration of an entity form or view display"""

    def __init__(self, entity_type_id: str, bundle: str, mode: str = "default",
                 components: Optional[Dict[str, Dict[str, Any]]] = None):
        self.entity_type_id = entity_type_id
        self.bundle = bundle
        self.mode = mode
        self._components: Dict[str, Dict[str, Any]] = copy.deepcopy(components or {})
        self._hidden: Set[str] = set()

    def get_component(self, name: str) -> Optional[Dict[str, Any]]:
        """Options of a visible component, or None when hidden or absent"""
        if name not in self._components:
            return None
        return copy.deepcopy(self._components[name])

    def set_component(self, name: str, options: Optional[Dict[str, Any]] = None) -> 'EntityDisplay':
        self._components[name] = copy.deepcopy(options or {})
        self._hidden.discard(name)
        return self

    def remove_component(self, name: str) -> 'EntityDisplay':
        self._components.pop(name, None)
        self._hidden.add(name)
        return self

    def get_components(self) -> Dict[str, Dict[str, Any]]:
        return copy.deepcopy(self._components)


class EntityFormDisplay(EntityDisplay):
    pass


class EntityViewDisplay(EntityDisplay):
    pass


class AlterableQuery:
    """Minimal select query carrying tags and equality conditions"""

    def __init__(self, base_table: str, tags: Optional[List[str]] = None):
        self.base_table = base_table
        self._tags: Set[str] = set(tags or [])
        self.conditions: List[Tuple[str, Any, str]] = []

    def get_tags(self) -> Set[str]:
        return set(self._tags)

    def condition(self, field: str, value: Any, operator: str = "=") -> 'AlterableQuery':
        self.conditions.append((field, value, operator))
        return self


__all__ = ["EntityDisplay", "EntityFormDisplay", "EntityViewDisplay", "AlterableQuery"]
