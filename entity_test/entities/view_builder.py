"""
Entity view builder.

Renders entities to nested build dicts: the view displays are resolved
per bundle, ``entity_prepare_view`` callbacks may decorate field items,
then each build passes through ``entity_display_build_alter``.
"""

from typing import Any, Dict, List, TYPE_CHECKING

from .display import EntityViewDisplay
from .entity import ContentEntity

if TYPE_CHECKING:
    from .manager import EntityTypeManager


class EntityViewBuilder:
    def __init__(self, manager: 'EntityTypeManager'):
        self.manager = manager

    def view(self, entity: ContentEntity, view_mode: str = "full") -> Dict[str, Any]:
        return self.view_multiple([entity], view_mode)[0]

    def view_multiple(self, entities: List[ContentEntity], view_mode: str = "full") -> List[Dict[str, Any]]:
        if not entities:
            return []

        entity_type_id = entities[0].entity_type_id
        displays: Dict[str, EntityViewDisplay] = {}
        for entity in entities:
            bundle = entity.bundle()
            if bundle not in displays:
                displays[bundle] = self.manager.get_view_display(entity_type_id, bundle, view_mode)

        self.manager.registry.invoke_all("entity_prepare_view", entity_type_id, entities, displays, view_mode)

        builds = []
        for entity in entities:
            display = displays[entity.bundle()]
            build = self._build(entity, display, view_mode)
            self.manager.registry.alter(
                "entity_display_build_alter", build,
                {"entity": entity, "view_mode": view_mode, "display": display}
            )
            builds.append(build)
        return builds

    def _build(self, entity: ContentEntity, display: EntityViewDisplay, view_mode: str) -> Dict[str, Any]:
        build: Dict[str, Any] = {
            "#entity_type": entity.entity_type_id,
            "#entity": entity,
            "#view_mode": view_mode,
            "#cache": {
                "tags": sorted(entity.get_cache_tags()),
                "max-age": entity.get_cache_max_age(),
            },
        }
        for name, options in display.get_components().items():
            if not entity.has_field(name):
                continue
            items = entity.get(name)
            build[name] = {
                "#field_name": name,
                "#weight": options.get("weight", 0),
                "#attributes": dict(items.attributes),
                "#items": [
                    {"value": item.value, "#attributes": dict(item.attributes)}
                    for item in items
                ],
            }
        return build


__all__ = ["EntityViewBuilder"]
