"""
Bundle helpers for tests.

Bundles of the entity_test types live in the state store under
``<entity_type>.bundles``. These helpers edit that record and notify the
entity type manager so cached bundle info is rebuilt.
"""

from typing import Any, Dict, Optional, TYPE_CHECKING

from ..hooks.entity_types import default_bundles

if TYPE_CHECKING:
    from .manager import EntityTypeManager


def _bundles(manager: 'EntityTypeManager', entity_type: str) -> Dict[str, Dict[str, Any]]:
    return manager.registry.context.state.get(f"{entity_type}.bundles", default_bundles(entity_type))


def create_bundle(manager: 'EntityTypeManager', bundle: str, text: Optional[str] = None,
                  entity_type: str = "entity_test", description: Optional[str] = None):
    """Create a bundle, labelled ``text`` or its machine name"""
    bundles = _bundles(manager, entity_type)
    bundles.setdefault(bundle, {"label": text or bundle, "description": description})
    manager.registry.context.state.set(f"{entity_type}.bundles", bundles)
    manager.on_bundle_create(bundle, entity_type)


def rename_bundle(manager: 'EntityTypeManager', bundle_old: str, bundle_new: str,
                  entity_type: str = "entity_test"):
    bundles = _bundles(manager, entity_type)
    if bundle_old not in bundles:
        raise KeyError(f"Bundle '{bundle_old}' does not exist on {entity_type}")
    bundles[bundle_new] = bundles.pop(bundle_old)
    manager.registry.context.state.set(f"{entity_type}.bundles", bundles)
    manager.on_bundle_rename(bundle_old, bundle_new, entity_type)


def delete_bundle(manager: 'EntityTypeManager', bundle: str, entity_type: str = "entity_test"):
    bundles = _bundles(manager, entity_type)
    bundles.pop(bundle, None)
    manager.registry.context.state.set(f"{entity_type}.bundles", bundles)
    manager.on_bundle_delete(bundle, entity_type)


__all__ = ["create_bundle", "rename_bundle", "delete_bundle"]
