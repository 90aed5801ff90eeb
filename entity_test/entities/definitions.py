"""
Entity Type Definitions - The Test Fixture Variants

🎯 One entity type per storage capability combination:
Each variant exercises a different combination of translation and
revision support so that tests can check the host behaves the same across
all of them.

    entity_test                    plain
    entity_test_mul                multilingual
    entity_test_mul_langcode_key   multilingual, custom language keys
    entity_test_mul_changed        multilingual, tracks changed time
    entity_test_rev                revisionable
    entity_test_mulrev             multilingual and revisionable
    entity_test_mulrev_changed     multilingual, revisionable, changed time
    entity_test_with_bundle        bundles stored as config entities
    entity_test_new                only registered when enabled in state

The host also provides ``user`` and ``node`` so that callbacks touching
foreign entity types have something to act on.
"""

from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from ..infrastructure.configuration import PROVIDER
from .fields import CARDINALITY_UNLIMITED, FieldDefinition

# Filters for entity_test_entity_types()
TYPES_REVISABLE = 1
TYPES_MULTILINGUAL = 2


class EntityTypeDefinition(BaseModel):
    """Descriptor of an entity type"""

    model_config = ConfigDict(validate_assignment=True)

    id: str
    label: str = ""
    provider: str = PROVIDER
    entity_keys: Dict[str, str] = Field(default_factory=dict)
    translatable: bool = False
    revisionable: bool = False
    tracks_changes: bool = False
    bundle_entity_type: Optional[str] = None
    admin_permission: Optional[str] = None

    def get_key(self, key: str) -> Optional[str]:
        return self.entity_keys.get(key)

    def has_key(self, key: str) -> bool:
        return bool(self.entity_keys.get(key))

    def is_translatable(self) -> bool:
        return self.translatable

    def is_revisionable(self) -> bool:
        return self.revisionable and self.has_key("revision")


def _keys(langcode: str = "langcode", default_langcode: Optional[str] = None,
          revision: Optional[str] = None, label: str = "name", bundle: str = "type") -> Dict[str, str]:
    keys = {
        "id": "id",
        "uuid": "uuid",
        "bundle": bundle,
        "label": label,
        "langcode": langcode,
    }
    if default_langcode:
        keys["default_langcode"] = default_langcode
    if revision:
        keys["revision"] = revision
    return keys


def entity_test_entity_types(filter: Optional[int] = None) -> List[str]:
    """
    Ids of the module's entity types that share the test entity schema.

    ``TYPES_REVISABLE`` limits the list to revisionable-capable types and
    ``TYPES_MULTILINGUAL`` to multilingual-capable ones.
    """
    types = ["entity_test"]
    if filter != TYPES_REVISABLE:
        types += ["entity_test_mul", "entity_test_mul_langcode_key", "entity_test_mul_changed"]
    if filter != TYPES_MULTILINGUAL:
        types.append("entity_test_rev")
    types += ["entity_test_mulrev", "entity_test_mulrev_changed"]
    return types


def build_entity_types() -> Dict[str, EntityTypeDefinition]:
    """Definitions provided by this module, before alteration"""
    admin = "administer entity_test content"
    definitions = [
        EntityTypeDefinition(
            id="entity_test", label="Test entity",
            entity_keys=_keys(), admin_permission=admin
        ),
        EntityTypeDefinition(
            id="entity_test_mul", label="Test entity - data table",
            entity_keys=_keys(default_langcode="default_langcode"),
            translatable=True, admin_permission=admin
        ),
        EntityTypeDefinition(
            id="entity_test_mul_langcode_key", label="Test entity - data table - langcode key",
            entity_keys=_keys(langcode="custom_langcode_key", default_langcode="custom_default_langcode_key"),
            translatable=True, admin_permission=admin
        ),
        EntityTypeDefinition(
            id="entity_test_mul_changed", label="Test entity - data table - changed",
            entity_keys=_keys(default_langcode="default_langcode"),
            translatable=True, tracks_changes=True, admin_permission=admin
        ),
        EntityTypeDefinition(
            id="entity_test_rev", label="Test entity - revisions",
            entity_keys=_keys(revision="revision_id"),
            revisionable=True, admin_permission=admin
        ),
        EntityTypeDefinition(
            id="entity_test_mulrev", label="Test entity - revisions and data table",
            entity_keys=_keys(default_langcode="default_langcode", revision="revision_id"),
            translatable=True, revisionable=True, admin_permission=admin
        ),
        EntityTypeDefinition(
            id="entity_test_mulrev_changed", label="Test entity - revisions and data table - changed",
            entity_keys=_keys(default_langcode="default_langcode", revision="revision_id"),
            translatable=True, revisionable=True, tracks_changes=True, admin_permission=admin
        ),
        EntityTypeDefinition(
            id="entity_test_with_bundle", label="Test entity with bundle",
            entity_keys=_keys(), bundle_entity_type="entity_test_bundle", admin_permission=admin
        ),
        EntityTypeDefinition(
            id="entity_test_new", label="New test entity",
            entity_keys=_keys(), admin_permission=admin
        ),
    ]
    return {definition.id: definition for definition in definitions}


def host_entity_types() -> Dict[str, EntityTypeDefinition]:
    """Definitions owned by other providers"""
    return {
        "user": EntityTypeDefinition(
            id="user", label="User", provider="user",
            entity_keys={"id": "uid", "uuid": "uuid", "label": "name", "langcode": "langcode"}
        ),
        "node": EntityTypeDefinition(
            id="node", label="Content", provider="node",
            entity_keys=dict(
                _keys(default_langcode="default_langcode", revision="vid", label="title"), id="nid"
            ),
            translatable=True, revisionable=True
        ),
    }


def base_field_definitions(definition: EntityTypeDefinition) -> Dict[str, FieldDefinition]:
    """Base fields every entity of the given type carries"""
    keys = definition.entity_keys
    fields: Dict[str, FieldDefinition] = {}

    fields[keys["id"]] = FieldDefinition.create("integer", keys["id"], label="ID")
    if keys.get("uuid"):
        fields[keys["uuid"]] = FieldDefinition.create("uuid", keys["uuid"], label="UUID")
    if keys.get("revision"):
        fields[keys["revision"]] = FieldDefinition.create("integer", keys["revision"], label="Revision ID")
    if keys.get("langcode"):
        fields[keys["langcode"]] = FieldDefinition.create(
            "language", keys["langcode"], label="Language", translatable=True,
            revisionable=definition.revisionable
        )
    if keys.get("default_langcode"):
        fields[keys["default_langcode"]] = FieldDefinition.create(
            "boolean", keys["default_langcode"], label="Default translation", translatable=True,
            revisionable=definition.revisionable
        )
    if keys.get("bundle"):
        fields[keys["bundle"]] = FieldDefinition.create("string", keys["bundle"], label="Type", required=True)

    label_key = keys.get("label")
    if label_key:
        fields[label_key] = FieldDefinition.create(
            "string", label_key, label="Name", translatable=True,
            revisionable=definition.revisionable, settings={"max_length": 32}
        )

    if definition.provider == PROVIDER:
        fields["user_id"] = FieldDefinition.create(
            "entity_reference", "user_id", label="User ID", translatable=True,
            revisionable=definition.revisionable, target_entity_type_id="user"
        )
        fields["created"] = FieldDefinition.create(
            "created", "created", label="Authored on", translatable=True,
            revisionable=definition.revisionable
        )
        if definition.tracks_changes:
            fields["changed"] = FieldDefinition.create(
                "changed", "changed", label="Changed", translatable=True,
                revisionable=definition.revisionable
            )
        if definition.revisionable:
            fields["non_rev_field"] = FieldDefinition.create(
                "string", "non_rev_field", label="Non Revisionable Field", translatable=True
            )
    elif definition.id == "node":
        fields["status"] = FieldDefinition.create(
            "boolean", "status", label="Published", translatable=True, revisionable=True
        )
        fields["uid"] = FieldDefinition.create(
            "entity_reference", "uid", label="Authored by", translatable=True,
            revisionable=True, target_entity_type_id="user"
        )

    return fields


# Export main components
__all__ = [
    "TYPES_REVISABLE", "TYPES_MULTILINGUAL", "CARDINALITY_UNLIMITED",
    "EntityTypeDefinition", "entity_test_entity_types", "build_entity_types",
    "host_entity_types", "base_field_definitions"
]
