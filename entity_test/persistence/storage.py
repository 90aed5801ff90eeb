"""
Entity Storage - In-Memory Persistence with Transactional Rollback

💾 Hook sequencing, not a storage engine:
The storage keeps a value snapshot per entity and translation, builds a
fresh entity on every load, and exists to call the lifecycle hooks in the
order the host framework does:

    save:   presave -> write -> [update only] translation insert/delete
            -> insert | update
    delete: predelete -> remove -> delete

Every save and delete runs inside a transaction. When any hook raises,
the storage restores its snapshot, resets the entity's identity if it was
being inserted, and raises ``EntityStorageError`` carrying the original
error code. Saves triggered from inside a hook join the outer transaction.
"""

from typing import Any, Dict, Iterable, List, Optional, TYPE_CHECKING
from contextlib import contextmanager
import copy
import logging
import uuid

from ..entities.display import AlterableQuery
from ..entities.entity import TRANSLATION_CREATED, TRANSLATION_REMOVED, ContentEntity
from ..exceptions import EntityStorageError

if TYPE_CHECKING:
    from ..entities.manager import EntityTypeManager

logger = logging.getLogger(__name__)


class StorageTransaction:
    """Snapshot of a storage taken when the outermost transaction starts"""

    def __init__(self, storage: 'EntityStorage'):
        self.transaction_id = str(uuid.uuid4())
        self.entities = dict(storage._entities)
        self.revisions = copy.copy(storage._revisions)
        self.next_id = storage._next_id
        self.next_revision_id = storage._next_revision_id
        self.inserted: List[ContentEntity] = []
        self.is_rolled_back = False

    def restore(self, storage: 'EntityStorage'):
        storage._entities = self.entities
        storage._revisions = self.revisions
        storage._next_id = self.next_id
        storage._next_revision_id = self.next_revision_id
        id_key = storage.entity_type.get_key("id")
        for entity in self.inserted:
            entity.set(id_key, None)
            entity.enforce_is_new(True)
        self.is_rolled_back = True


class EntityStorage:
    """Storage handler for one entity type"""

    def __init__(self, entity_type_id: str, manager: 'EntityTypeManager'):
        self.entity_type_id = entity_type_id
        self.manager = manager
        self.registry = manager.registry
        self.entity_type = manager.get_definition(entity_type_id)

        self._entities: Dict[Any, Dict[str, Any]] = {}
        self._revisions: Dict[int, Dict[str, Any]] = {}
        self._next_id = 1
        self._next_revision_id = 1
        self._transaction: Optional[StorageTransaction] = None
        self._depth = 0

    # Transactions
    @contextmanager
    def transaction(self):
        """Run a block atomically; nested blocks join the outer transaction"""
        outermost = self._transaction is None
        if outermost:
            self._transaction = StorageTransaction(self)
        self._depth += 1
        try:
            yield self._transaction
        except Exception as e:
            if outermost:
                self._transaction.restore(self)
                logger.error(
                    f"Transaction {self._transaction.transaction_id} on {self.entity_type_id} "
                    f"rolled back: {e}"
                )
            if isinstance(e, EntityStorageError) or not outermost:
                raise
            raise EntityStorageError(str(e), code=getattr(e, "code", 0), previous=e) from e
        finally:
            self._depth -= 1
            if outermost:
                self._transaction = None

    def in_transaction(self) -> bool:
        return self._transaction is not None

    # Creation
    def create(self, values: Optional[Dict[str, Any]] = None) -> ContentEntity:
        values = dict(values or {})
        bundle_key = self.entity_type.get_key("bundle")
        bundle = values.get(bundle_key) if bundle_key else None
        fields = self.manager.get_field_definitions(self.entity_type_id, bundle or self.entity_type_id)

        uuid_key = self.entity_type.get_key("uuid")
        if uuid_key and uuid_key in fields and not values.get(uuid_key):
            values[uuid_key] = str(uuid.uuid4())

        entity = ContentEntity(self.entity_type, fields, values)
        self.registry.invoke_entity_hook("create", entity)
        return entity

    def create_translation(self, entity: ContentEntity, langcode: str,
                           values: Optional[Dict[str, Any]] = None) -> ContentEntity:
        """Add a translation and fire the translation create hooks"""
        translation = entity.add_translation(langcode, values)
        self.registry.invoke_entity_hook("translation_create", translation)
        return translation

    # Loading
    def load(self, entity_id: Any) -> Optional[ContentEntity]:
        record = self._entities.get(entity_id)
        return self._build(record) if record is not None else None

    def load_multiple(self, ids: Optional[Iterable[Any]] = None) -> Dict[Any, ContentEntity]:
        if ids is None:
            ids = list(self._entities)
        return {entity_id: self._build(self._entities[entity_id]) for entity_id in ids if entity_id in self._entities}

    def _build(self, record: Dict[str, Any]) -> ContentEntity:
        """Fresh entity from a stored record, with all stored translations"""
        fields = self.manager.get_field_definitions(self.entity_type_id, record["bundle"])
        default_langcode = record["default_langcode"]
        values = copy.deepcopy(record["values"])

        entity = ContentEntity(self.entity_type, fields, values.pop(default_langcode), langcode=default_langcode)
        for langcode, translation_values in values.items():
            entity.add_translation(langcode, translation_values)
        entity.reset_translation_status()
        entity.enforce_is_new(False)
        if self.entity_type.is_revisionable():
            entity.update_loaded_revision_id()
            entity.set_new_revision(False)
        return entity

    def load_revision(self, revision_id: int) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._revisions.get(revision_id))

    def get_revision_ids(self, entity_id: Any) -> List[int]:
        return sorted(
            revision_id for revision_id, record in self._revisions.items()
            if record["id"] == entity_id
        )

    def count(self) -> int:
        return len(self._entities)

    # Saving
    def save(self, entity: ContentEntity) -> Any:
        if entity.entity_type_id != self.entity_type_id:
            raise ValueError(f"Cannot save a {entity.entity_type_id} entity with the {self.entity_type_id} storage")

        entity = entity.get_untranslated()
        if self.entity_type.is_revisionable() and not entity.is_new() and entity.get_loaded_revision_id() is None:
            entity.update_loaded_revision_id()

        with self.transaction() as transaction:
            self.registry.invoke_entity_hook("presave", entity)

            update = not entity.is_new()
            self._do_save(entity, transaction)
            entity.enforce_is_new(False)

            if update and self.entity_type.is_translatable():
                self._invoke_translation_hooks(entity)
            entity.reset_translation_status()

            self.registry.invoke_entity_hook("update" if update else "insert", entity)

            if self.entity_type.is_revisionable():
                entity.update_loaded_revision_id()
                entity.set_new_revision(False)

        logger.debug(f"Saved {self.entity_type_id}:{entity.id()}")
        return entity.id()

    def _do_save(self, entity: ContentEntity, transaction: StorageTransaction):
        id_key = self.entity_type.get_key("id")
        if entity.id() is None:
            entity.set(id_key, self._next_id)
            transaction.inserted.append(entity)
        if isinstance(entity.id(), int):
            self._next_id = max(self._next_id, entity.id() + 1)

        if self.entity_type.is_revisionable():
            if entity.is_new() or entity.is_new_revision() or entity.get_revision_id() is None:
                entity.set(self.entity_type.get_key("revision"), self._next_revision_id)
                self._next_revision_id += 1

        values = {
            langcode: copy.deepcopy(entity.get_translation(langcode).to_dict())
            for langcode in entity.get_translation_languages()
        }
        if self.entity_type.is_revisionable():
            self._revisions[entity.get_revision_id()] = {"id": entity.id(), "values": values}

        # Records are replaced on write and never mutated, so the shallow
        # transaction snapshot restores them.
        self._entities[entity.id()] = {
            "bundle": entity.bundle(),
            "default_langcode": entity.language(),
            "values": copy.deepcopy(values),
        }

    def _invoke_translation_hooks(self, entity: ContentEntity):
        for langcode in entity.translations_by_status(TRANSLATION_CREATED):
            self.registry.invoke_entity_hook("translation_insert", entity.get_translation(langcode))
        for langcode in entity.translations_by_status(TRANSLATION_REMOVED):
            self.registry.invoke_entity_hook("translation_delete", entity.get_translation(langcode))

    # Deleting
    def delete(self, entities: Iterable[ContentEntity]):
        entities = [entity.get_untranslated() for entity in entities]
        if not entities:
            return

        with self.transaction():
            for entity in entities:
                self.registry.invoke_entity_hook("predelete", entity)

            for entity in entities:
                self._entities.pop(entity.id(), None)
                for revision_id in self.get_revision_ids(entity.id()):
                    del self._revisions[revision_id]

            for entity in entities:
                self.registry.invoke_entity_hook("delete", entity)

        logger.debug(f"Deleted {len(entities)} {self.entity_type_id} entities")

    # Queries
    def get_query(self) -> AlterableQuery:
        """A query over this type tagged for access checking"""
        return AlterableQuery(self.entity_type_id, tags=[f"{self.entity_type_id}_access"])

    def execute(self, query: AlterableQuery) -> List[Any]:
        """Run query alter callbacks for each tag, then filter by equality"""
        for tag in sorted(query.get_tags()):
            self.registry.alter("query_alter", query, target=tag)

        ids = []
        for entity_id, entity in self.load_multiple().items():
            if all(self._matches(entity, field, value, operator) for field, value, operator in query.conditions):
                ids.append(entity_id)
        return ids

    @staticmethod
    def _matches(entity: ContentEntity, field: str, value: Any, operator: str) -> bool:
        name = field.rsplit(".", 1)[-1]
        if not entity.has_field(name):
            return False
        actual = entity.get(name).value
        if operator == "=":
            return actual == value
        if operator in ("<>", "!="):
            return actual != value
        raise ValueError(f"Unsupported query operator: {operator}")


# Export main components
__all__ = ["StorageTransaction", "EntityStorage"]
