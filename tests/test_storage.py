"""
Entity storage: hook sequencing, injected failures and rollback.
"""

import pytest

from entity_test.exceptions import EntityStorageError, HookError
from entity_test.hooks.lifecycle import HOOKS_STATE_KEY


@pytest.fixture
def calls(registry):
    """Record the order entity hooks run in"""
    seen = []
    for hook in ("presave", "insert", "update", "predelete", "delete"):
        registry.register(hook, lambda context, entity, hook=hook: seen.append(hook), module="recorder")
    return seen


class TestSaveAndDelete:
    def test_insert_assigns_id_and_clears_new_flag(self, storage, calls):
        entity = storage.create({"name": "first"})
        assert entity.is_new()
        assert storage.save(entity) == 1
        assert not entity.is_new()
        loaded = storage.load(1)
        assert loaded is not entity
        assert loaded.label() == "first"
        assert calls == ["presave", "insert"]

    def test_second_save_is_an_update(self, storage, calls):
        entity = storage.create({"name": "first"})
        storage.save(entity)
        storage.save(entity)
        assert calls == ["presave", "insert", "presave", "update"]

    def test_delete_runs_predelete_then_delete(self, storage, calls):
        entity = storage.create({"name": "gone"})
        storage.save(entity)
        storage.delete([entity])
        assert storage.count() == 0
        assert calls[-2:] == ["predelete", "delete"]

    def test_uuid_is_generated(self, storage):
        assert storage.create({"name": "x"}).uuid()

    def test_wrong_storage_rejected(self, kernel, storage):
        node = kernel.storage("node").create({"title": "n"})
        with pytest.raises(ValueError):
            storage.save(node)

    def test_load_returns_stored_values_not_pending_changes(self, storage):
        entity = storage.create({"name": "stored"})
        storage.save(entity)
        entity.set("name", "unsaved")

        assert storage.load(entity.id()).label() == "stored"
        assert storage.execute(storage.get_query().condition("name", "unsaved")) == []

    def test_loaded_entity_is_not_new(self, storage):
        storage.save(storage.create({"name": "x"}))
        loaded = storage.load_multiple([1])[1]
        assert not loaded.is_new()
        assert loaded.uuid()

    def test_loaded_entity_carries_translations(self, kernel):
        storage = kernel.storage("entity_test_mul")
        entity = storage.create({"langcode": "en", "name": "hello"})
        entity.add_translation("de", {"name": "hallo"})
        storage.save(entity)

        loaded = storage.load(entity.id())
        assert loaded.language() == "en"
        assert loaded.get_translation("de").label() == "hallo"
        assert loaded.get_translation_status("de") == "existing"


class TestInjectedFailures:
    def test_presave_exception_aborts_save(self, settings, storage):
        settings.throw_exception = True
        entity = storage.create({"name": "doomed"})

        with pytest.raises(EntityStorageError) as excinfo:
            storage.save(entity)

        assert excinfo.value.code == 1
        assert isinstance(excinfo.value.previous, HookError)
        assert isinstance(excinfo.value.__cause__, HookError)
        assert storage.count() == 0
        assert entity.is_new()

    def test_predelete_exception_aborts_delete(self, settings, storage):
        entity = storage.create({"name": "survivor"})
        storage.save(entity)
        settings.throw_exception = True

        with pytest.raises(EntityStorageError) as excinfo:
            storage.delete([entity])

        assert excinfo.value.code == 2
        assert storage.load(entity.id()).label() == "survivor"

    def test_fail_insert_rolls_back(self, storage):
        entity = storage.create({"name": "fail_insert"})

        with pytest.raises(EntityStorageError, match="Test exception rollback."):
            storage.save(entity)

        assert storage.count() == 0
        assert entity.id() is None
        assert entity.is_new()

    def test_failed_update_restores_stored_values(self, settings, storage):
        entity = storage.create({"name": "before"})
        storage.save(entity)
        entity.set("name", "after")
        settings.throw_exception = True

        with pytest.raises(EntityStorageError):
            storage.save(entity)

        settings.throw_exception = False
        assert storage.load(entity.id()).label() == "before"

    def test_storage_usable_after_rollback(self, storage):
        storage.create({"name": "fail_insert"})
        with pytest.raises(EntityStorageError):
            storage.save(storage.create({"name": "fail_insert"}))

        entity = storage.create({"name": "fine"})
        assert storage.save(entity) == 1
        assert not storage.in_transaction()

    def test_fail_insert_only_applies_to_entity_test(self, kernel):
        rev_storage = kernel.storage("entity_test_rev")
        entity = rev_storage.create({"name": "fail_insert"})
        rev_storage.save(entity)
        assert rev_storage.count() == 1


class TestRevisions:
    def test_loaded_revision_id_follows_save(self, kernel):
        storage = kernel.storage("entity_test_rev")
        entity = storage.create({"name": "rev"})
        storage.save(entity)
        assert entity.get_loaded_revision_id() == entity.get_revision_id() == 1

        entity.set_new_revision(True)
        storage.save(entity)
        assert entity.get_revision_id() == 2
        assert storage.get_revision_ids(entity.id()) == [1, 2]
        assert storage.load_revision(1)["id"] == entity.id()

    def test_resave_in_insert_hook_keeps_single_revision(self, kernel):
        storage = kernel.storage("entity_test_mulrev")
        entity = storage.create({"name": "EntityLoadedRevisionTest"})
        storage.save(entity)

        assert storage.get_revision_ids(entity.id()) == [entity.get_revision_id()]
        assert entity.get_loaded_revision_id() == entity.get_revision_id()
        assert kernel.state.get("entity_test.loadedRevisionId") == entity.get_loaded_revision_id()

    def test_loaded_revision_id_set_before_presave(self, kernel, registry):
        storage = kernel.storage("entity_test_rev")
        entity = storage.create({"id": 5, "revision_id": 3, "name": "existing"})
        entity.enforce_is_new(False)
        assert entity.get_loaded_revision_id() is None

        seen = []
        registry.register("presave", lambda context, e: seen.append(e.get_loaded_revision_id()), module="recorder")
        storage.save(entity)
        assert seen == [3]

    def test_update_records_loaded_revision_id(self, kernel):
        storage = kernel.storage("entity_test_mulrev")
        entity = storage.create({"name": "tracked"})
        storage.save(entity)
        storage.save(entity)
        assert kernel.state.get("entity_test.loadedRevisionId") == entity.get_revision_id()


class TestTranslationHooksOnSave:
    def test_insert_of_new_entity_fires_no_translation_hooks(self, kernel):
        storage = kernel.storage("entity_test_mul")
        entity = storage.create({"langcode": "en", "name": "hello"})
        entity.add_translation("de", {"name": "hallo"})
        storage.save(entity)
        assert not (kernel.state.get(HOOKS_STATE_KEY) or {}).get("entity_test_mul_translation_insert")
