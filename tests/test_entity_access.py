"""
Entity, create, field and query access through the host handlers.
"""

import pytest

from entity_test.access.account import Account
from entity_test.access.control_handler import EntityAccessControlHandler, EntityTestAccessControlHandler
from entity_test.access.result import PERMANENT, UNCACHEABLE, AccessResult
from entity_test.hooks import access as access_hooks


def saved(storage, **values):
    entity = storage.create(values)
    storage.save(entity)
    return entity


class TestEntityAccessCallback:
    def test_foreign_entities_are_neutral(self, kernel, context, viewer):
        node = kernel.storage("node").create({"title": "A node"})
        result = access_hooks.entity_access(context, node, "view", viewer)
        assert result.is_neutral()
        assert not context.state.get("entity_test_entity_access")

    def test_forbid_access_label_is_allowed_by_callback(self, context, storage, viewer):
        entity = saved(storage, name="forbid_access")
        assert access_hooks.entity_access(context, entity, "view", viewer).is_allowed()
        assert context.state.get("entity_test_entity_access") is True

    @pytest.mark.parametrize("label, allowed", [("Accessible", True), ("Inaccessible", False)])
    def test_fixed_labels(self, context, storage, viewer, label, allowed):
        entity = saved(storage, name=label)
        result = access_hooks.entity_access(context, entity, "update", viewer)
        assert result.is_allowed() is allowed
        assert result.is_forbidden() is not allowed

    def test_state_lookup_defaults_to_forbidden_and_uncacheable(self, context, storage, viewer):
        entity = saved(storage, name="plain")
        result = access_hooks.entity_access(context, entity, "view", viewer)
        assert result.is_forbidden()
        assert result.get_cache_max_age() == UNCACHEABLE

    def test_state_lookup_grants_per_operation_and_id(self, context, storage, viewer):
        entity = saved(storage, name="plain")
        context.state.set(f"entity_test_entity_access.view.{entity.id()}", True)
        assert access_hooks.entity_access(context, entity, "view", viewer).is_allowed()
        assert access_hooks.entity_access(context, entity, "delete", viewer).is_forbidden()


class TestAccessControlHandler:
    def test_handler_classes_follow_provider(self, manager):
        assert isinstance(manager.get_access_control_handler("entity_test_mul"), EntityTestAccessControlHandler)
        assert type(manager.get_access_control_handler("node")) is EntityAccessControlHandler

    def test_type_specific_rule_denies_forbid_access(self, manager, storage, administrator):
        entity = saved(storage, name="forbid_access")
        handler = manager.get_access_control_handler("entity_test")
        result = handler.access(entity, "view", administrator, return_as_object=True)
        assert result.is_forbidden()
        assert handler.access(entity, "view", administrator) is False

    def test_generic_and_specific_callbacks_both_run(self, context, manager, storage, viewer):
        entity = saved(storage, name="Accessible")
        handler = manager.get_access_control_handler("entity_test")
        assert handler.access(entity, "view", viewer)
        assert context.state.get("entity_test_entity_access") is True
        assert context.state.get("entity_test_entity_test_access") is True

    def test_inaccessible_beats_permission(self, manager, storage, administrator):
        entity = saved(storage, name="Inaccessible")
        handler = manager.get_access_control_handler("entity_test")
        assert not handler.access(entity, "update", administrator)

    def test_current_account_is_used_by_default(self, kernel, manager, storage, administrator):
        entity = saved(storage, name="Accessible")
        handler = manager.get_access_control_handler("entity_test")
        kernel.set_current_account(administrator)
        assert handler.access(entity, "delete")

    def test_create_access_records_context(self, context, manager, administrator):
        handler = manager.get_access_control_handler("entity_test")
        assert handler.create_access("entity_test", administrator)
        assert context.state.get("entity_test_entity_create_access") is True
        assert context.state.get("entity_test_entity_test_create_access") is True
        assert context.state.get("entity_test_entity_create_access_context") == {
            "entity_type_id": "entity_test", "langcode": "und"
        }

    def test_create_access_needs_admin_permission(self, manager, viewer):
        handler = manager.get_access_control_handler("entity_test")
        assert handler.create_access(account=viewer) is False


class TestFieldAccess:
    @pytest.fixture
    def handler(self, manager, field_test_text):
        return manager.get_access_control_handler("entity_test")

    def field_items(self, storage, value):
        entity = saved(storage, name="fielded", field_test_text=value)
        return entity.get("field_test_text")

    @pytest.mark.parametrize("operation", ["view", "edit"])
    def test_no_access_value(self, handler, storage, field_test_text, viewer, operation):
        items = self.field_items(storage, "no access value")
        result = handler.field_access(operation, field_test_text, viewer, items, return_as_object=True)
        assert result.is_forbidden()
        assert f"entity_test:{items.get_entity().id()}" in result.get_cache_tags()

    def test_custom_cache_tag(self, handler, storage, field_test_text, viewer):
        items = self.field_items(storage, "custom cache tag value")
        result = handler.field_access("view", field_test_text, viewer, items, return_as_object=True)
        assert result.is_allowed()
        assert "entity_test_access:field_test_text" in result.get_cache_tags()

    def test_no_edit_access_value(self, context, storage, field_test_text, viewer):
        items = self.field_items(storage, "no edit access value")
        assert access_hooks.entity_field_access(context, "edit", field_test_text, viewer, items).is_forbidden()
        assert access_hooks.entity_field_access(context, "view", field_test_text, viewer, items).is_neutral()

    def test_alter_forbids_and_keeps_metadata(self, context, storage, field_test_text, viewer):
        items = self.field_items(storage, "access alter value")
        original = AccessResult.allowed().add_cache_tags(["original"]).set_cache_max_age(300)
        grants = {":default": original}
        access_hooks.entity_field_access_alter(
            context, grants, {"operation": "view", "field_definition": field_test_text, "items": items}
        )
        altered = grants[":default"]
        assert altered.is_forbidden()
        assert {"original", f"entity_test:{items.get_entity().id()}"} <= altered.get_cache_tags()
        assert altered.get_cache_max_age() == 300

    def test_alter_value_through_handler(self, handler, storage, field_test_text, viewer):
        items = self.field_items(storage, "access alter value")
        assert handler.field_access("view", field_test_text, viewer, items) is False

    def test_ordinary_value_falls_through(self, handler, storage, field_test_text, viewer):
        items = self.field_items(storage, "anything else")
        result = handler.field_access("view", field_test_text, viewer, items, return_as_object=True)
        assert result.is_allowed()
        assert result.get_cache_max_age() == PERMANENT

    def test_views_field_gating(self, context, manager, viewer):
        context.state.set("views_field_access_test-field", "name")
        handler = manager.get_access_control_handler("entity_test")
        name = manager.get_base_field_definitions("entity_test")["name"]

        denied = handler.field_access("view", name, viewer, return_as_object=True)
        assert denied.is_forbidden()

        privileged = Account(uid=5, permissions=["view test entity field"])
        granted = handler.field_access("view", name, privileged, return_as_object=True)
        assert granted.is_allowed()
        assert "user.permissions" in granted.get_cache_contexts()


class TestQueryAccess:
    @pytest.fixture
    def entities(self, storage):
        return [saved(storage, name="published entity"), saved(storage, name="draft entity")]

    def test_query_untouched_without_flag(self, storage, entities):
        assert len(storage.execute(storage.get_query())) == 2

    def test_restricted_without_permission(self, context, storage, entities):
        context.state.set("entity_test_query_access", True)
        assert storage.execute(storage.get_query()) == [entities[0].id()]

    def test_permission_lifts_restriction(self, kernel, context, storage, entities):
        context.state.set("entity_test_query_access", True)
        kernel.set_current_account(Account(uid=9, permissions=["view all entity_test_query_access entities"]))
        assert len(storage.execute(storage.get_query())) == 2
