"""
Form alteration, form display alteration and view building.
"""

import pytest

from entity_test.entities.fields import FieldDefinition
from entity_test.entities.forms import form_ids


@pytest.fixture
def form_builder(manager):
    return manager.get_form_builder()


@pytest.fixture
def view_builder(manager):
    return manager.get_view_builder()


class TestFormIds:
    def test_default_operation(self, storage):
        assert form_ids(storage.create({})) == ("entity_test_form", "entity_test_form")

    def test_named_operation(self, storage):
        assert form_ids(storage.create({}), "delete") == ("entity_test_form", "entity_test_delete_form")


class TestFormValidation:
    def test_no_handlers_without_state(self, form_builder, storage):
        form, _ = form_builder.get_form(storage.create({"name": "x"}))
        assert form["#validate"] == []
        assert form["actions"]["submit"]["#validate"] == []

    def test_form_level(self, context, form_builder, storage):
        context.state.set("entity_test.form.validate.test", "form-level")
        form, form_state = form_builder.get_form(storage.create({"name": "x"}))
        assert len(form["#validate"]) == 2

        form_builder.submit(form, form_state)
        assert form["#entity_test_form_validate"] is True
        assert context.state.get("entity_test.form.validate.result") is True
        assert form_state.submitted

    def test_button_level(self, context, form_builder, storage):
        context.state.set("entity_test.form.validate.test", "button-level")
        form, form_state = form_builder.get_form(storage.create({"name": "x"}))
        assert form["#validate"] == []
        assert len(form["actions"]["submit"]["#validate"]) == 1

        form_builder.submit(form, form_state)
        assert form["#entity_test_form_validate"] is True
        assert context.state.get("entity_test.form.validate.result") is None

    def test_other_forms_untouched(self, kernel, context, form_builder):
        context.state.set("entity_test.form.validate.test", "form-level")
        form, _ = form_builder.get_form(kernel.storage("entity_test_mul").create({"name": "x"}))
        assert form["#validate"] == []

    def test_errors_block_submission(self, form_builder, storage):
        form, form_state = form_builder.get_form(storage.create({"name": "x"}))
        form["#validate"].append(lambda form, form_state: form_state.set_error("name", "Bad name"))
        assert not form_builder.submit(form, form_state).submitted


class TestNodeFormLangcode:
    def test_records_requested_langcode(self, kernel, context, form_builder):
        node = kernel.storage("node").create({"title": "n", "langcode": "en"})
        form_builder.get_form(node, langcode="fr")
        assert context.state.get("entity_test.form_langcode") == "fr"

    def test_defaults_to_entity_language(self, kernel, context, form_builder):
        node = kernel.storage("node").create({"title": "n", "langcode": "es"})
        form_builder.get_form(node)
        assert context.state.get("entity_test.form_langcode") == "es"


class TestFormDisplayAlter:
    def test_text_widget_size(self, form_builder, storage, field_test_text):
        form, _ = form_builder.get_form(storage.create({"name": "x"}))
        assert form["field_test_text"]["#settings"]["size"] == 42

    def test_stored_display_is_not_changed(self, manager, storage, field_test_text):
        entity = storage.create({"name": "x"})
        manager.collect_form_display(entity)
        assert "settings" not in manager.get_form_display("entity_test", "entity_test").get_component("field_test_text")

    def test_other_types_untouched(self, kernel, form_builder, manager):
        manager.add_field("entity_test_mul", FieldDefinition.create("text", "field_test_text"))
        form, _ = form_builder.get_form(kernel.storage("entity_test_mul").create({"name": "x"}))
        assert "size" not in form["field_test_text"]["#settings"]


class TestViewBuilding:
    def test_prepare_view_marks_text_items(self, storage, view_builder, field_test_text):
        entity = storage.create({"name": "x", "field_test_text": "shown"})
        storage.save(entity)
        build = view_builder.view(entity)
        assert build["field_test_text"]["#items"][0]["#attributes"] == {"data-field-item-attr": "foobar"}

    def test_prepare_view_respects_hidden_component(self, manager, storage, view_builder, field_test_text):
        entity = storage.create({"name": "x", "field_test_text": "hidden"})
        storage.save(entity)
        manager.get_view_display("entity_test", "entity_test", "full").remove_component("field_test_text")
        view_builder.view(entity)
        assert entity.get("field_test_text")[0].attributes == {}

    def test_prepare_view_marks_daterange_items(self, manager, storage, view_builder):
        manager.add_field("entity_test", FieldDefinition.create("daterange", "field_dates"))
        entity = storage.create({"name": "x", "field_dates": {"value": "2024-01-01", "end_value": "2024-01-02"}})
        storage.save(entity)
        build = view_builder.view(entity)
        assert build["field_dates"]["#items"][0]["#attributes"]["data-field-item-attr"] == "foobar"

    def test_display_build_alter_bundle(self, storage, view_builder):
        entity = storage.create({"type": "display_build_alter_bundle", "name": "x"})
        storage.save(entity)
        build = view_builder.view(entity)
        assert build["entity_display_build_alter"]["#markup"] == (
            f"Content added in hook_entity_display_build_alter for entity id {entity.id()}"
        )

    def test_other_bundles_not_altered(self, storage, view_builder):
        entity = storage.create({"name": "x"})
        storage.save(entity)
        build = view_builder.view(entity)
        assert "entity_display_build_alter" not in build
        assert build["#cache"]["tags"] == [f"entity_test:{entity.id()}"]

    def test_view_multiple_empty(self, view_builder):
        assert view_builder.view_multiple([]) == []
