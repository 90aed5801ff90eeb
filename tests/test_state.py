"""
State store behaviour.
"""

from entity_test.persistence.state import StateStore


class TestStateStore:
    def test_default_for_missing_key(self):
        store = StateStore()
        assert store.get("missing") is None
        assert store.get("missing", 5) == 5

    def test_values_are_copied(self):
        store = StateStore()
        value = {"nested": [1]}
        store.set("key", value)
        value["nested"].append(2)
        store.get("key")["nested"].append(3)
        assert store.get("key") == {"nested": [1]}

    def test_write_count(self):
        store = StateStore({"key": 1})
        store.set("key", 2)
        assert store.write_count("key") == 2
        assert store.write_count("other") == 0

    def test_multiple(self):
        store = StateStore()
        store.set_multiple({"a": 1, "b": 2})
        assert store.get_multiple(["a", "b", "c"]) == {"a": 1, "b": 2}
        store.delete_multiple(["a"])
        assert list(store) == ["b"]

    def test_delete_and_reset(self):
        store = StateStore({"a": 1, "b": 2})
        assert store.delete("a")
        assert not store.delete("a")
        assert "b" in store and len(store) == 1
        store.reset()
        assert store.to_dict() == {}

    def test_kernels_do_not_share_state(self, make_kernel):
        first = make_kernel({"entity_test_new": True})
        second = make_kernel()
        assert first.state.get("entity_test_new") is True
        assert not second.state.has("entity_test_new")
