"""Tests for the content and mapping tables."""

import json

import pytest
from pydantic import ValidationError

from content_mapper.errors import ContentNotFoundError
from content_mapper.models import WriteStatus
from content_mapper.store import ContentStore


class TestContent:
    def test_set_and_get(self, store):
        assert store.set_content(1, "a") is WriteStatus.APPLIED
        assert store.get(1) == "a"
        assert 1 in store
        assert len(store) == 1

    def test_identical_write_is_unchanged(self, store):
        store.set_content(1, "a")
        assert store.set_content(1, "a", overwrite=False) is WriteStatus.UNCHANGED

    def test_conflict_without_overwrite(self, store):
        store.set_content(5, "a")
        assert store.set_content(5, "b", overwrite=False) is WriteStatus.CONFLICT
        assert store.get(5) == "a"

    def test_overwrite_replaces(self, store):
        store.set_content(5, "a")
        assert store.set_content(5, "b", overwrite=True) is WriteStatus.APPLIED
        assert store.get(5) == "b"

    def test_missing_key(self, store):
        with pytest.raises(ContentNotFoundError):
            store.get(42)
        with pytest.raises(KeyError):
            store.get(42)

    @pytest.mark.parametrize("key", [-1, True, "1", 1.5])
    def test_rejects_invalid_keys(self, store, key):
        with pytest.raises(ValueError):
            store.set_content(key, "x")

    def test_rejects_non_string_values(self, store):
        with pytest.raises(ValueError):
            store.set_content(1, 2)

    def test_views_are_read_only(self, store):
        store.set_content(1, "a")
        with pytest.raises(TypeError):
            store.content[2] = "b"
        with pytest.raises(TypeError):
            store.mappings["x"] = 1

    def test_max_key(self, store):
        assert store.max_key() is None
        store.set_content(3, "c")
        store.set_content(1, "a")
        assert store.max_key() == 3


class TestMappings:
    def test_dangling_reference_is_rejected(self, store):
        assert store.set_mapping("x", 99) is WriteStatus.DANGLING_REFERENCE
        assert not store.has_slot("x")

    def test_single_and_list_references(self, store):
        store.set_content(1, "a")
        store.set_content(2, "b")
        assert store.set_mapping("one", 1) is WriteStatus.APPLIED
        assert store.set_mapping("many", [1, 2]) is WriteStatus.APPLIED
        assert store.resolve("one") == "a"
        assert store.resolve("many") == ["a", "b"]

    def test_list_with_one_missing_key_is_dangling(self, store):
        store.set_content(1, "a")
        assert store.set_mapping("many", [1, 2]) is WriteStatus.DANGLING_REFERENCE

    def test_conflict_and_unchanged(self, store):
        store.set_content(1, "a")
        store.set_content(2, "b")
        store.set_mapping("x", 1)
        assert store.set_mapping("x", 1, overwrite=False) is WriteStatus.UNCHANGED
        assert store.set_mapping("x", 2, overwrite=False) is WriteStatus.CONFLICT
        assert store.mappings["x"] == 1

    def test_slot_keys_must_be_strings(self, store):
        store.set_content(1, "a")
        with pytest.raises(ValueError):
            store.set_mapping(1, 1)

    def test_key_iteration(self, store):
        store.set_content(1, "a")
        store.set_content(2, "b")
        store.set_mapping("x", 2)
        assert list(store.content_keys()) == [1, 2]
        assert list(store.slot_keys()) == ["x"]


class TestAtomic:
    def test_rolls_back_on_error(self, store):
        store.set_content(1, "a")
        view = store.content
        with pytest.raises(RuntimeError):
            with store.atomic():
                store.set_content(2, "b")
                store.set_mapping("x", 2)
                raise RuntimeError("boom")
        assert dict(view) == {1: "a"}
        assert dict(store.mappings) == {}

    def test_keeps_writes_on_success(self, store):
        with store.atomic():
            store.set_content(1, "a")
        assert store.get(1) == "a"


class TestDocument:
    def test_to_document(self, store):
        store.set_content(1, "a")
        store.set_mapping("s", [1])
        assert store.to_document() == {"content": {1: "a"}, "mappings": {"s": [1]}}

    def test_json_document_restores_integer_keys(self, store):
        store.set_content(1, "a")
        store.set_content(2, "b")
        store.set_mapping("s", 2)
        payload = json.loads(store.to_json())
        assert payload["content"] == {"1": "a", "2": "b"}
        restored = ContentStore.from_document(payload)
        assert dict(restored.content) == {1: "a", 2: "b"}
        assert restored.resolve("s") == "b"

    def test_dangling_document_is_rejected(self):
        with pytest.raises(ValidationError):
            ContentStore.from_document({"content": {"1": "a"}, "mappings": {"s": 2}})
