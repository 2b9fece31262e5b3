from __future__ import annotations

from civisync.domain.fields import (
    CustomFieldCache,
    CustomGroupCache,
    FieldDescriptor,
    GroupNameIndex,
)
from tests.support.entity_store import FakeEntityStore


def _store() -> FakeEntityStore:
    store = FakeEntityStore()
    store.add("CustomGroup", id=1, name="plone_group")
    store.add("CustomField", id=20, name="is_plone_group", custom_group_id="1", data_type="Boolean")
    return store


def test_field_descriptor_from_record_keeps_attributes() -> None:
    descriptor = FieldDescriptor.from_record(
        {"id": "20", "name": "is_plone_group", "custom_group_id": "1", "data_type": "Boolean"}
    )

    assert descriptor == FieldDescriptor(id=20, name="is_plone_group", custom_group_id=1)
    assert descriptor.key == "custom_20"
    assert descriptor.attributes["data_type"] == "Boolean"


def test_field_cache_remembers_misses() -> None:
    store = _store()
    cache = CustomFieldCache(store)

    cache.warm([20, 21])

    assert 21 in cache
    assert cache.get(21) is None
    field = cache.get(20)
    assert field is not None
    assert field.name == "is_plone_group"
    assert len(store.calls_for("CustomField")) == 1


def test_field_cache_only_loads_uncached_ids() -> None:
    store = _store()
    cache = CustomFieldCache(store)

    cache.warm([20])
    cache.warm([20, 21, 21])

    assert store.calls_for("CustomField") == [{"id": {"IN": [20]}}, {"id": {"IN": [21]}}]


def test_field_cache_invalidate_single_id() -> None:
    store = _store()
    cache = CustomFieldCache(store)
    cache.warm([20, 21])
    store.add("CustomField", id=21, name="plone_title", custom_group_id="1")

    cache.invalidate(21)

    field = cache.get(21)
    assert field is not None
    assert field.name == "plone_title"
    assert 20 in cache


def test_group_cache_indexes_fields_by_name_and_id() -> None:
    store = _store()
    cache = CustomGroupCache(store)

    fields = cache.get("plone_group")

    assert fields.get("is_plone_group") == fields.get(20)
    assert cache.find("plone_group", "is_plone_group") is not None
    assert cache.find("plone_group", "missing") is None
    assert "plone_group" in cache
    assert len(store.calls_for("CustomField")) == 1


def test_group_cache_keeps_unknown_groups_empty() -> None:
    store = _store()
    cache = CustomGroupCache(store)

    assert cache.find("missing_group", "field") is None
    assert cache.find("missing_group", "other") is None
    assert len(store.calls_for("CustomField")) == 1

    cache.invalidate("missing_group")
    assert "missing_group" not in cache


def test_group_name_index_loads_once() -> None:
    store = _store()
    index = GroupNameIndex(store)

    assert index.get(1) == "plone_group"
    assert index.get(2) is None
    assert index.names() == ["plone_group"]
    assert len(store.calls_for("CustomGroup")) == 1

    index.invalidate()
    index.names()
    assert len(store.calls_for("CustomGroup")) == 2
