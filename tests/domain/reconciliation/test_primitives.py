from __future__ import annotations

import logging

import pytest

from civisync.domain.reconciliation import (
    AmbiguousMatch,
    EntityOperations,
    NoMatch,
    SingleMatch,
    values_differ,
)
from civisync.domain.reconciliation.primitives import is_numeric
from civisync.domain.specs import EntityRequest
from tests.support.entity_store import FakeEntityStore


def _request(spec: dict[str, object]) -> EntityRequest:
    return EntityRequest.from_spec(spec)


def test_identify_without_match_creates_record_without_directives() -> None:
    store = FakeEntityStore()
    operations = EntityOperations(store)
    request = _request({"_lookup": ["name"], "name": "A", "title": "Alpha"})

    match = operations.identify("OptionGroup", request)
    assert isinstance(match, NoMatch)

    created = operations.create("OptionGroup", request)

    assert store.create_calls == [("OptionGroup", {"name": "A", "title": "Alpha"})]
    assert created["id"] == 1
    assert store.get_calls == [("OptionGroup", {"name": "A"}, 2)]


def test_update_sends_only_differing_fields() -> None:
    store = FakeEntityStore()
    store.add("OptionGroup", id=7, name="A", title="Alpha")
    operations = EntityOperations(store)
    request = _request({"_lookup": ["name"], "name": "A", "title": "Beta"})

    match = operations.identify("OptionGroup", request)
    assert isinstance(match, SingleMatch)
    operations.update("OptionGroup", request, match.record)

    assert store.create_calls == [("OptionGroup", {"id": 7, "title": "Beta"})]


def test_identify_returns_existing_record_untouched() -> None:
    store = FakeEntityStore()
    existing = store.add("OptionGroup", id=3, name="A", title="Alpha")
    operations = EntityOperations(store)

    match = operations.identify("OptionGroup", _request({"_lookup": ["name"], "name": "A"}))

    assert isinstance(match, SingleMatch)
    assert match.record == existing
    assert store.create_calls == []


def test_ambiguous_lookup_is_reported_and_logged(caplog: pytest.LogCaptureFixture) -> None:
    store = FakeEntityStore()
    store.add("OptionValue", name="dup", label="One")
    store.add("OptionValue", name="dup", label="Two")
    store.add("OptionValue", name="dup", label="Three")
    operations = EntityOperations(store)

    with caplog.at_level(logging.ERROR):
        match = operations.identify("OptionValue", _request({"_lookup": ["name"], "name": "dup"}))

    assert isinstance(match, AmbiguousMatch)
    assert match.selector == {"name": "dup"}
    assert match.count == 2
    assert store.create_calls == []
    assert '"name": "dup"' in caplog.text


def test_empty_lookup_is_no_match_without_store_query() -> None:
    store = FakeEntityStore()
    store.add("Contact", display_name="Someone")
    operations = EntityOperations(store)

    match = operations.identify("Contact", _request({"display_name": "Someone"}))

    assert isinstance(match, NoMatch)
    assert store.get_calls == []


def test_update_without_difference_issues_no_call() -> None:
    store = FakeEntityStore()
    current = store.add("CustomField", id=5, name="code", is_active="1", weight="10")
    operations = EntityOperations(store)
    request = _request({"_lookup": ["name"], "name": "code", "is_active": True, "weight": 10})

    result = operations.update("CustomField", request, current)

    assert result is None
    assert store.create_calls == []


def test_forced_update_without_difference_sends_id_and_always_included_fields() -> None:
    store = FakeEntityStore()
    current = store.add("CustomGroup", id=9, name="g", title="G", style="Inline", weight="1")
    operations = EntityOperations(store)
    request = _request({"_lookup": ["name"], "name": "g", "title": "G"})

    operations.update(
        "CustomGroup",
        request,
        current,
        always_include=("title", "style", "is_active"),
        force=True,
    )

    assert store.create_calls == [("CustomGroup", {"id": 9, "title": "G", "style": "Inline"})]


def test_update_stages_fields_missing_from_current_record() -> None:
    store = FakeEntityStore()
    current = store.add("OptionValue", id=4, name="x")
    operations = EntityOperations(store)

    operations.update("OptionValue", _request({"name": "x", "label": "X"}), current)

    assert store.create_calls == [("OptionValue", {"id": 4, "label": "X"})]


def test_lookup_option_value_returns_value_or_none() -> None:
    store = FakeEntityStore()
    group = store.add("OptionGroup", name="activity_type")
    store.add("OptionValue", option_group_id=group["id"], name="Meeting", value="1")
    operations = EntityOperations(store)

    assert operations.lookup_option_value("activity_type", "Meeting") == "1"
    assert operations.lookup_option_value("activity_type", "Phone Call") is None


@pytest.mark.parametrize(
    ("requested", "current", "differ"),
    [
        (1, "1", False),
        (True, "1", False),
        (False, "0", False),
        ("1.0", "1", False),
        (None, "", False),
        ("Alpha", "Alpha", False),
        ("Alpha", "Beta", True),
        (2, "1", True),
        ("\x011\x012\x01", "\x011\x01", True),
    ],
)
def test_values_differ_compares_loosely(requested: object, current: object, differ: bool) -> None:
    assert values_differ(requested, current) is differ


@pytest.mark.parametrize(
    ("value", "numeric"),
    [
        (5, True),
        (2.5, True),
        ("12", True),
        (" 7 ", True),
        ("1e3", True),
        ("nan", False),
        ("inf", False),
        ("Infinity", False),
        (float("nan"), False),
        (True, False),
        ("Meeting", False),
        ("", False),
        (None, False),
    ],
)
def test_is_numeric_accepts_finite_numbers_only(value: object, numeric: bool) -> None:
    assert is_numeric(value) is numeric
