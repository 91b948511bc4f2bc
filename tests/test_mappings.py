"""Tests for the strategy registry and value coercion."""

import pytest

from content_mapper.mappings import common
from content_mapper.mappings.registry import STRATEGIES, lookup


def test_registry_covers_nine_strategies():
    assert sorted(STRATEGIES) == list(range(1, 10))
    assert lookup(0) is None
    assert lookup(True) is None


@pytest.mark.parametrize(
    "number,required",
    [
        (1, ("id_path", "value_path")),
        (2, ("value_path",)),
        (3, ("id_path", "slot_path")),
        (4, ("id_path",)),
        (5, ("id_path",)),
        (6, ("id_path", "slot_path", "value_path")),
        (7, ("slot_path", "value_path")),
        (8, ("id_path", "value_path")),
        (9, ("value_path",)),
    ],
)
def test_required_paths(number, required):
    assert STRATEGIES[number].required_paths == required


def test_content_key_coercion():
    assert common.content_key(3) == 3
    assert common.content_key("12") == 12
    assert common.content_key(4.0) == 4
    for bad in (-1, True, "abc", 1.5, None, {"id": 1}):
        with pytest.raises(ValueError):
            common.content_key(bad)


def test_content_ref_accepts_lists():
    assert common.content_ref([1, "2"]) == [1, 2]
    with pytest.raises(ValueError):
        common.content_ref([])


def test_slot_key_coercion():
    assert common.slot_key(7) == "7"
    assert common.slot_key("home") == "home"
    for bad in ("  ", None, [1], {"a": 1}):
        with pytest.raises(ValueError):
            common.slot_key(bad)
