"""
QueryOptions validation and find() keyword construction.
"""
from collections import OrderedDict

import pytest

from docmapper import DEFAULT_LIMIT, InvalidArgumentError, QueryOptions
from docmapper.stores import UNLIMITED


def test_defaults():
    options = QueryOptions.build()

    assert options.filter == {}
    assert options.sort is None
    assert options.limit == DEFAULT_LIMIT == 20


def test_zero_limit_means_unlimited():
    assert QueryOptions.build(limit=0).limit == UNLIMITED


def test_filter_is_copied():
    raw = {"name": "a"}
    options = QueryOptions.build(raw)
    raw["name"] = "b"

    assert options.filter == {"name": "a"}


def test_sort_pairs_keep_order():
    options = QueryOptions.build(sort=[("b", -1), ("a", 1)])

    assert options.sort == [("b", -1), ("a", 1)]


def test_sort_mapping_keeps_order():
    options = QueryOptions.build(sort=OrderedDict([("b", 1), ("a", -1)]))

    assert options.sort == [("b", 1), ("a", -1)]


def test_sort_index_kind_is_accepted():
    assert QueryOptions.build(sort=[("score", "text")]).sort == [("score", "text")]


@pytest.mark.parametrize("sort", [
    "name",
    [("name",)],
    [("", 1)],
    [(1, 1)],
    [("name", 0)],
    [("name", True)],
])
def test_invalid_sort(sort):
    with pytest.raises(InvalidArgumentError):
        QueryOptions.build(sort=sort)


@pytest.mark.parametrize("limit", [-1, 1.5, "10", True])
def test_invalid_limit(limit):
    with pytest.raises(InvalidArgumentError):
        QueryOptions.build(limit=limit)


def test_invalid_filter():
    with pytest.raises(InvalidArgumentError):
        QueryOptions.build(filter=[("name", "a")])


def test_invalid_argument_is_a_value_error():
    with pytest.raises(ValueError):
        QueryOptions.build(limit=-5)


def test_find_kwargs_without_sort():
    assert QueryOptions.build({"a": 1}).to_find_kwargs() == {"filter": {"a": 1}, "limit": DEFAULT_LIMIT}


def test_find_kwargs_with_sort():
    kwargs = QueryOptions.build(sort={"a": 1}, limit=5).to_find_kwargs()

    assert kwargs == {"filter": {}, "limit": 5, "sort": [("a", 1)]}


def test_options_are_immutable():
    options = QueryOptions.build()

    with pytest.raises(AttributeError):
        options.limit = 5
