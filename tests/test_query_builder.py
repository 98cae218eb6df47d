import pytest

from docstore.projection import Projection
from docstore.query_ast import ResultOrdering, field, fields, where
from docstore.query_builder import (
    build_filter,
    build_projection,
    build_query_parts,
    build_sort,
    build_update,
)
from docstore.updates import Update


def test_single_comparison():
    assert build_filter(fields.name == "a") == {"name": {"$eq": "a"}}


@pytest.mark.parametrize(
    ("comparison", "expected"),
    [
        (fields.age != 3, {"age": {"$ne": 3}}),
        (fields.age > 3, {"age": {"$gt": 3}}),
        (fields.age >= 3, {"age": {"$gte": 3}}),
        (fields.age < 3, {"age": {"$lt": 3}}),
        (fields.age <= 3, {"age": {"$lte": 3}}),
        (fields.status.in_(("open", "held")), {"status": {"$in": ["open", "held"]}}),
        (fields.status.not_in(["closed"]), {"status": {"$nin": ["closed"]}}),
        (fields.email.exists(), {"email": {"$exists": True}}),
        (fields.email.not_exists(), {"email": {"$exists": False}}),
    ],
)
def test_comparison_operators(comparison, expected):
    assert build_filter(comparison) == expected


def test_dotted_paths():
    assert build_filter(field("address.city") == "Oslo") == {"address.city": {"$eq": "Oslo"}}
    assert build_filter(fields["address.city"] == "Oslo") == {"address.city": {"$eq": "Oslo"}}


def test_field_to_field_comparison():
    assert build_filter(fields.spent > fields.budget) == {"$expr": {"$gt": ["$spent", "$budget"]}}


def test_where_joins_with_and():
    query = where(fields.age > 18, fields.city == "Oslo")
    assert build_filter(query) == {"$and": [{"age": {"$gt": 18}}, {"city": {"$eq": "Oslo"}}]}


def test_and_binds_tighter_than_or():
    query = (fields.a == 1).and_(fields.b == 2).or_(fields.c == 3)
    assert build_filter(query) == {
        "$or": [
            {"$and": [{"a": {"$eq": 1}}, {"b": {"$eq": 2}}]},
            {"c": {"$eq": 3}},
        ]
    }

    query = (fields.a == 1).or_(fields.b == 2).and_(fields.c == 3)
    assert build_filter(query) == {
        "$or": [
            {"a": {"$eq": 1}},
            {"$and": [{"b": {"$eq": 2}}, {"c": {"$eq": 3}}]},
        ]
    }


def test_nested_groups():
    query = where((fields.a == 1).or_(fields.b == 2), fields.c == 3)
    assert build_filter(query) == {
        "$and": [
            {"$or": [{"a": {"$eq": 1}}, {"b": {"$eq": 2}}]},
            {"c": {"$eq": 3}},
        ]
    }


def test_empty_filters_match_everything():
    assert build_filter(None) == {}
    assert build_filter(where()) == {}


def test_raw_mapping_passes_through():
    raw = {"name": {"$regex": "^A"}}
    assert build_filter(raw) == raw


def test_invalid_filters():
    with pytest.raises(TypeError):
        build_filter(42)

    with pytest.raises(TypeError):
        where(fields.a == 1, "b == 2")


def test_group_equality():
    assert where(fields.a == 1) == where(fields.a == 1)
    assert where(fields.a == 1) != where(fields.a == 2)
    assert where(fields.a == 1) != where(fields.a == 1, fields.b == 2)


@pytest.mark.parametrize(
    ("sort", "expected"),
    [
        (None, None),
        ([], None),
        ("name", [("name", 1)]),
        (fields.age.desc, [("age", -1)]),
        (("age", -1), [("age", -1)]),
        (("age", ResultOrdering.DESCENDING), [("age", -1)]),
        ([fields.age.desc, "name"], [("age", -1), ("name", 1)]),
        ([("age", -1), "name", fields.age.asc], [("age", -1), ("name", 1)]),
    ],
)
def test_build_sort(sort, expected):
    assert build_sort(sort) == expected


@pytest.mark.parametrize("sort", [42, [("age", 2)], [("age", "up")]])
def test_build_sort_rejects_invalid_keys(sort):
    with pytest.raises(ValueError):
        build_sort(sort)


def test_group_sort_keeps_first_direction_per_field():
    query = where().sort(fields.age.desc, fields.age.asc, fields.name)
    assert build_sort(query.sorting) == [("age", -1), ("name", 1)]


@pytest.mark.parametrize(
    ("projection", "expected"),
    [
        (None, None),
        (Projection.all(), None),
        (Projection.exclude("x"), {"x": 0}),
        (Projection.include("a", "b").excluding("_id"), {"a": 1, "b": 1, "_id": 0}),
        ({"a": 1}, {"a": 1}),
        ({}, None),
        ("a", ["a"]),
        (["a", "b"], ["a", "b"]),
    ],
)
def test_build_projection(projection, expected):
    assert build_projection(projection) == expected


def test_build_projection_rejects_unknown_types():
    with pytest.raises(TypeError):
        build_projection(3)


def test_build_update():
    assert build_update({"name": "b"}) == {"$set": {"name": "b"}}
    assert build_update({"$inc": {"n": 1}}) == {"$inc": {"n": 1}}
    assert build_update(Update().set(name="b").inc(visits=1)) == {
        "$set": {"name": "b"},
        "$inc": {"visits": 1},
    }


def test_build_update_rejects_mixed_and_unknown_specs():
    with pytest.raises(ValueError):
        build_update({"$set": {"a": 1}, "b": 2})

    with pytest.raises(ValueError):
        build_update(Update())

    with pytest.raises(TypeError):
        build_update("name=b")


def test_query_parts_window():
    parts = build_query_parts(where(fields.a == 1).limit(10, 2))
    assert parts.filter == {"a": {"$eq": 1}}
    assert (parts.limit, parts.skip) == (10, 20)

    parts = build_query_parts(where(fields.a == 1).limit(5))
    assert (parts.limit, parts.skip) == (5, None)

    parts = build_query_parts({"a": 1})
    assert (parts.limit, parts.skip, parts.sort) == (None, None, None)


def test_query_parts_sort_argument_replaces_predicate_sort():
    assert build_query_parts(where().sort(fields.age.desc)).sort == [("age", -1)]
    assert build_query_parts(where().sort(fields.age.desc), sort="name").sort == [("name", 1)]
