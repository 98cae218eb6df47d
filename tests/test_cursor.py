import pytest
from pymongo.errors import OperationFailure

from docstore import DocumentCursor, StoreQueryFailed, fields


def test_find_is_lazy(people, collection):
    cursor = people.find(fields.age > 20)

    assert isinstance(cursor, DocumentCursor)
    assert not cursor.exhausted
    assert not cursor.closed
    assert repr(cursor) == "<DocumentCursor open>"


def test_cursor_is_single_pass(people, collection):
    cursor = people.find()

    assert len(list(cursor)) == 4
    assert cursor.exhausted
    assert cursor.closed
    assert collection.cursors[-1].closed
    assert list(cursor) == []
    assert repr(cursor) == "<DocumentCursor exhausted>"


def test_abandoned_cursor_is_released(people, collection):
    with people.find() as cursor:
        for _ in cursor:
            break

    assert cursor.closed
    assert not cursor.exhausted
    assert collection.cursors[-1].closed
    assert list(cursor) == []


def test_close_is_idempotent(people, collection):
    cursor = people.find()
    cursor.close()
    cursor.close()

    assert collection.cursors[-1].closed
    assert repr(cursor) == "<DocumentCursor closed>"


def test_one(people):
    cursor = people.find(fields.name == "Bob")
    assert cursor.one() == {"_id": 2, "name": "Bob", "age": 17, "city": "Bergen"}
    assert cursor.closed


def test_one_without_documents(people):
    with pytest.raises(ValueError):
        people.find(fields.name == "Nobody").one()


def test_read_failure_closes_the_cursor(people, collection):
    collection.fail_on_read = OperationFailure("Cannot do exclusion on field age in inclusion projection")
    cursor = people.find(projection={"name": 1, "age": 0})

    with pytest.raises(StoreQueryFailed) as exc_info:
        cursor.all()

    assert isinstance(exc_info.value.driver_error, OperationFailure)
    assert cursor.closed
    assert collection.cursors[-1].closed
