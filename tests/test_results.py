import pytest
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError

from docstore import CheckedStore, StoreQueryFailed, StoreResult, StoreWriteFailed, fields
from docstore.results import StoreNoResultException


@pytest.fixture
def checked(people):
    return CheckedStore(people)


def test_success(checked):
    match checked.count().get():
        case StoreResult.StoreSuccess(total):
            assert total == 4

        case result:
            pytest.fail(f"Unexpected result {result!r}")


def test_builder_defers_the_call(checked):
    pending = checked.insert({"_id": 10, "name": "Eve"})
    assert checked.store.count() == 4

    assert pending.or_raise() == 10
    assert checked.store.count() == 5


def test_find_result(checked):
    result = checked.find(fields.city == "Oslo", sort=fields.name.desc).get()
    assert [document["name"] for document in result.result] == ["Dave", "Alice"]


def test_find_read_failure_is_captured(checked, collection):
    collection.fail_on_read = OperationFailure("Executor error during find command", code=96)

    match checked.find(fields.city == "Oslo").get():
        case StoreResult.StoreFailure(StoreQueryFailed() as error):
            assert isinstance(error.driver_error, OperationFailure)

        case result:
            pytest.fail(f"Unexpected result {result!r}")

    assert collection.cursors[-1].closed
    assert checked.find().or_use([]) == []


def test_query_failure(checked, collection):
    collection.fail_with = ServerSelectionTimeoutError("no servers available")

    match checked.count().get():
        case StoreResult.StoreFailure(StoreQueryFailed() as error):
            assert isinstance(error.driver_error, ServerSelectionTimeoutError)

        case result:
            pytest.fail(f"Unexpected result {result!r}")

    assert checked.count().or_use(-1) == -1
    with pytest.raises(StoreQueryFailed):
        checked.count().or_raise()


def test_write_failure_details(checked):
    match checked.insert({"_id": 1}).get():
        case StoreResult.StoreFailure(StoreWriteFailed(details={"code": 11000})):
            pass

        case result:
            pytest.fail(f"Unexpected result {result!r}")


def test_update_results(checked):
    assert checked.update(fields.name == "Nobody", {"name": "x"}).get().result is None
    assert checked.update_many(fields.age == 31, {"age": 30}).or_use(-1) == 2
    assert checked.insert_many([{"_id": 20}, {"_id": 21}]).get().result == [20, 21]


def test_programming_errors_propagate(checked):
    with pytest.raises(ValueError):
        checked.update_many({}, {"$set": {"a": 1}, "b": 2}).get()


def test_result_accessors():
    success = StoreResult.StoreSuccess(3)
    assert success.result_or(0) == 3
    assert success.exception_or(None) is None
    with pytest.raises(StoreNoResultException):
        success.exception

    error = StoreQueryFailed("failed")
    failure = StoreResult.StoreFailure(error)
    assert failure.result_or(0) == 0
    assert failure.exception_or(None) is error
    with pytest.raises(StoreNoResultException):
        failure.result

    assert repr(success) == "StoreSuccess(3)"
