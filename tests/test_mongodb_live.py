"""Runs the store against a real MongoDB server on 127.0.0.1:27017, when one is running."""
import pytest

from docstore import DocumentStore, Projection, StoreConnectFailed, StoreWriteFailed, Update, fields


TEST_URI = "mongodb://127.0.0.1:27017"


@pytest.fixture
def live_store():
    try:
        store = DocumentStore.connect(TEST_URI, "docstore_tests", "people", timeout=100)
    except StoreConnectFailed:
        pytest.skip(f"Could not connect to MongoDB at {TEST_URI}. Is it running?")

    store.collection.drop()
    try:
        yield store
    finally:
        store.collection.drop()
        store.disconnect()


def test_scenario(live_store):
    live_store.insert({"_id": 1, "name": "a"})
    assert live_store.count() == 1
    assert live_store.find({"name": "a"}).all() == [{"_id": 1, "name": "a"}]

    assert live_store.update_many(fields.name == "a", Update().set(name="b")) == 1
    assert len(live_store.find(fields.name == "b").all()) == 1
    assert live_store.find(fields.name == "a").all() == []


def test_sort_projection_and_paging(live_store):
    live_store.insert_many({"_id": n, "n": n, "secret": "x"} for n in range(10))

    documents = live_store.find(fields.n >= 3, Projection.exclude("secret"), sort=fields.n.desc).all()
    assert [document["n"] for document in documents] == [9, 8, 7, 6, 5, 4, 3]
    assert all("secret" not in document for document in documents)


def test_duplicate_key(live_store):
    live_store.insert({"_id": 1})
    with pytest.raises(StoreWriteFailed) as exc_info:
        live_store.insert_many([{"_id": 2}, {"_id": 1}])

    assert exc_info.value.details["nInserted"] == 1
    assert live_store.count() == 2
