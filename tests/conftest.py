import pytest

from docstore.store import DocumentStore
from fakes import FakeClient


@pytest.fixture
def client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def store(client) -> DocumentStore:
    with DocumentStore(client, "testdb", "people") as store:
        yield store


@pytest.fixture
def collection(store):
    """The fake collection behind the `store` fixture, for inspecting and rigging it."""
    return store.collection


@pytest.fixture
def people(store):
    store.insert_many(
        [
            {"_id": 1, "name": "Alice", "age": 31, "city": "Oslo"},
            {"_id": 2, "name": "Bob", "age": 17, "city": "Bergen"},
            {"_id": 3, "name": "Carol", "age": 45},
            {"_id": 4, "name": "Dave", "age": 31, "city": "Oslo"},
        ]
    )
    return store
