"""A result-returning view of a `DocumentStore`.

`CheckedStore` mirrors the facade's operations, but each call returns a
`StoreResultBuilder` instead of running immediately. Evaluate it with `.get()` to
receive a `StoreResult` that distinguishes the three failure kinds by exception
type, or with `.or_raise()` / `.or_use(default)`.

`find()` reads every matching document inside the result, so a failure while
reading the cursor becomes a `StoreFailure` like any other.

Example:
    ```python
    checked = CheckedStore(store)

    match checked.count().get():
        case StoreResult.StoreSuccess(total):
            print(total)
        case StoreResult.StoreFailure(StoreQueryFailed() as error):
            print(f"Count failed: {error.driver_error!r}")
    ```
"""
from typing import Any, Iterable

from docstore.results import StoreResult, StoreResultBuilder
from docstore.shared_types import Document, Predicate, ProjectionSpec, SortSpec, UpdateSpec
from docstore.store import DocumentStore


class CheckedStore:
    def __init__(self, store: DocumentStore):
        self._store = store

    @property
    def store(self) -> DocumentStore:
        return self._store

    def find(
        self,
        predicate: Predicate = None,
        projection: ProjectionSpec = None,
        sort: SortSpec = None,
    ) -> StoreResultBuilder[list[Document]]:
        """Finds and reads every matching document, so read failures land in the result."""
        return StoreResult.build(self._find_all, predicate, projection, sort)

    def _find_all(self, predicate: Predicate, projection: ProjectionSpec, sort: SortSpec) -> list[Document]:
        with self._store.find(predicate, projection, sort) as cursor:
            return cursor.all()

    def insert(self, document: Document) -> StoreResultBuilder[Any]:
        return StoreResult.build(self._store.insert, document)

    def insert_many(self, documents: Iterable[Document], *, ordered: bool = True) -> StoreResultBuilder[list[Any]]:
        return StoreResult.build(self._store.insert_many, documents, ordered=ordered)

    def update(self, predicate: Predicate, update: UpdateSpec) -> StoreResultBuilder[None]:
        return StoreResult.build(self._store.update, predicate, update)

    def update_many(self, predicate: Predicate, update: UpdateSpec) -> StoreResultBuilder[int]:
        return StoreResult.build(self._store.update_many, predicate, update)

    def count(self, predicate: Predicate = None) -> StoreResultBuilder[int]:
        return StoreResult.build(self._store.count, predicate)

    def __repr__(self):
        return f"{type(self).__name__}({self._store!r})"
