"""The document store facade.

`DocumentStore` owns a driver client, a database handle and a collection handle,
and exposes the handful of operations most code needs: find, insert, insert many,
update, update many and count. Every operation is a synchronous call that
translates the facade's filter, sort, projection and update descriptors into
driver documents and hands them to pymongo.

The facade adds convenience, not resilience. It never retries, never substitutes
defaults for failures and never hides driver errors. A driver failure is re-raised
as the typed error for the operation (`StoreConnectFailed`, `StoreQueryFailed`,
`StoreWriteFailed`) with the original exception chained as its cause. The only
best-effort behaviours are that `update()` treats "nothing matched" as success and
that `update_many()` returns 0 when an unacknowledged write leaves the modified
count unavailable.

Example:
    ```python
    from docstore import DocumentStore, fields, Update

    with DocumentStore.connect("mongodb://localhost:27017", "testdb", "people") as store:
        store.insert({"_id": 1, "name": "a"})
        assert store.count() == 1

        for person in store.find(fields.name == "a"):
            print(person)

        store.update_many(fields.name == "a", Update().set(name="b"))
    ```
"""
import logging
from typing import Any, Iterable, Self

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from docstore.cursor import DocumentCursor
from docstore.exceptions import StoreConnectFailed, StoreQueryFailed, StoreWriteFailed
from docstore.query_builder import build_filter, build_query_parts, build_update
from docstore.settings import DEFAULT_COLLECTION, DEFAULT_TIMEOUT_MS, StoreSettings
from docstore.shared_types import Document, Predicate, ProjectionSpec, SortSpec, UpdateSpec


logger = logging.getLogger(__name__)


class DocumentStore:
    """A connection-and-query facade over a single MongoDB collection.

    The client is safe to share between threads; the database and collection
    handles are lightweight references into it. The facade holds no other state.

    Attributes:
        client: The underlying `MongoClient`
        db: The `Database` bound at construction
        collection: The `Collection` every operation targets
    """
    def __init__(self, client: MongoClient, database_name: str, collection_name: str = DEFAULT_COLLECTION):
        """Wraps an existing client.

        Neither the database nor the collection needs to exist yet, both are
        created by the server on the first write.

        Args:
            client: An established MongoDB client
            database_name: Name of the database to use
            collection_name: Name of the collection to use
        """
        self.client: MongoClient = client
        self.db: Database = client[database_name]
        self.collection: Collection = self.db[collection_name]
        self._database_name = database_name
        self._collection_name = collection_name

    @classmethod
    def connect(
        cls,
        connection_string: str,
        database_name: str,
        collection_name: str = DEFAULT_COLLECTION,
        *,
        ping: bool = True,
        timeout: int = DEFAULT_TIMEOUT_MS,
        **client_options: Any,
    ) -> "DocumentStore":
        """Connects to the cluster named by the connection string.

        The connection string is handed to the driver untouched. Clients built from
        identical connection strings share the driver's connection pool.

        Args:
            connection_string: The driver connection URI
            database_name: Name of the database to bind
            collection_name: Name of the collection to bind
            ping: Verify reachability and credentials with a `ping` command
            timeout: Server selection timeout in milliseconds
            **client_options: Additional options for the `MongoClient`

        Returns:
            A connected `DocumentStore`

        Raises:
            StoreConnectFailed: If the client cannot be created, a name is rejected, or
                the ping fails. The client is closed before raising.
        """
        try:
            client = MongoClient(connection_string, serverSelectionTimeoutMS=timeout, **client_options)
        except PyMongoError as error:
            raise StoreConnectFailed(f"Failed to initialize MongoDB client: {error}", store=cls) from error

        try:
            store = cls(client, database_name, collection_name)
        except PyMongoError as error:
            client.close()
            raise StoreConnectFailed(f"Invalid database or collection name: {error}", store=cls) from error

        if ping:
            try:
                client.admin.command("ping")
            except PyMongoError as error:
                client.close()
                raise StoreConnectFailed(f"Failed to reach MongoDB: {error}", store=store) from error

        logger.info("Connected to MongoDB database %r, collection %r", database_name, collection_name)
        return store

    @classmethod
    def from_settings(cls, settings: StoreSettings | None = None) -> "DocumentStore":
        """Connects using a `StoreSettings`, or settings read from the environment if omitted."""
        _settings = settings or StoreSettings.from_env()
        return cls.connect(
            _settings.uri,
            _settings.database_name,
            _settings.collection_name,
            ping=_settings.ping_on_connect,
            timeout=_settings.timeout,
            **_settings.connection_options,
        )

    def disconnect(self):
        """Closes the client and releases its connection pool.

        Every store created with `with_collection()` from this one shares the client
        and is disconnected as well.
        """
        self.client.close()
        logger.info("Disconnected from MongoDB database %r", self._database_name)

    def with_collection(self, collection_name: str) -> "DocumentStore":
        """Returns a store bound to another collection of the same database and client."""
        return type(self)(self.client, self._database_name, collection_name)

    @property
    def database_name(self) -> str:
        return self._database_name

    @property
    def collection_name(self) -> str:
        return self._collection_name

    def find(
        self,
        predicate: Predicate = None,
        projection: ProjectionSpec = None,
        sort: SortSpec = None,
    ) -> DocumentCursor:
        """Finds the documents matching a predicate.

        Ordering always follows the sort, regardless of which fields the projection
        keeps. A `sort` argument replaces any sort carried on the predicate.

        Args:
            predicate: Filter to match, `None` matches every document
            projection: Fields to include or exclude
            sort: Field references, names, or `(name, direction)` pairs

        Returns:
            A lazy, single-pass `DocumentCursor`

        Note:
            Building the cursor does no I/O. A rejected query or an unreachable server
            raises `StoreQueryFailed` from the cursor when it is first read.
        """
        parts = build_query_parts(predicate, projection, sort)
        logger.debug(
            "find in %s on fields %s (sort=%r skip=%r limit=%r)",
            self._collection_name, list(parts.filter), parts.sort, parts.skip, parts.limit,
        )
        cursor = self.collection.find(parts.filter, parts.projection)
        if parts.sort:
            cursor = cursor.sort(parts.sort)
        if parts.skip:
            cursor = cursor.skip(parts.skip)
        if parts.limit:
            cursor = cursor.limit(parts.limit)

        return DocumentCursor(cursor, self)

    def insert(self, document: Document) -> Any:
        """Inserts a single document and returns its `_id`.

        The document is copied before it is handed to the driver, so an `_id`
        generated by the driver does not appear on the caller's mapping.

        Raises:
            StoreWriteFailed: If the write is rejected
        """
        try:
            result = self.collection.insert_one(dict(document))
        except PyMongoError as error:
            raise StoreWriteFailed(
                f"Failed to insert document into MongoDB: {error}",
                store=self,
                details=getattr(error, "details", None),
            ) from error

        logger.debug("Inserted document %r into %s", result.inserted_id, self._collection_name)
        return result.inserted_id

    def insert_many(self, documents: Iterable[Document], *, ordered: bool = True) -> list[Any]:
        """Inserts a batch of documents and returns their `_id`s in order.

        Args:
            documents: The documents to insert
            ordered: Stop at the first failing document instead of attempting the rest

        Raises:
            StoreWriteFailed: If any part of the batch is rejected. `details` carries
                the driver's report of what was and was not written.
        """
        batch = [dict(document) for document in documents]
        if not batch:
            return []

        try:
            result = self.collection.insert_many(batch, ordered=ordered)
        except PyMongoError as error:
            raise StoreWriteFailed(
                f"Failed to insert documents into MongoDB: {error}",
                store=self,
                details=getattr(error, "details", None),
            ) from error

        logger.debug("Inserted %d documents into %s", len(result.inserted_ids), self._collection_name)
        return list(result.inserted_ids)

    def update(self, predicate: Predicate, update: UpdateSpec) -> None:
        """Applies an update to the first document matching the predicate.

        Matching nothing is not an error.

        Raises:
            StoreWriteFailed: If the write is rejected
        """
        query_filter = build_filter(predicate)
        update_document = build_update(update)
        try:
            self.collection.update_one(query_filter, update_document)
        except PyMongoError as error:
            raise StoreWriteFailed(
                f"Failed to update document in MongoDB: {error}",
                store=self,
                details=getattr(error, "details", None),
            ) from error

    def update_many(self, predicate: Predicate, update: UpdateSpec) -> int:
        """Applies an update to every document matching the predicate.

        Returns:
            The number of documents modified, or 0 when the write was not acknowledged
            and the driver cannot report a count. A 0 therefore does not prove that
            nothing changed.

        Raises:
            StoreWriteFailed: If the write is rejected
        """
        query_filter = build_filter(predicate)
        update_document = build_update(update)
        try:
            result = self.collection.update_many(query_filter, update_document)
        except PyMongoError as error:
            raise StoreWriteFailed(
                f"Failed to update documents in MongoDB: {error}",
                store=self,
                details=getattr(error, "details", None),
            ) from error

        if not result.acknowledged:
            logger.debug("Unacknowledged update in %s, modified count unavailable", self._collection_name)
            return 0

        logger.debug("Updated %d documents in %s", result.modified_count, self._collection_name)
        return result.modified_count

    def count(self, predicate: Predicate = None) -> int:
        """Counts the documents matching a predicate, or every document when omitted.

        Raises:
            StoreQueryFailed: If the count fails
        """
        try:
            return self.collection.count_documents(build_filter(predicate))
        except PyMongoError as error:
            raise StoreQueryFailed(f"Failed to count documents in MongoDB: {error}", store=self) from error

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *_):
        self.disconnect()

    def __repr__(self):
        return f"<{type(self).__name__} {self._database_name}.{self._collection_name}>"
