from typing import Type, TYPE_CHECKING

if TYPE_CHECKING:
    from docstore.store import DocumentStore


class DocumentStoreError(Exception):
    """Base exception for document store failures.

    The driver exception that caused the failure, when there is one, is kept on
    `driver_error` and is also chained as `__cause__`.
    """
    def __init__(self, *args, store: "DocumentStore | Type[DocumentStore] | None" = None):
        super().__init__(*args)

        self.store = store
        if store:
            self.add_note(f" - Using Store: {store!r}")

    @property
    def driver_error(self) -> BaseException | None:
        """The underlying driver exception, unmodified."""
        return self.__cause__


class StoreConnectFailed(DocumentStoreError):
    """Raised when the cluster cannot be reached, rejects the credentials, or the connection string is malformed."""


class StoreQueryFailed(DocumentStoreError):
    """Raised when a find, a count, or reading from a cursor fails."""


class StoreWriteFailed(DocumentStoreError):
    """Raised when an insert or an update is rejected.

    When the driver reports a bulk write failure its report is exposed on `details`
    exactly as the driver produced it, so callers can see which part of a batch was
    not applied.
    """
    def __init__(self, *args, details: dict | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.details = details
