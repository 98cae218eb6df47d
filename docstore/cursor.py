"""Lazy, single-pass result sequences.

`DocumentCursor` wraps the driver cursor returned by a find. Documents are pulled
from the server as the cursor is iterated, in whatever batches the driver chooses.
Once consumed the cursor is exhausted and never restarts; run the find again for a
fresh sequence.

The server-side cursor is released when the cursor is exhausted, when `close()` is
called, or when a `with` block around it exits, whichever comes first:

    ```python
    with store.find(fields.status == "open") as documents:
        for document in documents:
            if done(document):
                break  # the server cursor is still released
    ```
"""
import logging
from typing import TYPE_CHECKING

from pymongo.errors import PyMongoError

from docstore.exceptions import StoreQueryFailed
from docstore.shared_types import Document

if TYPE_CHECKING:
    from pymongo.cursor import Cursor
    from docstore.store import DocumentStore


logger = logging.getLogger(__name__)


class DocumentCursor:
    """A forward-only iterator over the documents matched by a find."""
    def __init__(self, cursor: "Cursor", store: "DocumentStore | None" = None):
        self._cursor = cursor
        self._store = store
        self._exhausted = False
        self._closed = False

    @property
    def exhausted(self) -> bool:
        """True once every matching document has been read."""
        return self._exhausted

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self):
        return self

    def __next__(self) -> Document:
        if self._exhausted or self._closed:
            raise StopIteration

        try:
            return next(self._cursor)

        except StopIteration:
            self._exhausted = True
            self.close()
            raise

        except PyMongoError as error:
            self.close()
            raise StoreQueryFailed(f"Failed to read documents from cursor: {error}", store=self._store) from error

    def one(self) -> Document:
        """Returns the next document and releases the cursor.

        Raises:
            ValueError: If there are no documents left.
        """
        try:
            return next(self)
        except StopIteration:
            raise ValueError("Cursor returned no documents") from None
        finally:
            self.close()

    def all(self) -> list[Document]:
        """Reads every remaining document into a list."""
        return list(self)

    def close(self):
        """Releases the server-side cursor. Safe to call more than once."""
        if self._closed:
            return

        self._closed = True
        logger.debug("Closing cursor (exhausted=%s)", self._exhausted)
        self._cursor.close()

    def __enter__(self):
        return self

    def __exit__(self, *_):
        self.close()

    def __repr__(self):
        state = "exhausted" if self._exhausted else "closed" if self._closed else "open"
        return f"<{type(self).__name__} {state}>"
