"""docstore Package.

docstore is a small, synchronous facade over a MongoDB collection. It owns a client,
a database and a collection, and turns typed filter, sort, projection and update
descriptors into driver calls.

Key features of docstore include:

-   **Typed Filters**: Build filters with Python comparison operators on field
    references (`fields.age > 18`), combined with `and_()` / `or_()`.
-   **Lazy Results**: Finds return a single-pass `DocumentCursor` that releases the
    server cursor on exhaustion, `close()`, or leaving a `with` block.
-   **Explicit Errors**: Driver failures surface as `StoreConnectFailed`,
    `StoreQueryFailed` or `StoreWriteFailed`, with the driver error chained.
-   **Result Values**: `CheckedStore` returns `StoreResult` values for callers that
    prefer pattern matching over exceptions.

Note:
This `__init__.py` file uses a custom `__getattr__` to enable lazy loading of
submodules and specific symbols, so `import docstore` does not import the driver
until something that needs it is used.
"""
import importlib
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from docstore.checked import CheckedStore
    from docstore.cursor import DocumentCursor
    from docstore.exceptions import DocumentStoreError, StoreConnectFailed, StoreQueryFailed, StoreWriteFailed
    from docstore.projection import Projection
    from docstore.query_ast import field, fields, where
    from docstore.results import StoreResult
    from docstore.settings import StoreSettings
    from docstore.store import DocumentStore
    from docstore.updates import Update

__lookup = {
    "DocumentStore": "docstore.store",
    "CheckedStore": "docstore.checked",
    "DocumentCursor": "docstore.cursor",
    "StoreSettings": "docstore.settings",
    "StoreResult": "docstore.results",
    "Projection": "docstore.projection",
    "Update": "docstore.updates",
    "field": "docstore.query_ast",
    "fields": "docstore.query_ast",
    "where": "docstore.query_ast",
    "DocumentStoreError": "docstore.exceptions",
    "StoreConnectFailed": "docstore.exceptions",
    "StoreQueryFailed": "docstore.exceptions",
    "StoreWriteFailed": "docstore.exceptions",
}

__all__ = list(__lookup.keys())

__modules = set()

for _path in Path(__file__).parent.iterdir():
    if _path.name.startswith("_"):
        continue

    if not _path.is_dir() and _path.suffix != ".py":
        continue

    __modules.add(_path.stem)


def __getattr__(name):
    """Lazily loads submodules and public symbols of the docstore package.

    Names listed in `__lookup` are imported from their module on first access. Any
    other name that matches a module in the package directory imports that module.

    Raises:
        ImportError: If a symbol listed in `__lookup` cannot be imported from its module.
        AttributeError: If the name is neither a public symbol nor a submodule.
    """
    if name in __lookup:
        try:
            module = importlib.import_module(__lookup[name])
        except Exception as e:
            raise ImportError(f"Failed to import {name} from {__lookup[name]}: {e}") from e

        return getattr(module, name)

    if name in __modules:
        return importlib.import_module(f"docstore.{name}")

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
