"""Field selection for query results.

A `Projection` decides which fields of each matching document come back from a
find. It only affects field selection, never ordering or which documents match.

Example:
    ```python
    from docstore.projection import Projection

    Projection.include("name", "email")           # only these (plus _id)
    Projection.include("name").excluding("_id")   # only name
    Projection.exclude("password")                # everything but password
    Projection.all()                              # every field
    ```

The driver rejects projections that mix inclusions and exclusions of fields other
than `_id`; that rejection surfaces as `StoreQueryFailed` when the cursor is read.
"""
from typing import Any, Self


class Projection:
    """An ordered set of field inclusions and exclusions."""
    __match_args__ = ("fields",)

    def __init__(self, fields: dict[str, bool] | None = None):
        self._fields: dict[str, bool] = {} if fields is None else dict(fields)

    @classmethod
    def all(cls) -> "Projection":
        """A projection that returns every field of each document."""
        return cls()

    @classmethod
    def include(cls, *names: str) -> "Projection":
        return cls().including(*names)

    @classmethod
    def exclude(cls, *names: str) -> "Projection":
        return cls().excluding(*names)

    def including(self, *names: str) -> Self:
        """Adds fields to return. A later call for the same field wins."""
        for name in names:
            self._fields[name] = True

        return self

    def excluding(self, *names: str) -> Self:
        """Adds fields to leave out. A later call for the same field wins."""
        for name in names:
            self._fields[name] = False

        return self

    @property
    def fields(self) -> dict[str, bool]:
        return dict(self._fields)

    @property
    def is_all(self) -> bool:
        return not self._fields

    def to_document(self) -> dict[str, Any] | None:
        """The driver projection document, or `None` when every field is wanted."""
        if self.is_all:
            return None

        return {name: 1 if included else 0 for name, included in self._fields.items()}

    def __eq__(self, other):
        if not isinstance(other, Projection):
            return NotImplemented

        return self._fields == other._fields

    def __repr__(self):
        return f"{type(self).__name__}({self._fields!r})"
