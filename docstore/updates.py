"""Update specifications.

An `Update` collects field mutations and renders them as a driver update document.
Each method can be called with a mapping, with keyword arguments, or both; keyword
arguments win for keys present in both. Dotted paths need the mapping form.

Example:
    ```python
    from docstore.updates import Update

    Update().set(name="b").inc(visits=1)
    Update().set({"address.city": "Oslo"}).unset("legacy_id")
    ```
"""
from typing import Any, Mapping, Self


class Update:
    """A chainable builder for update operator documents."""
    def __init__(self):
        self._operations: dict[str, dict[str, Any]] = {}

    def set(self, values: Mapping[str, Any] | None = None, **kwargs: Any) -> Self:
        """Sets fields to the given values, creating them if missing."""
        return self._add("$set", values, kwargs)

    def unset(self, *names: str) -> Self:
        """Removes fields from the matched documents."""
        return self._add("$unset", {name: "" for name in names}, {})

    def inc(self, values: Mapping[str, int | float] | None = None, **kwargs: int | float) -> Self:
        """Increments numeric fields by the given amounts. Missing fields start at zero."""
        return self._add("$inc", values, kwargs)

    def rename(self, values: Mapping[str, str] | None = None, **kwargs: str) -> Self:
        """Renames fields, old name to new name."""
        return self._add("$rename", values, kwargs)

    def push(self, values: Mapping[str, Any] | None = None, **kwargs: Any) -> Self:
        """Appends values to array fields."""
        return self._add("$push", values, kwargs)

    def _add(self, operator: str, values: Mapping[str, Any] | None, kwargs: dict[str, Any]) -> Self:
        combined = dict(values or {}) | kwargs
        if not combined:
            raise ValueError(f"{operator} requires at least one field")

        self._operations.setdefault(operator, {}).update(combined)
        return self

    def to_document(self) -> dict[str, dict[str, Any]]:
        if not self._operations:
            raise ValueError("Update requires at least one field to update")

        return {operator: dict(values) for operator, values in self._operations.items()}

    def __bool__(self):
        return bool(self._operations)

    def __repr__(self):
        return f"{type(self).__name__}({self._operations!r})"
