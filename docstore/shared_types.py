"""Defines shared type aliases used across the docstore package.

These aliases name the shapes callers hand to the facade so that signatures stay
readable and so that the raw-mapping escape hatches (driver filter documents,
driver update documents) are spelled the same way everywhere.
"""
from typing import Any, Mapping, MutableMapping, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from docstore.projection import Projection
    from docstore.query_ast import ASTComparisonNode, ASTGroupNode, ASTReferenceNode
    from docstore.updates import Update


type Document = MutableMapping[str, Any]
"""A schema-less, ordered field-to-value record.

Documents read back from the driver are plain `dict`s, which keep insertion order,
so field order survives a round trip.
"""

type Predicate = "ASTGroupNode | ASTComparisonNode | Mapping[str, Any] | None"
"""Anything `DocumentStore` accepts as a filter. `None` matches every document."""

type SortKey = "ASTReferenceNode | tuple[str, int] | str"

type SortSpec = "SortKey | Sequence[SortKey] | None"

type ProjectionSpec = "Projection | Mapping[str, Any] | Sequence[str] | None"

type UpdateSpec = "Update | Mapping[str, Any]"
