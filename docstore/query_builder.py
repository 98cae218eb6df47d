"""Translates docstore filters, sorts, projections and updates into driver documents.

Every public function here is pure: it reads the facade-level descriptor and returns
the document the driver expects. Raw mappings are accepted everywhere as an escape
hatch and passed through untouched, the facade never inspects or validates them.
"""
from dataclasses import dataclass
from collections.abc import Mapping, Sequence
from typing import Any

from docstore.projection import Projection
from docstore.query_ast import (
    ASTComparisonNode,
    ASTGroupNode,
    ASTLiteralNode,
    ASTLogicalOperatorNode,
    ASTNode,
    ASTOperatorNode,
    ASTReferenceNode,
    ResultOrdering,
)
from docstore.updates import Update


MONGO_OPERATORS = {
    ASTOperatorNode.EQUALS: "$eq",
    ASTOperatorNode.NOT_EQUALS: "$ne",
    ASTOperatorNode.GREATER_THAN: "$gt",
    ASTOperatorNode.GREATER_THAN_OR_EQUAL: "$gte",
    ASTOperatorNode.LESS_THAN: "$lt",
    ASTOperatorNode.LESS_THAN_OR_EQUAL: "$lte",
    ASTOperatorNode.IN: "$in",
    ASTOperatorNode.NOT_IN: "$nin",
    ASTOperatorNode.EXISTS: "$exists",
}

MONGO_LOGICAL_OPERATORS = {
    ASTLogicalOperatorNode.AND: "$and",
    ASTLogicalOperatorNode.OR: "$or",
}

SORT_DIRECTIONS = {
    ResultOrdering.ASCENDING: 1,
    ResultOrdering.DESCENDING: -1,
}


@dataclass
class MongoQueryParts:
    filter: dict[str, Any]
    projection: dict[str, Any] | list[str] | None = None
    sort: list[tuple[str, int]] | None = None
    skip: int | None = None
    limit: int | None = None


def _parse_comparison_node(node: ASTComparisonNode) -> dict[str, Any]:
    if not isinstance(node.left, ASTReferenceNode):
        raise NotImplementedError(f"The left side of a comparison must be a field reference, got {node.left!r}")

    if node.operator not in MONGO_OPERATORS:
        raise NotImplementedError(f"MongoDB translation for operator {node.operator} not implemented.")

    mongo_operator = MONGO_OPERATORS[node.operator]
    match node.right:
        case ASTReferenceNode(other_field):
            # Field-to-field comparisons need an aggregation expression
            return {"$expr": {mongo_operator: [f"${node.left.field}", f"${other_field}"]}}

        case ASTLiteralNode(value):
            return {node.left.field: {mongo_operator: value}}

        case _:
            raise NotImplementedError(f"Cannot compare a field to {node.right!r}")


def _join(mongo_operator: str, parts: list[dict[str, Any]]) -> dict[str, Any]:
    parts = [part for part in parts if part]
    match parts:
        case []:
            return {}

        case [single]:
            return single

        case _:
            return {mongo_operator: parts}


def _parse_group_node(node: ASTGroupNode) -> dict[str, Any]:
    # Items alternate [cond, op, cond, op, ...]. AND binds tighter than OR, so the
    # items are split on OR into runs of ANDed conditions.
    branches: list[list[dict[str, Any]]] = [[]]
    for item in node.items:
        match item:
            case ASTLogicalOperatorNode.OR:
                branches.append([])

            case ASTLogicalOperatorNode.AND:
                continue

            case _:
                branches[~0].append(_parse_node(item))

    and_operator = MONGO_LOGICAL_OPERATORS[ASTLogicalOperatorNode.AND]
    or_operator = MONGO_LOGICAL_OPERATORS[ASTLogicalOperatorNode.OR]
    return _join(or_operator, [_join(and_operator, branch) for branch in branches])


def _parse_node(node: ASTNode) -> dict[str, Any]:
    if isinstance(node, ASTComparisonNode):
        return _parse_comparison_node(node)
    elif isinstance(node, ASTGroupNode):
        return _parse_group_node(node)
    else:
        raise NotImplementedError(f"AST node type {type(node)} not yet supported in MongoDB filter construction.")


def build_filter(predicate: "ASTGroupNode | ASTComparisonNode | Mapping[str, Any] | None") -> dict[str, Any]:
    """Translates a predicate into a driver filter document. `None` matches everything."""
    match predicate:
        case None:
            return {}

        case ASTNode():
            return _parse_node(predicate)

        case Mapping():
            return dict(predicate)

        case _:
            raise TypeError(f"Cannot build a filter from {predicate!r}")


def _sort_key(key: "ASTReferenceNode | tuple[str, int] | str") -> tuple[str, int]:
    match key:
        case ASTReferenceNode():
            return key.field, SORT_DIRECTIONS[key.ordering]

        case str():
            return key, 1

        case (str() as name, ResultOrdering() as ordering):
            return name, SORT_DIRECTIONS[ordering]

        case (str() as name, int() as direction) if direction in (1, -1):
            return name, direction

        case _:
            raise ValueError(f"Invalid sort key {key!r}, expected a field reference, a name, or (name, 1 | -1)")


def build_sort(sort) -> list[tuple[str, int]] | None:
    """Normalises a sort specification into ordered `(field, direction)` pairs.

    Accepts a single key or a sequence of keys, where a key is a field reference
    (`fields.age.desc`), a bare field name (ascending), or a `(name, 1 | -1)` pair.
    Returns `None` when there is nothing to sort on.
    """
    match sort:
        case None:
            return None

        case ASTReferenceNode() | str():
            keys = [sort]

        case (str(), int() | ResultOrdering()):
            keys = [sort]

        case Sequence():
            keys = list(sort)

        case _:
            raise ValueError(f"Invalid sort specification {sort!r}")

    pairs = []
    seen = set()
    for name, direction in map(_sort_key, keys):
        if name not in seen:
            pairs.append((name, direction))
            seen.add(name)

    return pairs or None


def build_projection(projection) -> dict[str, Any] | list[str] | None:
    """Translates a projection. `None` and `Projection.all()` select every field."""
    match projection:
        case None:
            return None

        case Projection():
            return projection.to_document()

        case Mapping():
            return dict(projection) or None

        case str():
            return [projection]

        case Sequence():
            return list(projection) or None

        case _:
            raise TypeError(f"Cannot build a projection from {projection!r}")


def build_update(update: "Update | Mapping[str, Any]") -> dict[str, Any]:
    """Translates an update specification into a driver update document.

    An `Update` renders its operators. A mapping whose keys are all operators
    (`"$set"`, `"$inc"`, ...) is passed through. A mapping of plain fields is
    wrapped in `$set`.
    """
    match update:
        case Update():
            return update.to_document()

        case Mapping():
            operator_keys = [key for key in update if str(key).startswith("$")]
            if not operator_keys:
                return {"$set": dict(update)}

            if len(operator_keys) != len(update):
                raise ValueError("An update cannot mix operator keys with plain field names")

            return dict(update)

        case _:
            raise TypeError(f"Cannot build an update from {update!r}")


def build_query_parts(predicate, projection=None, sort=None) -> MongoQueryParts:
    """Translates everything a find needs into driver query components.

    The sort comes from the `sort` argument when given, otherwise from the sort
    carried on the predicate. Limit and skip come from `predicate.limit()`.
    """
    limit_val: int | None = None
    skip_val: int | None = None
    sort_spec = build_sort(sort)

    if isinstance(predicate, ASTGroupNode):
        if predicate.max_results > 0:
            limit_val = predicate.max_results
            if predicate.results_page > 0:
                skip_val = predicate.results_page * predicate.max_results

        if sort_spec is None and predicate.sorting:
            sort_spec = build_sort(predicate.sorting)

    return MongoQueryParts(
        filter=build_filter(predicate),
        projection=build_projection(projection),
        sort=sort_spec,
        skip=skip_val,
        limit=limit_val,
    )
