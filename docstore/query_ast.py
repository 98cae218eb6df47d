"""
AST (Abstract Syntax Tree) Implementation for docstore Queries

This module provides a set of classes for constructing and managing an abstract
syntax tree (AST) for filters and sort orders over schema-less documents. The
classes defined here allow for the creation of logical operators
(`ASTLogicalOperatorNode`), comparison operators (`ASTOperatorNode`), and nodes
representing document fields (`ASTReferenceNode`) or literal values
(`ASTLiteralNode`). These are combined into comparison expressions
(`ASTComparisonNode`) and grouped within `ASTGroupNode` instances to form
structured filters.

The AST is the facade-level representation of a filter. It is translated into a
driver filter document by `docstore.query_builder` just before a call is made, so
nothing in this module knows about the database driver.

Key components:
-   `ASTNode`: Base class for all AST nodes.
-   `ASTLogicalOperatorNode`: Enum for AND/OR logical operators.
-   `ASTOperatorNode`: Enum for comparison operators (==, !=, >, <, in, exists, etc.).
-   `ASTGroupFlagNode`: Enum for marking the start and end of groups when iterating.
-   `ASTGroupNode`: Represents a group of comparisons, potentially nested.
    This is the main builder for filters, with methods like `and_()`, `or_()`, `limit()`, `sort()`.
-   `ASTComparableNode`: Base class for nodes that can be part of a comparison (references and literals).
-   `ASTReferenceNode`: Represents a reference to a document field (e.g., `field("address.city")`).
-   `ASTLiteralNode`: Represents a literal value in a comparison (e.g., "Alice", 18).
-   `ASTComparisonNode`: Represents a single comparison (e.g., `field("name") == "Alice"`).
-   `field()` / `fields`: Factories for field references.
-   `where()`: A factory function to build an `ASTGroupNode` from initial comparisons.

Example:
    ```python
    from docstore.query_ast import field, fields, where

    # Simple filter: name == "Alice"
    query1 = where(fields.name == "Alice")

    # Complex filter: (age > 18 AND active == True) OR name == "Admin"
    query2 = where((fields.age > 18).and_(fields.active == True)).or_(fields.name == "Admin")

    # Nested field, existence check, sorting and a page of ten
    query3 = where(field("address.city") == "Oslo", fields.email.exists()).sort(fields.name.asc).limit(10)
    ```
"""


from enum import auto, Enum
from itertools import zip_longest
from typing import Any, Self


class ResultOrdering(Enum):
    """Specifies the ordering direction for query results (ascending or descending)."""
    ASCENDING = auto()
    DESCENDING = auto()


class ASTNode:
    """Base class for all nodes in the Abstract Syntax Tree (AST).

    This class serves as a common ancestor for all elements that can form part
    of a docstore filter. It doesn't provide any functionality itself but is used
    for type checking and classification of AST components.
    """
    pass


class ASTLogicalOperatorNode(ASTNode, Enum):
    """Represents logical operators (AND, OR) within the AST.

    These are used in `ASTGroupNode` to combine multiple `ASTComparisonNode`
    instances or other `ASTGroupNode`s. AND binds tighter than OR.
    """
    AND = auto()
    OR = auto()


class ASTOperatorNode(ASTNode, Enum):
    """Represents comparison operators (e.g., ==, !=, >, <) within the AST.

    These are used in `ASTComparisonNode` to define the type of comparison
    being made between a left-hand side (an `ASTReferenceNode`) and a right-hand
    side (an `ASTLiteralNode` or another `ASTReferenceNode`).
    """
    EQUALS = auto()
    NOT_EQUALS = auto()
    GREATER_THAN = auto()
    GREATER_THAN_OR_EQUAL = auto()
    LESS_THAN = auto()
    LESS_THAN_OR_EQUAL = auto()
    IN = auto()
    NOT_IN = auto()
    EXISTS = auto()


class ASTGroupFlagNode(ASTNode, Enum):
    """Represents flags for marking the opening and closing of a group in the AST iteration.

    When an `ASTGroupNode` is iterated, these flags are yielded to indicate the
    logical structure of nested groups.
    """
    OPEN = auto()
    CLOSE = auto()


class ASTGroupNode(ASTNode):
    """Represents a group of AST nodes, forming a filter or a sub-filter.

    An `ASTGroupNode` contains `ASTComparisonNode`s, nested `ASTGroupNode`s and the
    `ASTLogicalOperatorNode`s (AND/OR) that connect them. It also carries the result
    window (limit and page) and the sort order requested for the query.

    Attributes:
        items (list): `ASTComparisonNode`, `ASTGroupNode` or `ASTLogicalOperatorNode` instances.
        frozen (bool): If True, the group cannot be modified (used during iteration).
        max_results (int): The maximum number of results to return (-1 for no limit).
        results_page (int): The page number for paginated results (0-indexed).
        sorting (list[ASTReferenceNode]): Field references, with direction, to sort on.
    """
    def __init__(
        self, items: "list[ASTComparisonNode | ASTGroupNode | ASTLogicalOperatorNode] | None" = None
    ):
        """
        Args:
            items: An optional initial list of items for the group.
        """
        self.items: list[ASTComparisonNode | ASTGroupNode | ASTLogicalOperatorNode] = (
            [] if items is None else items
        )
        self.frozen = False
        self.max_results = -1
        self.results_page = 0
        self.sorting: list[ASTReferenceNode] = []

    def __iter__(self):
        """Iterates over the items in the group, adding open/close flags if needed.

        If the group contains more than one item, `ASTGroupFlagNode.OPEN` is yielded
        before the items, and `ASTGroupFlagNode.CLOSE` is yielded after.

        The group is temporarily marked as `frozen` during iteration to prevent
        modification while it's being traversed.
        """
        self.frozen = True
        if len(self.items) > 1:
            yield ASTGroupFlagNode.OPEN

        try:
            yield from iter(self.items)
        finally:
            self.frozen = False

        if len(self.items) > 1:
            yield ASTGroupFlagNode.CLOSE

    def add(self, item, logical_type=ASTLogicalOperatorNode.AND):
        """Adds an item (comparison or group) to this group.

        If the group is not empty and the last item is not already a logical operator,
        the specified `logical_type` (defaulting to AND) is inserted before the new item.

        Args:
            item: The `ASTComparisonNode` or `ASTGroupNode` to add.
            logical_type: The `ASTLogicalOperatorNode` (AND/OR) to use if a logical
                          connector is needed before this item. Defaults to AND.
        """
        if self.frozen:
            return

        if self.items and not isinstance(self.items[~0], ASTLogicalOperatorNode):
            self.items.append(logical_type)

        self.items.append(item)

    def limit(self, limit: int, page: int = 0) -> Self:
        """Sets the limit and page for query results (pagination).

        Args:
            limit: The maximum number of results to return.
            page: The page number (0-indexed). For example, if `limit` is 10 and
                  `page` is 1, results 11-20 would be targeted.

        Returns:
            The `ASTGroupNode` instance, allowing for method chaining.
        """
        self.max_results = limit
        self.results_page = page
        return self

    def sort(self, *on_fields: "ASTReferenceNode") -> Self:
        """Adds sorting criteria to the query.

        Accepts one or more `ASTReferenceNode` instances, which typically include
        an ordering direction (e.g., `fields.name.asc` or `fields.age.desc`).

        A field that is already part of the sort keeps its first position and direction.

        Args:
            *on_fields: `ASTReferenceNode` instances specifying the fields and
                        directions to sort by.

        Returns:
            The `ASTGroupNode` instance, for method chaining.
        """
        seen = {reference.field for reference in self.sorting}
        for reference in on_fields:
            if reference.field not in seen:
                self.sorting.append(reference)
                seen.add(reference.field)

        return self

    def __eq__(self, other):
        """Compares this ASTGroupNode with another for equality.

        Two `ASTGroupNode` instances are considered equal if they contain the
        same sequence of items (comparisons, logical operators, nested groups)
        in the same order.
        """
        if not isinstance(other, ASTGroupNode):
            return NotImplemented

        return self._compare_items(other)

    def _compare_items(self, other):
        """Internal helper to compare the items lists of two ASTGroupNodes."""
        # zip_longest so that extra items in either group make them unequal
        for items in zip_longest(self, other):
            match items:
                case (
                    ASTComparisonNode(al, ar, ao),
                    ASTComparisonNode(bl, br, bo),
                ) if al._eq(bl) and ar._eq(br) and ao == bo:
                    continue

                case (ASTGroupNode() as a, ASTGroupNode() as b) if a == b:
                    continue

                case (
                    ASTLogicalOperatorNode() as a,
                    ASTLogicalOperatorNode() as b,
                ) if a == b:
                    continue

                case (ASTGroupFlagNode() as a, ASTGroupFlagNode() as b) if a == b:
                    continue

                case _:
                    return False

        return True

    def __repr__(self):
        return f"{type(self).__name__}({self.items!r})"

    def and_(self, *comparisons: "ASTGroupNode | ASTComparisonNode"):
        """Adds one or more comparisons to this group, joined by AND with previous items.

        If multiple comparisons are provided, they are first combined into their own
        `ASTGroupNode` (using `where()`) before being added.

        Returns:
            The `ASTGroupNode` instance, for method chaining.
        """
        return self._add_node_or_group(where(*comparisons), ASTLogicalOperatorNode.AND)

    def or_(self, *comparisons: "ASTGroupNode | ASTComparisonNode"):
        """Adds one or more comparisons to this group, joined by OR with previous items.

        If multiple comparisons are provided, they are first combined into their own
        `ASTGroupNode` (using `where()`) before being added.

        Returns:
            The `ASTGroupNode` instance, for method chaining.
        """
        return self._add_node_or_group(where(*comparisons), ASTLogicalOperatorNode.OR)

    def _add_node_or_group(
        self,
        comparison: "ASTGroupNode | ASTComparisonNode",
        logical_type: ASTLogicalOperatorNode,
    ):
        """Internal helper to add a comparison node or a group node to the items list.

        Handles unwrapping single-item groups to avoid unnecessary nesting.
        """
        match comparison:
            case ASTGroupNode() if len(comparison.items) == 1:
                self.add(comparison.items[0], logical_type)

            case ASTGroupNode() if not comparison.items:
                pass

            case _:
                self.add(comparison, logical_type)

        return self


class ASTComparableNode(ASTNode):
    """Base class for AST nodes that can be used in comparisons (literals and references).

    This class overloads Python's comparison operators (==, !=, >, >=, <, <=)
    to create `ASTComparisonNode` instances. Each new comparison starts its own
    `ASTGroupNode` so it can be chained with `and_()` / `or_()`.

    Attributes:
        group (ASTGroupNode): The group this node belongs to.
    """
    def __init__(self, group):
        self.group = group

    @staticmethod
    def _safe_compare(func):
        """Decorator to prevent building comparisons while a group is being compared."""
        def wrapper(self, *args):
            if self.group.frozen:
                return False

            return func(self, *args)

        return wrapper

    def _compare(self, other, operator: "ASTOperatorNode") -> "ASTComparisonNode":
        return ASTComparisonNode(self, other, operator)

    @_safe_compare
    def __eq__(self, other) -> "ASTComparisonNode":
        """Creates an EQUALS comparison node."""
        return self._compare(other, ASTOperatorNode.EQUALS)

    @_safe_compare
    def __ne__(self, other) -> "ASTComparisonNode":
        """Creates a NOT_EQUALS comparison node."""
        return self._compare(other, ASTOperatorNode.NOT_EQUALS)

    def __gt__(self, other) -> "ASTComparisonNode":
        """Creates a GREATER_THAN comparison node."""
        return self._compare(other, ASTOperatorNode.GREATER_THAN)

    def __ge__(self, other) -> "ASTComparisonNode":
        """Creates a GREATER_THAN_OR_EQUAL comparison node."""
        return self._compare(other, ASTOperatorNode.GREATER_THAN_OR_EQUAL)

    def __lt__(self, other) -> "ASTComparisonNode":
        """Creates a LESS_THAN comparison node."""
        return self._compare(other, ASTOperatorNode.LESS_THAN)

    def __le__(self, other) -> "ASTComparisonNode":
        """Creates a LESS_THAN_OR_EQUAL comparison node."""
        return self._compare(other, ASTOperatorNode.LESS_THAN_OR_EQUAL)


class ASTReferenceNode(ASTComparableNode):
    """Represents a reference to a document field in an AST query.

    The field is a dotted path (`"address.city"`) into the document. A reference
    also carries the ordering to use when it appears in a sort.
    """
    __match_args__ = ("field",)

    def __init__(self, field: str, ordering=ResultOrdering.ASCENDING):
        """
        Args:
            field: The dotted path of the field (e.g., "name" or "address.city").
            ordering: The `ResultOrdering` for this field if used in sorting.
                      Defaults to ASCENDING.
        """
        super().__init__(ASTGroupNode())
        self._field = field
        self._ordering = ordering

    def _eq(self, other):
        """Custom equality check for comparing with another ASTReferenceNode."""
        if not isinstance(other, ASTReferenceNode):
            return False

        return self.field == other.field and self.ordering == other.ordering

    def __iter__(self):
        yield self._field

    @property
    def field(self) -> str:
        """The dotted path of the document field this node refers to."""
        return self._field

    @property
    def ordering(self):
        """The `ResultOrdering` (ASCENDING/DESCENDING) for this reference, primarily for sorting."""
        return self._ordering

    @property
    def asc(self) -> "ASTReferenceNode":
        """Returns a new `ASTReferenceNode` for this field with ASCENDING order."""
        return ASTReferenceNode(self._field, ResultOrdering.ASCENDING)

    @property
    def desc(self) -> "ASTReferenceNode":
        """Returns a new `ASTReferenceNode` for this field with DESCENDING order."""
        return ASTReferenceNode(self._field, ResultOrdering.DESCENDING)

    def in_(self, values: list) -> "ASTComparisonNode":
        """Creates an IN comparison node for checking membership in a list.

        Example:
            ```python
            store.find(fields.status.in_(["active", "pending"]))
            ```
        """
        return self._compare(list(values), ASTOperatorNode.IN)

    def not_in(self, values: list) -> "ASTComparisonNode":
        """Creates a NOT_IN comparison node, the negation of `in_()`."""
        return self._compare(list(values), ASTOperatorNode.NOT_IN)

    def exists(self) -> "ASTComparisonNode":
        """Matches documents that contain this field, whatever its value."""
        return self._compare(True, ASTOperatorNode.EXISTS)

    def not_exists(self) -> "ASTComparisonNode":
        """Matches documents that do not contain this field."""
        return self._compare(False, ASTOperatorNode.EXISTS)

    def __hash__(self):
        return hash((self._field, self._ordering))

    def __repr__(self):
        return f"<{type(self).__qualname__} {self._field!r} {self._ordering.name}>"


class ASTLiteralNode(ASTComparableNode):
    """Represents a literal value in an AST query (e.g., a string, number, boolean).

    Attributes:
        _value: The actual literal value being represented.
    """
    __match_args__ = ("value",)

    def __init__(self, value):
        super().__init__(ASTGroupNode())
        self._value = value

    def _eq(self, other):
        """Custom equality check for comparing with another ASTLiteralNode."""
        if not isinstance(other, ASTLiteralNode):
            return False

        return self._value == other._value

    def __iter__(self):
        yield self._value

    @property
    def value(self):
        """The literal value held by this node."""
        return self._value

    def __repr__(self):
        return f"{type(self).__name__}({self._value!r})"


class ASTComparisonNode(ASTComparableNode):
    """Represents a comparison operation in an AST query.

    A comparison involves a left-hand side (an `ASTReferenceNode`), an operator
    (`ASTOperatorNode`), and a right-hand side (an `ASTLiteralNode` for a value,
    or another `ASTReferenceNode` for a field-to-field comparison).

    For example, `fields.name == "Alice"` is represented as an `ASTComparisonNode`
    with `fields.name` as left, `ASTOperatorNode.EQUALS` as operator, and `"Alice"`
    as right.

    Every comparison owns a group that initially holds only itself, so comparisons
    can be chained (e.g., `(fields.name == "A").and_(fields.age > 18)`).
    """
    __match_args__ = ("left", "right", "operator")

    def __init__(
        self,
        left: ASTLiteralNode | ASTReferenceNode | Any,
        right: ASTLiteralNode | ASTReferenceNode | Any,
        operator: ASTOperatorNode,
        group=None,
    ):
        """
        Args:
            left: The left operand (field reference or literal).
            right: The right operand (value or field reference).
            operator: The `ASTOperatorNode` defining the comparison type.
            group: An optional `ASTGroupNode` to associate with. If None, a new
                   group holding only this comparison is created.
        """
        super().__init__(group or ASTGroupNode([self]))
        self._left = self._make_node(left)
        self._right = self._make_node(right)
        self._operator = operator

    def __iter__(self):
        """Iterates over the components of the comparison: left, operator, right."""
        yield self.left
        yield self.operator
        yield self.right

    @property
    def left(self):
        """The left operand of the comparison."""
        return self._left

    @property
    def right(self):
        """The right operand of the comparison."""
        return self._right

    @property
    def operator(self):
        """The `ASTOperatorNode` representing the type of comparison (e.g., EQUALS)."""
        return self._operator

    def __repr__(self):
        return (
            f"{type(self).__name__}("
            f"{self._left!r}, "
            f"{self._right!r}, "
            f"{self._operator})"
        )

    def and_(self, *comparisons: "ASTComparisonNode | ASTGroupNode"):
        """Combines this comparison with others using an AND operator.

        Returns:
            The `ASTGroupNode` containing this and the other comparisons.
        """
        return self.group.and_(*comparisons)

    def or_(self, *comparisons: "ASTComparisonNode | ASTGroupNode"):
        """Combines this comparison with others using an OR operator.

        Returns:
            The `ASTGroupNode` containing this and the other comparisons.
        """
        return self.group.or_(*comparisons)

    def _make_node(self, value):
        match value:
            case ASTComparableNode():
                return value

            case _:
                return ASTLiteralNode(value)


class FieldNamespace:
    """Attribute-style access to field references.

    `fields.name` is the same as `field("name")`. Dotted paths and names that are
    not valid identifiers use item access: `fields["address.city"]`.
    """
    def __getattr__(self, name: str) -> ASTReferenceNode:
        if name.startswith("__"):
            raise AttributeError(name)

        return ASTReferenceNode(name)

    def __getitem__(self, name: str) -> ASTReferenceNode:
        return ASTReferenceNode(name)


def field(name: str) -> ASTReferenceNode:
    """Creates a reference to the document field at the dotted path `name`."""
    return ASTReferenceNode(name)


fields = FieldNamespace()


def where(*comparisons: "ASTComparisonNode | ASTGroupNode") -> ASTGroupNode:
    """Creates a new query group from one or more comparisons.

    This is the primary entry point for building filters. Multiple comparisons are
    joined with AND. With no arguments the group is empty and matches every document.

    Example:
        ```python
        # Simple equality comparison
        query1 = where(fields.name == "Alice")

        # Match everything, sorted
        query2 = where().sort(fields.created.desc)

        # Multiple conditions
        query3 = where(fields.age > 18, fields.active == True)
        ```
    """
    match comparisons:
        case (ASTComparisonNode() as comparison,):
            return comparison.group

        case (ASTGroupNode() as group,):
            return group

        case _:
            group = ASTGroupNode()
            for c in comparisons:
                match c:
                    case ASTComparisonNode():
                        group.add(c.group)

                    case ASTGroupNode():
                        group.add(c)

                    case _:
                        raise TypeError(f"Cannot build a filter from {c!r}")

            return group
