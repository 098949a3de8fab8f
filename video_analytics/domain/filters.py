"""Filter expression tree for analytics queries.

A filter is one of four node kinds. Nodes are immutable once built; composite
nodes hold tuples so a tree can be shared between concurrent queries.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class BasicFilter:
    """Exact string match on a dimension."""

    field: str
    value: str


@dataclass(frozen=True)
class AndGroup:
    """All child expressions must match."""

    expressions: tuple["FilterExpression", ...]


@dataclass(frozen=True)
class OrGroup:
    """At least one child expression must match."""

    expressions: tuple["FilterExpression", ...]


@dataclass(frozen=True)
class NotExpression:
    """Negation of a child expression."""

    expression: "FilterExpression"


FilterExpression = BasicFilter | AndGroup | OrGroup | NotExpression
