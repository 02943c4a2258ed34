"""Expression graph model for uncertain values.

This module contains:
- Source, UnaryOp, BinaryOp, Conditional: immutable, shareable graph nodes
- Map, Filter: the two kinds of unary operation
- BinaryOperation: built-in binary operators
- collect_sources / iter_nodes: identity-aware traversals
"""

from ._algorithms import children, collect_sources, count_source_occurrences, iter_nodes
from ._nodes import BinaryOp, BinaryOperation, Conditional, Filter, Map, Node, Source, UnaryKind, UnaryOp

__all__ = [
    "BinaryOp",
    "BinaryOperation",
    "Conditional",
    "Filter",
    "Map",
    "Node",
    "Source",
    "UnaryKind",
    "UnaryOp",
    "children",
    "collect_sources",
    "count_source_occurrences",
    "iter_nodes",
]
