"""Traversals over expression graphs."""

from __future__ import annotations

from collections import Counter, deque
from typing import TYPE_CHECKING

from ._nodes import BinaryOp, Conditional, Source, UnaryOp

if TYPE_CHECKING:
    from collections.abc import Iterator
    from uuid import UUID

    from ._nodes import Node


def children(node: Node) -> tuple[Node, ...]:
    """Return the direct children of a node.

    Raises:
        TypeError: If the object is not a graph node.

    """
    match node:
        case Source():
            return ()
        case UnaryOp(operand=operand):
            return (operand,)
        case BinaryOp(left=left, right=right):
            return (left, right)
        case Conditional(condition=condition, if_true=if_true, if_false=if_false):
            return (condition, if_true, if_false)
        case _:
            msg = f"Not an expression graph node: {type(node).__name__}"
            raise TypeError(msg)


def iter_nodes(root: Node) -> Iterator[Node]:
    """Iterate over the distinct node objects reachable from root.

    Shared sub-expressions are yielded once. Order is depth-first, parents
    before children.

    Example:
        >>> x = Source(lambda: 1.0)
        >>> len(list(iter_nodes(BinaryOp(x, x, BinaryOperation.SUB))))
        2

    """
    visited: set[int] = set()
    stack: list[Node] = [root]
    while stack:
        current = stack.pop()
        if id(current) in visited:
            continue
        visited.add(id(current))
        yield current
        # Reversed so that the left-most child is visited first
        stack.extend(reversed(children(current)))


def collect_sources(root: Node) -> dict[UUID, Source]:
    """Collect every Source reachable from root, keyed by identity.

    Repeated references to the same source collapse to a single entry. Sources
    under both branches of a Conditional are included.

    Args:
        root: The root node of the graph.

    Returns:
        Mapping from source identity to the Source node.

    """
    sources: dict[UUID, Source] = {}
    for node in iter_nodes(root):
        if isinstance(node, Source):
            sources.setdefault(node.identity, node)
    return sources


def count_source_occurrences(root: Node) -> Counter[UUID]:
    """Count how many times each source occurs in the fully expanded expression.

    A shared sub-expression counts once for every path that reaches it, so in
    `u + u` with `u = s * 2` the source `s` occurs twice. Paths are counted over
    the distinct nodes in dependency order (parents before children), which
    keeps the work linear in the number of distinct nodes.

    Args:
        root: The root node of the graph.

    Returns:
        Mapping from source identity to its number of occurrences.

    """
    nodes = list(iter_nodes(root))

    # Number of edges into each distinct node, counted with multiplicity
    indegree: Counter[int] = Counter()
    for node in nodes:
        for child in children(node):
            indegree[id(child)] += 1

    paths: Counter[int] = Counter({id(root): 1})
    counts: Counter[UUID] = Counter()
    queue = deque([root])
    while queue:
        node = queue.popleft()
        if isinstance(node, Source):
            counts[node.identity] += paths[id(node)]
        for child in children(node):
            paths[id(child)] += paths[id(node)]
            indegree[id(child)] -= 1
            if indegree[id(child)] == 0:
                queue.append(child)

    return counts
