"""Consistent, memoized sample evaluation of expression graphs."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from corrsample._context import get_active_cache
from corrsample._errors import CacheInvariantError, UnsupportedStructureError
from corrsample._graph import BinaryOp, Conditional, Filter, Map, Source, UnaryOp, collect_sources

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from uuid import UUID

    from corrsample._cache import SampleCache
    from corrsample._graph import Node
    from corrsample._uncertain import Uncertain

logger = logging.getLogger(__name__)

type SourceLookup = Callable[[Source], Any]


def _check_count(count: int) -> None:
    if isinstance(count, bool) or not isinstance(count, int):
        msg = f"count must be an int, got {type(count).__name__}"
        raise TypeError(msg)
    if count < 0:
        msg = f"count must be non-negative, got {count}"
        raise ValueError(msg)


def evaluate_node(node: Node, lookup: SourceLookup) -> Any:  # noqa: C901
    """Evaluate a graph once, resolving every Source through `lookup`.

    The walk uses an explicit stack, so graph depth is not bounded by the
    interpreter's recursion limit. A node object shared by several parents is
    evaluated once per call.

    Args:
        node: Root of the graph to evaluate.
        lookup: Returns the value a Source takes in this evaluation. It must
            return the same value for every occurrence of the same source.

    Returns:
        The value of the root.

    Raises:
        UnsupportedStructureError: If a Conditional's condition is not a bool.
        TypeError: If the graph contains an object that is not a node.

    """
    values: dict[int, Any] = {}
    # (node, expanded): expanded nodes have their children scheduled already
    stack: list[tuple[Node, bool]] = [(node, False)]

    while stack:
        current, expanded = stack.pop()
        key = id(current)
        if key in values:
            continue

        match current:
            case Source():
                values[key] = lookup(current)
            case UnaryOp(operand=operand, kind=kind):
                if not expanded:
                    stack.extend(((current, True), (operand, False)))
                    continue
                match kind:
                    case Map(func=func):
                        values[key] = func(values[id(operand)])
                    case Filter():
                        values[key] = values[id(operand)]
                    case _:
                        msg = f"Unknown unary kind: {type(kind).__name__}"
                        raise TypeError(msg)
            case BinaryOp(left=left, right=right, operation=operation):
                if not expanded:
                    # Both sides are evaluated, left first, no short-circuiting
                    stack.extend(((current, True), (right, False), (left, False)))
                    continue
                values[key] = operation(values[id(left)], values[id(right)])
            case Conditional(condition=condition, if_true=if_true, if_false=if_false):
                if not expanded:
                    stack.extend(((current, True), (condition, False)))
                    continue
                flag = values[id(condition)]
                if not isinstance(flag, bool):
                    raise UnsupportedStructureError(current, flag)
                # Only the selected branch is scheduled
                branch = if_true if flag else if_false
                if id(branch) not in values:
                    stack.extend(((current, True), (branch, False)))
                    continue
                values[key] = values[id(branch)]
            case _:
                msg = f"Cannot evaluate object of type {type(current).__name__}"
                raise TypeError(msg)

    return values[id(node)]


def draw_once(node: Node) -> Any:
    """Produce one fresh value of a graph.

    Each source is drawn at most once, so repeated references to a source see
    the same value within this single draw. Nothing is cached.
    """
    drawn: dict[UUID, Any] = {}

    def lookup(source: Source) -> Any:
        if source.identity not in drawn:
            drawn[source.identity] = source.draw()
        return drawn[source.identity]

    return evaluate_node(node, lookup)


def _draw_sequence(source: Source, count: int) -> list[Any]:
    return [source.draw() for _ in range(count)]


def _indexed_lookup(source_samples: Mapping[UUID, tuple[Any, ...]], count: int, index: int) -> SourceLookup:
    def lookup(source: Source) -> Any:
        samples = source_samples.get(source.identity)
        if samples is None:
            raise CacheInvariantError(source.identity, count, index, detail="source was not populated")
        if index >= len(samples):
            raise CacheInvariantError(source.identity, count, index, detail=f"sequence has {len(samples)} values")
        return samples[index]

    return lookup


def _evaluate_samples(node: Node, count: int, cache: SampleCache) -> list[Any]:
    sources = collect_sources(node)
    logger.debug("Discovered %d source(s)", len(sources))

    # Every source is fully populated before any index is evaluated
    source_samples = {
        identity: cache.get_or_compute(identity, count, lambda source=source: _draw_sequence(source, count))
        for identity, source in sources.items()
    }

    results = [evaluate_node(node, _indexed_lookup(source_samples, count, index)) for index in range(count)]
    logger.debug("Evaluated %d sample(s)", len(results))
    return results


def sample(handle: Uncertain, count: int, *, cache: SampleCache | None = None) -> tuple[Any, ...]:
    """Produce `count` correlated samples of an uncertain value.

    Every occurrence of the same source in the graph receives the same draw at
    the same sample index. Source sequences and the final sequence are cached
    under (identity, count), so repeated calls with the same count return the
    identical tuple.

    Args:
        handle: The uncertain value to sample.
        count: Number of samples. Zero yields an empty tuple without drawing.
        cache: Cache to use. Defaults to the active cache of the current context.

    Returns:
        Tuple of `count` values.

    Raises:
        TypeError: If count is not an int.
        ValueError: If count is negative.
        UnsupportedStructureError: If a Conditional's condition is not a bool.
        CacheInvariantError: If a cached sequence does not match the requested count.

    Example:
        >>> x = Uncertain.from_draw(lambda: random.gauss(0, 1))
        >>> set(sample(x - x, 100))
        {0.0}

    """
    _check_count(count)
    if cache is None:
        cache = get_active_cache()

    existing = cache.get(handle.identity, count)
    if existing is not None:
        logger.debug("Cache hit for %s (count=%d)", handle.identity, count)
        return existing

    logger.debug("Sampling %s (count=%d)", handle.identity, count)
    return cache.get_or_compute(handle.identity, count, lambda: _evaluate_samples(handle.node, count, cache))
