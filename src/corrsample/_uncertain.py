"""The uncertain value handle and its builder surface."""

from __future__ import annotations

import operator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from ._eval_engine import draw_once, sample
from ._graph import BinaryOp, BinaryOperation, Conditional, Filter, Map, Source, UnaryOp, collect_sources

if TYPE_CHECKING:
    from collections.abc import Callable

    from ._cache import SampleCache
    from ._graph import Node


def _lift(value: Any) -> Uncertain:
    """Wrap a plain value as a constant uncertain value."""
    if isinstance(value, Uncertain):
        return value
    return Uncertain.point(value)


@dataclass(frozen=True, slots=True, eq=False)
class Uncertain:
    """An uncertain value: an expression graph with its own identity.

    The identity keys the fully evaluated sample sequence in the cache. It is
    distinct from the identities of the sources inside the graph, except for a
    handle wrapping a bare Source, where the two coincide.

    Comparison operators build boolean uncertain values. `==` is not
    overloaded; handles compare by object identity.

    Attributes:
        node: Root of the expression graph.
        identity: Cache key for this handle's samples.

    Example:
        >>> x = Uncertain.from_draw(lambda: random.uniform(0, 1))
        >>> y = x * 2 + 1
        >>> samples = y.take_samples(1000)

    """

    node: Node
    identity: UUID = field(default_factory=uuid4)

    @classmethod
    def from_source(cls, source: Source) -> Uncertain:
        """Wrap a Source node. The handle shares the source's identity."""
        return cls(node=source, identity=source.identity)

    @classmethod
    def from_draw(cls, draw: Callable[[], Any]) -> Uncertain:
        """Create an uncertain value from a zero-argument sampling function."""
        return cls.from_source(Source(draw))

    @classmethod
    def point(cls, value: Any) -> Uncertain:
        """Create an uncertain value that always takes `value`."""
        return cls.from_draw(lambda: value)

    @classmethod
    def conditional(cls, condition: Uncertain, if_true: Any, if_false: Any) -> Uncertain:
        """Select between two values per sample by a boolean uncertain value."""
        return cls(node=Conditional(condition.node, _lift(if_true).node, _lift(if_false).node))

    def draw(self) -> Any:
        """Draw one fresh value of the whole graph, bypassing the cache."""
        if isinstance(self.node, Source):
            return self.node.draw()
        return draw_once(self.node)

    def take_samples(self, count: int, *, cache: SampleCache | None = None) -> tuple[Any, ...]:
        """Produce `count` correlated samples. See corrsample.sample."""
        return sample(self, count, cache=cache)

    def sources(self) -> dict[UUID, Source]:
        """Distinct sources reachable from this value, keyed by identity."""
        return collect_sources(self.node)

    def map(self, func: Callable[[Any], Any]) -> Uncertain:
        """Transform every sample with `func`."""
        return Uncertain(node=UnaryOp(self.node, Map(func)))

    def filter(self, predicate: Callable[[Any], bool]) -> Uncertain:
        """Attach a predicate. Samples pass through unchanged."""
        return Uncertain(node=UnaryOp(self.node, Filter(predicate)))

    def combine(self, other: Any, operation: Callable[[Any, Any], Any]) -> Uncertain:
        """Combine with another value sample by sample."""
        return Uncertain(node=BinaryOp(self.node, _lift(other).node, operation))

    def _rcombine(self, other: Any, operation: BinaryOperation) -> Uncertain:
        return _lift(other).combine(self, operation)

    def __add__(self, other: Any) -> Uncertain:
        return self.combine(other, BinaryOperation.ADD)

    def __radd__(self, other: Any) -> Uncertain:
        return self._rcombine(other, BinaryOperation.ADD)

    def __sub__(self, other: Any) -> Uncertain:
        return self.combine(other, BinaryOperation.SUB)

    def __rsub__(self, other: Any) -> Uncertain:
        return self._rcombine(other, BinaryOperation.SUB)

    def __mul__(self, other: Any) -> Uncertain:
        return self.combine(other, BinaryOperation.MUL)

    def __rmul__(self, other: Any) -> Uncertain:
        return self._rcombine(other, BinaryOperation.MUL)

    def __truediv__(self, other: Any) -> Uncertain:
        return self.combine(other, BinaryOperation.DIV)

    def __rtruediv__(self, other: Any) -> Uncertain:
        return self._rcombine(other, BinaryOperation.DIV)

    def __pow__(self, other: Any) -> Uncertain:
        return self.combine(other, BinaryOperation.POW)

    def __rpow__(self, other: Any) -> Uncertain:
        return self._rcombine(other, BinaryOperation.POW)

    def __neg__(self) -> Uncertain:
        return self.map(operator.neg)

    def __lt__(self, other: Any) -> Uncertain:
        return self.combine(other, BinaryOperation.LT)

    def __le__(self, other: Any) -> Uncertain:
        return self.combine(other, BinaryOperation.LE)

    def __gt__(self, other: Any) -> Uncertain:
        return self.combine(other, BinaryOperation.GT)

    def __ge__(self, other: Any) -> Uncertain:
        return self.combine(other, BinaryOperation.GE)

    def __and__(self, other: Any) -> Uncertain:
        return self.combine(other, BinaryOperation.AND)

    def __rand__(self, other: Any) -> Uncertain:
        return self._rcombine(other, BinaryOperation.AND)

    def __or__(self, other: Any) -> Uncertain:
        return self.combine(other, BinaryOperation.OR)

    def __ror__(self, other: Any) -> Uncertain:
        return self._rcombine(other, BinaryOperation.OR)

    def __invert__(self) -> Uncertain:
        return self.map(operator.not_)

    def __bool__(self) -> bool:
        msg = "The truth value of an Uncertain is ambiguous; use take_samples() or Uncertain.conditional()"
        raise TypeError(msg)

    def __repr__(self) -> str:
        """Return a short representation naming the identity and root kind."""
        return f"Uncertain({type(self.node).__name__}, identity={self.identity})"
