"""Node types of the expression graph."""

from __future__ import annotations

import operator
from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from collections.abc import Callable


class BinaryOperation(StrEnum):
    """Built-in binary operators usable as a BinaryOp operation."""

    ADD = auto()
    SUB = auto()
    MUL = auto()
    DIV = auto()
    POW = auto()
    LT = auto()  # Comparisons produce boolean graphs
    LE = auto()
    GT = auto()
    GE = auto()
    AND = auto()
    OR = auto()

    def __call__(self, left: Any, right: Any) -> Any:
        """Apply the operator to two evaluated operands."""
        return _BINARY_FUNCTIONS[self](left, right)


_BINARY_FUNCTIONS: dict[BinaryOperation, Callable[[Any, Any], Any]] = {
    BinaryOperation.ADD: operator.add,
    BinaryOperation.SUB: operator.sub,
    BinaryOperation.MUL: operator.mul,
    BinaryOperation.DIV: operator.truediv,
    BinaryOperation.POW: operator.pow,
    BinaryOperation.LT: operator.lt,
    BinaryOperation.LE: operator.le,
    BinaryOperation.GT: operator.gt,
    BinaryOperation.GE: operator.ge,
    BinaryOperation.AND: lambda left, right: left and right,
    BinaryOperation.OR: lambda left, right: left or right,
}


@dataclass(frozen=True, slots=True, eq=False)
class Source:
    """A leaf node drawing one value from a random source.

    The identity is fixed when the node is created and is the cache key for
    the source's own samples. Every occurrence of the same Source object in a
    graph receives the same value at a given sample index.

    Attributes:
        draw: Zero-argument callable producing one value. May be stochastic.
        identity: Stable unique identifier of this source.

    """

    draw: Callable[[], Any]
    identity: UUID = field(default_factory=uuid4)


@dataclass(frozen=True, slots=True)
class Map:
    """Unary kind that transforms the operand value."""

    func: Callable[[Any], Any]


@dataclass(frozen=True, slots=True)
class Filter:
    """Unary kind carrying a predicate.

    Evaluation passes the operand through unchanged; rejection sampling on the
    predicate is left to callers layered on top of the engine.
    """

    predicate: Callable[[Any], bool]


UnaryKind = Map | Filter


@dataclass(frozen=True, slots=True, eq=False)
class UnaryOp:
    """A node applying a unary kind to a single operand."""

    operand: Node
    kind: UnaryKind


@dataclass(frozen=True, slots=True, eq=False)
class BinaryOp:
    """A node combining two operands.

    Both operands are always evaluated, even when the operation could
    short-circuit.
    """

    left: Node
    right: Node
    operation: Callable[[Any, Any], Any]


@dataclass(frozen=True, slots=True, eq=False)
class Conditional:
    """A node selecting one of two branches by a boolean condition graph."""

    condition: Node
    if_true: Node
    if_false: Node


Node = Source | UnaryOp | BinaryOp | Conditional
