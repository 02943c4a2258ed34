"""Exceptions raised by the sampling engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID

    from ._graph import Node


class SamplingError(Exception):
    """Base class for errors raised while producing samples."""


class UnsupportedStructureError(SamplingError):
    """Raised when a node combination has no evaluation rule.

    The only such combination is a Conditional whose condition evaluates to a
    non-boolean value.
    """

    def __init__(self, node: Node, value: object) -> None:
        self.node = node
        self.value = value
        super().__init__(f"Conditional requires a boolean condition, got {type(value).__name__}: {value!r}")


class CacheInvariantError(SamplingError):
    """Raised when a cached sequence does not cover a requested sample index.

    This indicates a cache/count mismatch, never a condition to recover from
    by drawing again.
    """

    def __init__(self, identity: UUID, count: int, index: int | None = None, detail: str = "") -> None:
        self.identity = identity
        self.count = count
        self.index = index
        message = f"Cache invariant violated for ({identity}, {count})"
        if index is not None:
            message += f" at index {index}"
        if detail:
            message += f": {detail}"
        super().__init__(message)
