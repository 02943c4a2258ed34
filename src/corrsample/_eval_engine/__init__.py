"""Evaluation engine module for corrsample.

This module produces correlated samples of expression graphs. Sources are
drawn once per (identity, count) and replayed by index across the graph.

Key functions:
- sample: Cached, correlation-preserving samples of a handle
- evaluate_node: One evaluation of a graph against a source lookup
- draw_once: One fresh, uncached value of a graph
"""

from ._engine import draw_once, evaluate_node, sample

__all__ = [
    "draw_once",
    "evaluate_node",
    "sample",
]
