"""Correlation-preserving sampling of uncertain values."""

__all__ = [
    "BinaryOp",
    "BinaryOperation",
    "CacheInvariantError",
    "CacheStats",
    "Conditional",
    "Filter",
    "Map",
    "Node",
    "SampleCache",
    "SampleSet",
    "SamplingError",
    "Source",
    "UnaryOp",
    "Uncertain",
    "UnsupportedStructureError",
    "collect_sources",
    "draw_once",
    "evaluate_node",
    "export_samples_to_toml",
    "get_active_cache",
    "get_default_cache",
    "load_samples_from_toml",
    "sample",
    "use_cache",
]

from ._cache import CacheStats, SampleCache
from ._context import get_active_cache, get_default_cache, use_cache
from ._errors import CacheInvariantError, SamplingError, UnsupportedStructureError
from ._eval_engine import draw_once, evaluate_node, sample
from ._graph import BinaryOp, BinaryOperation, Conditional, Filter, Map, Node, Source, UnaryOp, collect_sources
from ._io import SampleSet, export_samples_to_toml, load_samples_from_toml
from ._uncertain import Uncertain
