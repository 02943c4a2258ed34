"""Context variables for corrsample.

This module holds the cache used when no cache is passed explicitly.
It is kept separate to avoid circular imports.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING

from ._cache import SampleCache

if TYPE_CHECKING:
    from collections.abc import Iterator

# Cache installed for the current context by use_cache(). None means the
# process-wide default cache applies.
_active_cache_var: ContextVar[SampleCache | None] = ContextVar("active_cache", default=None)

_default_cache: SampleCache | None = None
_default_cache_lock = threading.Lock()


def get_default_cache() -> SampleCache:
    """Get the process-wide default cache, creating it on first use."""
    global _default_cache  # noqa: PLW0603
    with _default_cache_lock:
        if _default_cache is None:
            _default_cache = SampleCache()
        return _default_cache


def get_active_cache() -> SampleCache:
    """Get the cache for the current context.

    Returns the cache installed by use_cache(), or the process-wide default.
    """
    cache = _active_cache_var.get()
    if cache is None:
        return get_default_cache()
    return cache


@contextmanager
def use_cache(cache: SampleCache) -> Iterator[SampleCache]:
    """Context manager installing a cache for the enclosed block.

    Example:
        with use_cache(SampleCache()) as cache:
            samples = handle.take_samples(100)
        assert (handle.identity, 100) in cache

    """
    token = _active_cache_var.set(cache)
    try:
        yield cache
    finally:
        _active_cache_var.reset(token)
