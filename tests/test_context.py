"""Tests for the active cache context."""

import corrsample as cs
from corrsample._context import get_active_cache, get_default_cache, use_cache


class TestActiveCache:
    def test_default_cache_is_singleton(self) -> None:
        assert get_default_cache() is get_default_cache()

    def test_active_defaults_to_process_cache(self) -> None:
        assert get_active_cache() is get_default_cache()

    def test_use_cache_installs_and_restores(self) -> None:
        cache = cs.SampleCache()
        with use_cache(cache) as installed:
            assert installed is cache
            assert get_active_cache() is cache
        assert get_active_cache() is get_default_cache()

    def test_nested_use_cache(self) -> None:
        outer, inner = cs.SampleCache(), cs.SampleCache()
        with use_cache(outer):
            with use_cache(inner):
                assert get_active_cache() is inner
            assert get_active_cache() is outer

    def test_explicit_cache_wins_over_context(self) -> None:
        installed, explicit = cs.SampleCache(), cs.SampleCache()
        x = cs.Uncertain.from_draw(lambda: 1.0) + 1
        with use_cache(installed):
            x.take_samples(2, cache=explicit)
        assert (x.identity, 2) in explicit
        assert len(installed) == 0
