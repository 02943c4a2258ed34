"""Tests for the sample cache."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from uuid import uuid4

import pytest

from corrsample._cache import CacheStats, SampleCache
from corrsample._errors import CacheInvariantError


class TestGet:
    def test_missing_key(self) -> None:
        cache = SampleCache()
        assert cache.get(uuid4(), 3) is None

    def test_lookup_does_not_insert(self) -> None:
        cache = SampleCache()
        identity = uuid4()
        cache.get(identity, 3)
        assert (identity, 3) not in cache
        assert len(cache) == 0


class TestGetOrCompute:
    def test_computes_and_stores(self) -> None:
        cache = SampleCache()
        identity = uuid4()
        result = cache.get_or_compute(identity, 3, lambda: [1, 2, 3])
        assert result == (1, 2, 3)
        assert cache.get(identity, 3) is result

    def test_producer_not_called_on_hit(self) -> None:
        cache = SampleCache()
        identity = uuid4()
        calls = []

        def producer() -> list[int]:
            calls.append(1)
            return [7]

        first = cache.get_or_compute(identity, 1, producer)
        second = cache.get_or_compute(identity, 1, producer)
        assert first is second
        assert len(calls) == 1

    def test_counts_are_independent_slots(self) -> None:
        cache = SampleCache()
        identity = uuid4()
        cache.get_or_compute(identity, 2, lambda: [1, 2])
        cache.get_or_compute(identity, 3, lambda: [9, 9, 9])
        assert cache.get(identity, 2) == (1, 2)
        assert cache.get(identity, 3) == (9, 9, 9)
        assert len(cache) == 2

    def test_zero_count(self) -> None:
        cache = SampleCache()
        identity = uuid4()
        assert cache.get_or_compute(identity, 0, list) == ()
        assert cache.get(identity, 0) == ()

    def test_failing_producer_leaves_no_entry(self) -> None:
        cache = SampleCache()
        identity = uuid4()

        def producer() -> list[int]:
            msg = "draw failed"
            raise RuntimeError(msg)

        with pytest.raises(RuntimeError, match="draw failed"):
            cache.get_or_compute(identity, 2, producer)
        assert (identity, 2) not in cache
        assert cache.pending_keys == 0

        # A later request recomputes cleanly
        assert cache.get_or_compute(identity, 2, lambda: [1, 2]) == (1, 2)

    def test_wrong_length_is_rejected(self) -> None:
        cache = SampleCache()
        identity = uuid4()
        with pytest.raises(CacheInvariantError, match="producer returned 2 values"):
            cache.get_or_compute(identity, 3, lambda: [1, 2])
        assert (identity, 3) not in cache
        assert cache.pending_keys == 0

    def test_reentrant_producer_for_same_key(self) -> None:
        cache = SampleCache()
        identity = uuid4()

        def outer() -> list[int]:
            cache.get_or_compute(identity, 1, lambda: [1])
            return [2]

        result = cache.get_or_compute(identity, 1, outer)
        assert result == (1,)
        assert cache.get(identity, 1) is result


class TestConcurrency:
    def test_producer_runs_once_under_contention(self) -> None:
        cache = SampleCache()
        identity = uuid4()
        calls = []
        barrier = threading.Barrier(8)

        def producer() -> list[int]:
            calls.append(1)
            time.sleep(0.05)
            return [1, 2, 3]

        def worker() -> tuple[int, ...]:
            barrier.wait()
            return cache.get_or_compute(identity, 3, producer)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: worker(), range(8)))

        assert len(calls) == 1
        assert all(r is results[0] for r in results)

    def test_unrelated_keys_do_not_block(self) -> None:
        cache = SampleCache()
        slow_started = threading.Event()
        release = threading.Event()

        def slow() -> list[int]:
            slow_started.set()
            release.wait(timeout=5)
            return [0]

        with ThreadPoolExecutor(max_workers=1) as pool:
            future = pool.submit(cache.get_or_compute, uuid4(), 1, slow)
            assert slow_started.wait(timeout=5)
            # Completes while the other key's producer is still running
            assert cache.get_or_compute(uuid4(), 1, lambda: [1]) == (1,)
            release.set()
            assert future.result() == (0,)


class TestHousekeeping:
    def test_stats(self) -> None:
        cache = SampleCache()
        identity = uuid4()
        cache.get_or_compute(identity, 1, lambda: [1])
        cache.get_or_compute(identity, 1, lambda: [1])
        assert cache.stats == CacheStats(misses=1, entries=1)

    def test_clear(self) -> None:
        cache = SampleCache()
        identity = uuid4()
        cache.get_or_compute(identity, 1, lambda: [1])
        cache.clear()
        assert len(cache) == 0
        assert cache.stats == CacheStats(misses=0, entries=0)

    def test_hits_do_not_take_the_shared_lock(self) -> None:
        cache = SampleCache()
        identity = uuid4()
        stored = cache.get_or_compute(identity, 1, lambda: [1])

        # Holding the cache-wide lock must not block reads of stored keys
        with cache._guard:  # noqa: SLF001
            with ThreadPoolExecutor(max_workers=1) as pool:
                future = pool.submit(cache.get_or_compute, identity, 1, lambda: [2])
                assert future.result(timeout=5) is stored

    def test_key_locks_released_after_success(self) -> None:
        cache = SampleCache()
        cache.get_or_compute(uuid4(), 1, lambda: [1])
        assert cache.pending_keys == 0


class TestFailedProducerUnderContention:
    def test_waiter_retries_after_failure(self) -> None:
        cache = SampleCache()
        identity = uuid4()
        started = threading.Event()
        release = threading.Event()
        calls = []

        def failing() -> list[int]:
            calls.append("failing")
            started.set()
            release.wait(timeout=5)
            msg = "draw failed"
            raise RuntimeError(msg)

        def succeeding() -> list[int]:
            calls.append("succeeding")
            return [5]

        with ThreadPoolExecutor(max_workers=2) as pool:
            first = pool.submit(cache.get_or_compute, identity, 1, failing)
            assert started.wait(timeout=5)
            second = pool.submit(cache.get_or_compute, identity, 1, succeeding)
            release.set()
            with pytest.raises(RuntimeError, match="draw failed"):
                first.result(timeout=5)
            assert second.result(timeout=5) == (5,)

        assert calls == ["failing", "succeeding"]
        assert cache.pending_keys == 0
