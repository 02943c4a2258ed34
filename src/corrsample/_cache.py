"""Process-wide store of produced sample sequences."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ._errors import CacheInvariantError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from uuid import UUID

logger = logging.getLogger(__name__)

type CacheKey = tuple[UUID, int]


@dataclass(frozen=True, slots=True)
class CacheStats:
    """Snapshot of cache usage counters.

    Hits are not counted, so reads of stored entries never touch a shared lock.

    Attributes:
        misses: Producer runs, one per stored or failed attempt.
        entries: Number of stored (identity, count) entries.

    """

    misses: int
    entries: int


@dataclass(slots=True)
class _KeySlot:
    """Lock for one absent key plus the number of callers holding or awaiting it."""

    lock: threading.RLock = field(default_factory=threading.RLock)
    users: int = 0


class SampleCache:
    """Mapping from (identity, count) to an immutable sequence of values.

    Each key is an independent slot: the sequence stored for count N is not
    related to the one stored for any other count. Once stored, an entry is
    never replaced and every lookup returns the same tuple object.

    Producers run at most once per key, even when several threads request the
    same absent key. Each absent key gets its own lock, so unrelated keys never
    wait on each other. Reads of present keys take no lock. A key's lock is
    dropped as soon as no caller holds or awaits it, whether its producer
    succeeded or failed.

    Example:
        >>> cache = SampleCache()
        >>> cache.get_or_compute(identity, 3, lambda: [1, 2, 3])
        (1, 2, 3)
        >>> cache.get(identity, 3)
        (1, 2, 3)

    """

    def __init__(self) -> None:
        self._entries: dict[CacheKey, tuple[Any, ...]] = {}
        self._slots: dict[CacheKey, _KeySlot] = {}
        self._guard = threading.Lock()
        self._misses = 0

    def get(self, identity: UUID, count: int) -> tuple[Any, ...] | None:
        """Look up a stored sequence without inserting anything.

        Returns:
            The stored sequence, or None if the key is absent.

        """
        return self._entries.get((identity, count))

    def get_or_compute(
        self,
        identity: UUID,
        count: int,
        producer: Callable[[], Iterable[Any]],
    ) -> tuple[Any, ...]:
        """Return the sequence stored for a key, producing it if absent.

        The producer is called at most once per key. Concurrent callers for the
        same absent key block until the first one has stored its result and
        then receive that same sequence. If the producer raises, nothing is
        stored and the exception propagates.

        Args:
            identity: Identity of the node the samples belong to.
            count: Number of samples.
            producer: Zero-argument callable returning exactly `count` values.

        Returns:
            The stored sequence of length `count`.

        Raises:
            CacheInvariantError: If the producer returns the wrong number of values.

        """
        key = (identity, count)
        existing = self._entries.get(key)
        if existing is not None:
            return existing

        slot = self._acquire_slot(key)
        try:
            with slot.lock:
                # Another caller may have stored the entry while we waited
                existing = self._entries.get(key)
                if existing is not None:
                    return existing

                with self._guard:
                    self._misses += 1
                logger.debug("Producing %d samples for %s", count, identity)
                values = tuple(producer())
                if len(values) != count:
                    raise CacheInvariantError(
                        identity,
                        count,
                        detail=f"producer returned {len(values)} values",
                    )
                # setdefault keeps an entry stored by a re-entrant producer for the same key
                return self._entries.setdefault(key, values)
        finally:
            self._release_slot(key, slot)

    def clear(self) -> None:
        """Drop every stored entry and reset the counters."""
        with self._guard:
            self._entries.clear()
            self._misses = 0
        logger.debug("Sample cache cleared")

    @property
    def stats(self) -> CacheStats:
        """Current usage counters."""
        with self._guard:
            return CacheStats(misses=self._misses, entries=len(self._entries))

    @property
    def pending_keys(self) -> int:
        """Number of keys with a producer running or awaited."""
        with self._guard:
            return len(self._slots)

    def _acquire_slot(self, key: CacheKey) -> _KeySlot:
        with self._guard:
            slot = self._slots.get(key)
            if slot is None:
                slot = self._slots[key] = _KeySlot()
            slot.users += 1
            return slot

    def _release_slot(self, key: CacheKey, slot: _KeySlot) -> None:
        with self._guard:
            slot.users -= 1
            if slot.users == 0 and self._slots.get(key) is slot:
                del self._slots[key]

    def __contains__(self, key: object) -> bool:
        """Check if an (identity, count) key is stored."""
        return key in self._entries

    def __len__(self) -> int:
        """Return the number of stored entries."""
        return len(self._entries)
