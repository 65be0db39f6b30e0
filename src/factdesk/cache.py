"""Process-wide TTL cache used by the fact-check engine and categorizer."""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")

DEFAULT_TTL_SECONDS = 30 * 60
DEFAULT_MAX_ENTRIES = 500
DEFAULT_EVICT_COUNT = 100


@dataclass(frozen=True)
class CachedEntry(Generic[V]):
    data: V
    stored_at: float


class TtlCache(Generic[K, V]):
    """Dictionary cache whose entries expire ``ttl_seconds`` after insertion.

    An entry is treated as absent once ``now - stored_at > ttl_seconds``.
    The capacity bound is soft: when an insert would exceed ``max_entries``,
    the ``evict_count`` oldest entries (by ``stored_at``) are dropped first.

    Reads, evictions and inserts run under a lock so the cache can be shared
    across threads as well as across tasks on one event loop.

    Args:
        ttl_seconds: Entry lifetime.
        max_entries: Soft capacity bound.
        evict_count: Entries removed on overflow.
        clock: Time source returning seconds, injectable for tests.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        evict_count: int = DEFAULT_EVICT_COUNT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._evict_count = max(1, evict_count)
        self._clock = clock
        self._entries: dict[K, CachedEntry[V]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        """Number of live entries; expired ones are purged first."""
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if now - e.stored_at > self._ttl]
            for key in expired:
                del self._entries[key]
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return self.get(key) is not None  # type: ignore[arg-type]

    def get(self, key: K) -> V | None:
        """Return the cached value, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.stored_at > self._ttl:
                del self._entries[key]
                return None
            return entry.data

    def set(self, key: K, value: V) -> None:
        with self._lock:
            if key not in self._entries and len(self._entries) >= self._max_entries:
                self._evict_oldest()
            self._entries[key] = CachedEntry(data=value, stored_at=self._clock())

    def invalidate(self, key: K) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _evict_oldest(self) -> None:
        oldest = sorted(self._entries.items(), key=lambda item: item[1].stored_at)
        for key, _ in oldest[: self._evict_count]:
            del self._entries[key]
        logger.debug("Evicted %d cache entries", min(self._evict_count, len(oldest)))
