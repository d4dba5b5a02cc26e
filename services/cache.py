"""
In-memory TTL cache for processed learning results.
"""
import asyncio
import threading
import time
from typing import Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from app_logging import log_with_context
from config import config
from models import ResultEnvelope

V = TypeVar("V")


class ResultCache(Generic[V]):
    """Process-wide expiring key/value store.

    Every entry lives for ``ttl_seconds`` from its last ``set``. Expiry is
    checked on read, so an entry the sweeper has not reached yet still
    behaves as a miss. ``sweep`` only reclaims memory.

    There is no size bound; entries are small and always expire.
    """

    def __init__(self, ttl_seconds: int = 3600, check_period: int = 600,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize cache.

        Args:
            ttl_seconds: Time to live for cached items in seconds
            check_period: Seconds between background sweeps of expired items
            clock: Monotonic time source, injectable for tests
        """
        self._cache: Dict[str, Tuple[V, float]] = {}  # key -> (value, expires_at)
        self._ttl = ttl_seconds
        self._check_period = check_period
        self._clock = clock
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._expired = 0

    @property
    def ttl(self) -> int:
        return self._ttl

    @property
    def check_period(self) -> int:
        return self._check_period

    def get(self, key: str) -> Optional[V]:
        """
        Get the live value for ``key``.

        Args:
            key: Content fingerprint

        Returns:
            Cached value or None if not found/expired
        """
        with self._lock:
            entry = self._cache.get(key)
            if entry is not None:
                value, expires_at = entry
                if self._clock() < expires_at:
                    self._hits += 1
                    log_with_context("info", f"Cache hit: {key}")
                    return value
                del self._cache[key]
                self._expired += 1

            self._misses += 1
        log_with_context("info", f"Cache miss: {key}")
        return None

    def set(self, key: str, value: V) -> bool:
        """
        Insert or overwrite ``key``, restarting its TTL window.

        Args:
            key: Content fingerprint
            value: Value to cache

        Returns:
            True once stored
        """
        with self._lock:
            self._cache[key] = (value, self._clock() + self._ttl)
            self._sets += 1
        log_with_context("info", f"Cache set: {key}")
        return True

    def delete(self, key: str) -> int:
        """Remove ``key``; returns the number of removed entries."""
        with self._lock:
            return 1 if self._cache.pop(key, None) is not None else 0

    def clear(self) -> None:
        """Clear all cached results."""
        with self._lock:
            self._cache.clear()
        log_with_context("info", "Cache cleared")

    def keys(self) -> List[str]:
        """Keys of all live entries."""
        now = self._clock()
        with self._lock:
            return [key for key, (_, expires_at) in self._cache.items() if now < expires_at]

    def size(self) -> int:
        """Get number of stored items, expired-but-unswept included."""
        with self._lock:
            return len(self._cache)

    def sweep(self) -> int:
        """Drop expired entries and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, (_, expires_at) in self._cache.items() if now >= expires_at]
            for key in expired:
                del self._cache[key]
            self._expired += len(expired)

        if expired:
            log_with_context("debug", f"Cache sweep removed {len(expired)} expired entries")
        return len(expired)

    def get_stats(self) -> Dict[str, int]:
        """Counters for monitoring."""
        with self._lock:
            return {
                "keys": len(self._cache),
                "hits": self._hits,
                "misses": self._misses,
                "sets": self._sets,
                "expired": self._expired,
                "ttl": self._ttl,
            }

    async def run_sweeper(self) -> None:
        """Sweep every ``check_period`` seconds until cancelled."""
        log_with_context("info", f"Cache sweeper started (every {self._check_period}s, ttl={self._ttl}s)")
        while True:
            await asyncio.sleep(self._check_period)
            self.sweep()


# Global cache instance
result_cache: ResultCache[ResultEnvelope] = ResultCache(
    ttl_seconds=config.cache_ttl,
    check_period=config.cache_check_period,
)
