"""
Fixed-window, per-client request limiter for the /api routes.
"""
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict
from cachetools import TTLCache

MAX_TRACKED_CLIENTS = 10000


@dataclass
class RateLimitDecision:
    """Outcome of one request against the limiter."""
    allowed: bool
    limit: int
    remaining: int
    reset_seconds: int

    def headers(self) -> Dict[str, str]:
        return {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset": str(self.reset_seconds),
        }


class RateLimiter:
    """Counts requests per client in fixed windows held in memory.

    Windows live in a TTL cache so idle clients age out on their own.
    """

    def __init__(self, max_requests: int = 100, window_ms: int = 15 * 60 * 1000,
                 clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_ms / 1000.0
        self._clock = clock
        # client -> (window_start, count)
        self._windows = TTLCache(maxsize=MAX_TRACKED_CLIENTS, ttl=self.window_seconds, timer=clock)
        self._lock = threading.Lock()

    def hit(self, client: str) -> RateLimitDecision:
        """Record one request from ``client`` and decide whether it may proceed."""
        now = self._clock()
        with self._lock:
            start, count = self._windows.get(client, (now, 0))
            if now - start >= self.window_seconds:
                start, count = now, 0
            count += 1
            self._windows[client] = (start, count)

        reset = max(0, math.ceil(start + self.window_seconds - now))
        return RateLimitDecision(
            allowed=count <= self.max_requests,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - count),
            reset_seconds=reset,
        )

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
