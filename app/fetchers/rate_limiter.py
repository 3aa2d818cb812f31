"""Per-platform spacing of upstream requests."""
from __future__ import annotations

import threading
import time


class RateLimiter:
    """Keeps calls to one upstream at least ``min_interval`` seconds apart.

    Each caller reserves the next free slot under the lock and sleeps
    outside it, so concurrent requests queue in arrival order.
    """

    def __init__(self, min_interval: float = 0.0, clock=time.monotonic, sleep=time.sleep):
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._next_slot = None
        self._lock = threading.Lock()

    def wait(self) -> float:
        """Block until this caller's slot; returns the seconds slept."""
        with self._lock:
            now = self._clock()
            slot = now if self._next_slot is None else max(now, self._next_slot)
            self._next_slot = slot + self.min_interval
        delay = slot - now
        if delay > 0:
            self._sleep(delay)
        return delay


_limiters: dict[str, RateLimiter] = {}
_limiters_lock = threading.Lock()


def limiter_for(platform: str, min_interval: float) -> RateLimiter:
    """Shared limiter for ``platform``; the latest configured interval applies."""
    with _limiters_lock:
        limiter = _limiters.setdefault(platform, RateLimiter(min_interval))
        limiter.min_interval = min_interval
        return limiter
