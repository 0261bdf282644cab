"""Minimum-spacing rate limiter for upstream API calls."""

import threading
import time
from typing import Callable, Optional


class RateLimiter:
    """Enforce a minimum interval between consecutive calls.

    One instance is shared by everything that talks to the same upstream.
    ``acquire()`` blocks until ``min_interval`` seconds have passed since the
    previous acquisition, then records the new call time.

    Usage:
        limiter = RateLimiter(min_interval=45.0)
        limiter.acquire()
        response = session.get(url)
    """

    def __init__(
        self,
        min_interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_call: Optional[float] = None
        self._lock = threading.Lock()

    def wait_time(self) -> float:
        """Seconds the next acquire() would block for."""
        if self._last_call is None:
            return 0.0
        elapsed = self._clock() - self._last_call
        return max(0.0, self.min_interval - elapsed)

    def acquire(self) -> float:
        """Block until a call is allowed. Returns the seconds waited."""
        with self._lock:
            waited = self.wait_time()
            if waited > 0:
                self._sleep(waited)
            self._last_call = self._clock()
            return waited

    def reset(self) -> None:
        """Forget the previous call so the next acquire() is immediate."""
        with self._lock:
            self._last_call = None
