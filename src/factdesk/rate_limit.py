"""Fixed-window rate limiter for article generation."""

import threading
import time
from collections.abc import Callable

DEFAULT_WINDOW_SECONDS = 60 * 60


class RateLimiter:
    """Allow at most ``limit`` acquisitions per fixed window.

    The window restarts by wall-clock comparison: once more than
    ``window_seconds`` have passed since the window started, the counter
    resets. This is advisory and process-local, not a global barrier.

    Args:
        limit: Acquisitions allowed per window.
        window_seconds: Window length.
        clock: Time source returning seconds, injectable for tests.
    """

    def __init__(
        self,
        limit: int = 50,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._limit = limit
        self._window = window_seconds
        self._clock = clock
        self._count = 0
        self._window_start = clock()
        self._lock = threading.Lock()

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def remaining(self) -> int:
        with self._lock:
            self._maybe_reset()
            return max(0, self._limit - self._count)

    def try_acquire(self) -> bool:
        """Take one slot from the current window; False if none are left."""
        with self._lock:
            self._maybe_reset()
            if self._count >= self._limit:
                return False
            self._count += 1
            return True

    def _maybe_reset(self) -> None:
        now = self._clock()
        if now - self._window_start > self._window:
            self._count = 0
            self._window_start = now
