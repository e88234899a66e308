"""Fixed-window request throttling for the authentication endpoints."""

from __future__ import annotations

import time
from collections.abc import Callable
from threading import Lock

from threadline.core.settings import settings


class RateLimiter:
    """Count hits per key inside fixed windows of ``window_seconds``.

    State lives in process memory; every worker enforces its own budget.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = Lock()
        self._hits: dict[str, tuple[float, int]] = {}

    def hit(self, key: str) -> bool:
        """Record a request for ``key``; return False once the budget is spent."""
        now = self._clock()
        with self._lock:
            self._evict(now)
            started, count = self._hits.get(key, (now, 0))
            if now - started >= self.window_seconds:
                started, count = now, 0
            if count >= self.max_requests:
                self._hits[key] = (started, count)
                return False
            self._hits[key] = (started, count + 1)
            return True

    def retry_after(self, key: str) -> int:
        """Return the seconds left until ``key`` gets a fresh window."""
        with self._lock:
            started, _ = self._hits.get(key, (self._clock(), 0))
        remaining = self.window_seconds - (self._clock() - started)
        return max(0, int(remaining) + 1)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()

    def _evict(self, now: float) -> None:
        expired = [
            key for key, (started, _) in self._hits.items()
            if now - started >= self.window_seconds
        ]
        for key in expired:
            del self._hits[key]


general_limiter = RateLimiter(
    settings.rate_limit_max_requests,
    settings.rate_limit_window_seconds,
)
login_limiter = RateLimiter(
    settings.login_rate_limit_max_requests,
    settings.rate_limit_window_seconds,
)
