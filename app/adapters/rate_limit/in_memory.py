"""In-memory rate limiting backends.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
- Keys are never evicted, so memory grows with the number of distinct clients.
"""

from __future__ import annotations

import math
import threading
import time
from typing import Callable

from app.adapters.rate_limit.base import (
    AbstractRateLimiter,
    AbstractRateWindowStore,
    RateLimitResult,
    RateWindow,
)


class InMemoryRateWindowStore(AbstractRateWindowStore):
    """Process-local window store backed by a dict and a lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._windows: dict[str, RateWindow] = {}

    def get(self, key: str) -> RateWindow | None:
        with self._lock:
            return self._windows.get(key)

    def compare_and_swap(
        self,
        key: str,
        expected: RateWindow | None,
        new: RateWindow,
    ) -> bool:
        with self._lock:
            if self._windows.get(key) != expected:
                return False
            self._windows[key] = new
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)


class FixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter using a fixed time window per key.

    A key's window opens on its first request and lasts ``window_seconds``.
    Once the clock moves strictly past ``reset_at`` the next request opens a
    fresh window; a request landing exactly on ``reset_at`` still counts
    against the old one.

    Important:
        State lives in the injected store. With the in-memory store each
        worker process enforces its own independent limits.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: float,
        store: AbstractRateWindowStore | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the fixed-window rate limiter.

        Args:
            limit: Maximum number of admitted requests per window.
            window_seconds: Size of the window in seconds.
            store: Window storage backend (defaults to in-memory).
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

        self._limit = limit
        self._window_seconds = window_seconds
        self._store = store if store is not None else InMemoryRateWindowStore()
        self._clock = clock

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def _build_allowed_result(self, window: RateWindow) -> RateLimitResult:
        return RateLimitResult(
            allowed=True,
            limit=self._limit,
            remaining=self._limit - window.count,
            used=window.count,
            reset_at=window.reset_at,
            retry_after_seconds=None,
        )

    def _build_blocked_result(self, *, now: float, window: RateWindow) -> RateLimitResult:
        retry_after = max(0, int(math.ceil(window.reset_at - now)))
        return RateLimitResult(
            allowed=False,
            limit=self._limit,
            remaining=0,
            used=window.count,
            reset_at=window.reset_at,
            retry_after_seconds=retry_after,
        )

    def consume(self, key: str, *, now: float | None = None) -> RateLimitResult:
        """Admit or reject one request for ``key``.

        Args:
            key: Unique identifier for rate limiting (e.g., client IP).
            now: Optional UNIX time override; defaults to the limiter clock.

        Returns:
            RateLimitResult with allowance decision and metadata.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        if now is None:
            now = self._clock()

        # Retry until our read-modify-write lands on an unchanged window.
        while True:
            current = self._store.get(key)

            if current is None or now > current.reset_at:
                fresh = RateWindow(count=1, reset_at=now + self._window_seconds)
                if self._store.compare_and_swap(key, current, fresh):
                    return self._build_allowed_result(fresh)
                continue

            if current.count >= self._limit:
                return self._build_blocked_result(now=now, window=current)

            bumped = RateWindow(count=current.count + 1, reset_at=current.reset_at)
            if self._store.compare_and_swap(key, current, bumped):
                return self._build_allowed_result(bumped)
