"""Rate limiter interfaces.

The HTTP layer depends on ``AbstractRateLimiter`` and the limiter depends on
``AbstractRateWindowStore``, so window state can live in-process or in a
shared store without touching the admission logic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateWindow:
    """Counter state for one client key.

    Attributes:
        count: Requests admitted in the current window.
        reset_at: UNIX epoch seconds when the window expires.
    """

    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit consume operation.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per window.
        remaining: Remaining requests in the current window (0 when blocked).
        used: Requests counted against the current window, this one included
            when allowed.
        reset_at: UNIX epoch seconds when the current window resets.
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    used: int
    reset_at: float
    retry_after_seconds: int | None


class AbstractRateWindowStore(ABC):
    """Storage backend for per-key rate windows."""

    @abstractmethod
    def get(self, key: str) -> RateWindow | None:
        """Return the stored window for ``key`` or None when absent."""
        raise NotImplementedError

    @abstractmethod
    def compare_and_swap(
        self,
        key: str,
        expected: RateWindow | None,
        new: RateWindow,
    ) -> bool:
        """Atomically replace the window for ``key``.

        Args:
            key: Rate limit key.
            expected: Window the caller read; None means "no window yet".
            new: Window to store.

        Returns:
            True if the stored value still equalled ``expected`` and was
            replaced, False if another writer got there first.
        """
        raise NotImplementedError


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def consume(self, key: str, *, now: float | None = None) -> RateLimitResult:
        """Consume one unit of budget for a given key.

        Args:
            key: Unique identifier (e.g., client IP address).
            now: Optional UNIX time override; defaults to the limiter clock.

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError
