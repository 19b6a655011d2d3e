"""Rate limiting adapters.

This package provides a small abstraction layer so the service can start with
an in-memory window store and later migrate to a shared store without
changing the limiter or the API layer.
"""

from app.adapters.rate_limit.base import (
    AbstractRateLimiter,
    AbstractRateWindowStore,
    RateLimitResult,
    RateWindow,
)
from app.adapters.rate_limit.in_memory import FixedWindowRateLimiter, InMemoryRateWindowStore

__all__ = [
    "AbstractRateLimiter",
    "AbstractRateWindowStore",
    "FixedWindowRateLimiter",
    "InMemoryRateWindowStore",
    "RateLimitResult",
    "RateWindow",
]
