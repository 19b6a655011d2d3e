"""Rate limiting wiring for the HTTP layer.

Design goals:
- Minimal coupling: routes ask for a limiter and a client key only.
- Swap-friendly: window storage sits behind ``AbstractRateWindowStore``.
- Config-driven: limit and window come from settings.

Rate limiting strategy:
- Fixed window per client key, the window opening on the key's first request.
- Client key is the first proxy-reported address, not an authenticated
  identity. It is a fairness heuristic and trivially spoofable.
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from typing import Mapping

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.adapters.rate_limit.in_memory import FixedWindowRateLimiter, InMemoryRateWindowStore
from app.core.config import settings

UNKNOWN_CLIENT = "unknown"

# Checked in order; the first non-empty value wins.
CLIENT_IP_HEADERS = ("x-forwarded-for", "x-real-ip", "x-vercel-proxied-for")


_limiter: AbstractRateLimiter | None = None
_limiter_config: tuple[int, int] | None = None


def get_rate_limiter() -> AbstractRateLimiter | None:
    """Return the process-wide rate limiter, or None when disabled.

    The instance is cached in-module to preserve state across requests.
    If configuration changes (primarily in tests), the limiter is rebuilt
    with an empty store.
    """

    global _limiter, _limiter_config

    if not settings.app.rate_limit_enabled:
        return None

    config = (
        settings.app.rate_limit_requests,
        settings.app.rate_limit_window_seconds,
    )

    if _limiter is None or _limiter_config != config:
        _limiter = FixedWindowRateLimiter(
            limit=settings.app.rate_limit_requests,
            window_seconds=settings.app.rate_limit_window_seconds,
            store=InMemoryRateWindowStore(),
        )
        _limiter_config = config

    return _limiter


def reset_rate_limiter() -> None:
    """Drop the cached limiter so the next request starts from empty state."""

    global _limiter, _limiter_config
    _limiter = None
    _limiter_config = None


def resolve_client_key(headers: Mapping[str, str]) -> str:
    """Derive the rate limit key from proxy headers.

    Precedence: first entry of X-Forwarded-For, then X-Real-IP, then
    X-Vercel-Proxied-For, then the ``"unknown"`` sentinel.

    Args:
        headers: Request headers (case-insensitive mapping).

    Returns:
        str: Client key.
    """

    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    for name in CLIENT_IP_HEADERS[1:]:
        value = headers.get(name)
        if value:
            return value

    return UNKNOWN_CLIENT


def hash_client_key(key: str) -> str:
    """Hash the client key for logging without exposing addresses."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def format_reset_timestamp(reset_at: float) -> str:
    """Render epoch seconds as ISO-8601 UTC with milliseconds, e.g.
    ``2025-01-01T12:00:00.000Z``."""
    moment = datetime.fromtimestamp(reset_at, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    """Build X-RateLimit-* headers (plus Retry-After when blocked)."""

    if not settings.app.rate_limit_include_headers:
        return {}

    headers: dict[str, str] = {}
    if not result.allowed and result.retry_after_seconds is not None:
        headers["Retry-After"] = str(result.retry_after_seconds)
    headers["X-RateLimit-Limit"] = str(result.limit)
    headers["X-RateLimit-Remaining"] = str(result.remaining)
    headers["X-RateLimit-Reset"] = format_reset_timestamp(result.reset_at)
    headers["X-RateLimit-Used"] = str(result.used)
    return headers
