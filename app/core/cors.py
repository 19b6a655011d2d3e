"""Open CORS headers for the public conversion endpoint."""

from __future__ import annotations

from app.core.config import settings

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def preflight_headers() -> dict[str, str]:
    """CORS headers for OPTIONS responses, including the cache lifetime."""
    return {
        **CORS_HEADERS,
        "Access-Control-Max-Age": str(settings.app.cors_max_age_seconds),
    }
