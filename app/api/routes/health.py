from __future__ import annotations

from fastapi import APIRouter

from app.core.config import settings

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness probe for load balancers and uptime checks.

    Returns:
        dict: ``status`` ("ok") and whether per-client rate limiting is on.
    """

    return {"status": "ok", "rate_limit_enabled": settings.app.rate_limit_enabled}
