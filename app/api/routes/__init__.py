from __future__ import annotations

from app.api.routes.convert import router as convert_router
from app.api.routes.health import router as health_router

__all__ = ["convert_router", "health_router"]
