"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build fresh instances.
"""

from __future__ import annotations

from fastapi import FastAPI

from app.api.routes import convert_router, health_router
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="TOON Converter API",
        description=(
            "Converts JSON objects to TOON (Token-Oriented Object Notation), a "
            "compact, indentation-based encoding that lowers token counts when "
            "structured data is sent to language models. Requests are rate "
            f"limited to {settings.app.rate_limit_requests} per "
            f"{settings.app.rate_limit_window_seconds} seconds per client."
        ),
        version="0.1.0",
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
        debug=settings.app.debug,
    )

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(convert_router, prefix="/api")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
