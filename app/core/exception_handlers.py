"""Global exception handlers for consistent error responses.

Anything raised outside the conversion service (which reports its own
outcomes) is turned into the same ``{"error", "message"}`` body:
- AppError subclasses → their declared status code and title
- Unexpected Exception → generic 500 (safety net)
"""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.errors import AppError
from app.core.logging import get_request_id
from app.schemas.conversion import INTERNAL_ERROR, INTERNAL_ERROR_MESSAGE

logger = logging.getLogger(__name__)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with consistent JSON format.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with the error's status code, title and message.
    """
    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": exc.status_code,
            "has_details": bool(exc.details),
            "request_id": get_request_id(),
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.title, "message": exc.message},
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors.

    Logs the failure and returns a generic message; exception text and
    tracebacks never reach the client.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        }
    )

    return JSONResponse(
        status_code=500,
        content={"error": INTERNAL_ERROR, "message": INTERNAL_ERROR_MESSAGE},
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
