from __future__ import annotations

import asyncio

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from app.adapters.toon.factory import create_toon_encoder
from app.core.cors import CORS_HEADERS, preflight_headers
from app.core.rate_limit import build_rate_limit_headers, get_rate_limiter, resolve_client_key
from app.schemas.conversion import (
    ConversionOutcome,
    RATE_LIMITED_ERROR,
    ErrorResponse,
    InvalidPayload,
    RateLimited,
    Success,
)
from app.services.conversion_service import ConversionService

router = APIRouter(tags=["Convert"])

_encoder = create_toon_encoder()


def get_conversion_service() -> ConversionService:
    """Build the service around the current process-wide limiter."""
    return ConversionService(encoder=_encoder, limiter=get_rate_limiter())


def _response_headers(outcome: ConversionOutcome) -> dict[str, str]:
    headers: dict[str, str] = {}
    if outcome.rate_limit is not None:
        headers.update(build_rate_limit_headers(outcome.rate_limit))
    headers.update(CORS_HEADERS)
    return headers


def build_response(outcome: ConversionOutcome) -> Response:
    """Map a conversion outcome to its HTTP response."""
    headers = _response_headers(outcome)

    if isinstance(outcome, Success):
        headers["Cache-Control"] = "no-cache"
        return PlainTextResponse(
            outcome.text,
            status_code=200,
            headers=headers,
            media_type="text/plain; charset=utf-8",
        )

    if isinstance(outcome, RateLimited):
        body = ErrorResponse(
            error=RATE_LIMITED_ERROR,
            message=outcome.message,
            retryAfter=outcome.retry_after,
        )
        return JSONResponse(status_code=429, content=body.model_dump(), headers=headers)

    if isinstance(outcome, InvalidPayload):
        body = ErrorResponse(error=outcome.error, message=outcome.message)
        return JSONResponse(
            status_code=400,
            content=body.model_dump(exclude_none=True),
            headers=headers,
        )

    body = ErrorResponse(error=outcome.error, message=outcome.message)
    return JSONResponse(
        status_code=500,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


@router.post(
    "/convert",
    response_class=PlainTextResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Body is not valid JSON or not an object"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
        500: {"model": ErrorResponse, "description": "Unexpected failure"},
    },
)
async def convert(request: Request) -> Response:
    """Convert a JSON object to TOON text.

    The body is read raw so malformed JSON is reported as a 400 with the
    endpoint's own error shape rather than FastAPI's validation format.
    Every request consumes one unit of the caller's hourly quota, even
    when the body is rejected.
    """
    client_key = resolve_client_key(request.headers)
    raw_body = await request.body()

    service = get_conversion_service()
    loop = asyncio.get_event_loop()
    # Encoding is synchronous and CPU-bound; keep it off the event loop.
    outcome = await loop.run_in_executor(None, service.convert, client_key, raw_body)
    return build_response(outcome)


@router.options("/convert", include_in_schema=False)
async def convert_preflight() -> Response:
    """CORS preflight for the conversion endpoint."""
    return Response(status_code=200, headers=preflight_headers())
