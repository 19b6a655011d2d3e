"""Conversion outcomes and the JSON error body schema."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from pydantic import BaseModel, Field

from app.adapters.rate_limit.base import RateLimitResult

RATE_LIMITED_ERROR = "Rate limit exceeded"
INTERNAL_ERROR = "Internal server error"
INTERNAL_ERROR_MESSAGE = "An unexpected error occurred while processing your request"


class ErrorResponse(BaseModel):
    """JSON body returned for every non-200 conversion response."""

    error: str = Field(..., description="Short error title, e.g. 'Invalid JSON'.")
    message: str = Field(..., description="Human-readable explanation.")
    retryAfter: int | None = Field(
        default=None,
        description="Seconds until the rate limit window resets (429 only).",
    )


@dataclass(frozen=True)
class Success:
    text: str
    rate_limit: RateLimitResult | None = None


@dataclass(frozen=True)
class RateLimited:
    rate_limit: RateLimitResult

    @property
    def retry_after(self) -> int:
        return self.rate_limit.retry_after_seconds or 0

    @property
    def message(self) -> str:
        # Whole minutes, rounded up, mirroring the whole-second retryAfter.
        minutes = -(-self.retry_after // 60)
        return f"Too many requests. Try again in {minutes} minutes."


@dataclass(frozen=True)
class InvalidPayload:
    error: str
    message: str
    rate_limit: RateLimitResult | None = None


@dataclass(frozen=True)
class InternalError:
    rate_limit: RateLimitResult | None = None
    error: str = INTERNAL_ERROR
    message: str = INTERNAL_ERROR_MESSAGE


ConversionOutcome = Union[Success, RateLimited, InvalidPayload, InternalError]
