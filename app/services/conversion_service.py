"""JSON to TOON conversion service.

Runs one conversion request end to end and reports the result as a
``ConversionOutcome`` instead of raising:
- Admission against the rate limiter (quota is consumed before parsing)
- Strict JSON parsing and object-shape validation
- Encoding through the configured TOON encoder
- Conversion of any unexpected failure into ``InternalError``

The service knows nothing about HTTP; the route maps outcomes to responses.
"""

from __future__ import annotations

import logging

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.adapters.toon.base import AbstractToonEncoder
from app.core.errors import EncodingAppError, ValidationAppError
from app.core.payload_validation import parse_conversion_request
from app.core.rate_limit import hash_client_key
from app.schemas.conversion import (
    ConversionOutcome,
    InternalError,
    InvalidPayload,
    RateLimited,
    Success,
)

logger = logging.getLogger(__name__)


def to_well_formed_text(text: str) -> str:
    """Replace lone UTF-16 surrogates with U+FFFD so the text always encodes
    as UTF-8.

    Strict JSON parsing accepts escapes such as ``"\\ud800"``, which decode to
    surrogate code points that UTF-8 cannot represent.
    """
    return text.encode("utf-16", "surrogatepass").decode("utf-16", "replace")


class ConversionService:
    """Service converting request bodies to TOON under a rate limit."""

    def __init__(
        self,
        encoder: AbstractToonEncoder,
        limiter: AbstractRateLimiter | None = None,
    ) -> None:
        """Initialize the conversion service.

        Args:
            encoder: TOON encoder used for accepted documents.
            limiter: Rate limiter; None disables admission checks.
        """
        self.encoder = encoder
        self.limiter = limiter

    def _admit(self, client_key: str) -> RateLimitResult | None:
        if self.limiter is None:
            return None

        key_hash = hash_client_key(client_key)
        result = self.limiter.consume(client_key)
        if result.allowed:
            logger.info(
                "rate_limit.allowed",
                extra={
                    "key_hash": key_hash,
                    "limit": result.limit,
                    "remaining": result.remaining,
                    "used": result.used,
                },
            )
        else:
            logger.warning(
                "rate_limit.exceeded",
                extra={
                    "key_hash": key_hash,
                    "limit": result.limit,
                    "used": result.used,
                    "retry_after_s": result.retry_after_seconds,
                },
            )
        return result

    def convert(self, client_key: str, raw_body: bytes) -> ConversionOutcome:
        """Run a single conversion request.

        Args:
            client_key: Identifier used for rate limiting.
            raw_body: Unparsed request body.

        Returns:
            ConversionOutcome: Success, RateLimited, InvalidPayload or
                InternalError. Never raises.
        """
        rate_limit: RateLimitResult | None = None
        try:
            rate_limit = self._admit(client_key)
            if rate_limit is not None and not rate_limit.allowed:
                return RateLimited(rate_limit=rate_limit)

            document = parse_conversion_request(raw_body)
            text = to_well_formed_text(self.encoder.encode(document))
        except ValidationAppError as exc:
            logger.info(
                "convert.rejected",
                extra={
                    "error_code": exc.code,
                    "error_title": exc.title,
                    "body_bytes": len(raw_body),
                },
            )
            return InvalidPayload(error=exc.title, message=exc.message, rate_limit=rate_limit)
        except EncodingAppError as exc:
            logger.error(
                "convert.encode_failed",
                extra={
                    "error_code": exc.code,
                    "details": exc.details,
                },
                exc_info=exc.__cause__,
            )
            return InternalError(rate_limit=rate_limit)
        except Exception as exc:
            logger.error(
                "convert.unexpected_error",
                extra={
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
                exc_info=exc,
            )
            return InternalError(rate_limit=rate_limit)

        logger.info(
            "convert.success",
            extra={
                "top_level_keys": len(document),
                "body_bytes": len(raw_body),
                "toon_chars": len(text),
            },
        )
        return Success(text=text, rate_limit=rate_limit)
