"""Application-level exception types.

Every error carries a stable machine code, a client-safe message and the
short ``title`` that goes into the ``error`` field of JSON error bodies.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability."""

    value_type: str
    error_type: str


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    title: ClassVar[str] = "Internal server error"
    status_code: ClassVar[int] = 500

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when client input is rejected."""

    title: ClassVar[str] = "Validation failed"
    status_code: ClassVar[int] = 400


class MalformedInputAppError(ValidationAppError):
    """Raised when the request body is not valid JSON."""

    title: ClassVar[str] = "Invalid JSON"


class InvalidShapeAppError(ValidationAppError):
    """Raised when the body parses but is not a JSON object."""


class EncodingAppError(AppError):
    """Raised when the TOON encoder fails on an accepted document."""
