"""Request body parsing and shape validation for the conversion endpoint."""

from __future__ import annotations

import json
from typing import Any

from app.core.errors import InvalidShapeAppError, MalformedInputAppError

BODY_REQUIRED_MESSAGE = "Request body is required"
NOT_AN_OBJECT_MESSAGE = "Input must be a JSON object (not an array or primitive)"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def parse_json_body(raw_body: bytes) -> Any:
    """Decode the raw request body as strict JSON.

    ``NaN``, ``Infinity`` and ``-Infinity`` are rejected since they are not
    part of JSON.

    Args:
        raw_body: Bytes read from the request.

    Returns:
        The decoded JSON value (any type).

    Raises:
        MalformedInputAppError: If the body is empty, not valid UTF-8/JSON.
    """
    try:
        return json.loads(raw_body, parse_constant=_reject_constant)
    except ValueError as exc:
        raise MalformedInputAppError(
            code="invalid_json",
            message="Request body must be valid JSON",
        ) from exc


def _is_missing(value: Any) -> bool:
    """Mirror the "falsy body" check: null, false, 0 and "" count as missing."""
    if value is None:
        return True
    if isinstance(value, (bool, int, float, str)):
        return not value
    return False


def validate_document(value: Any) -> dict[str, Any]:
    """Ensure the parsed body is a JSON object.

    Args:
        value: Result of ``parse_json_body``.

    Returns:
        The value itself, typed as a dict.

    Raises:
        InvalidShapeAppError: If the value is missing or not an object.
    """
    if _is_missing(value):
        raise InvalidShapeAppError(
            code="body_required",
            message=BODY_REQUIRED_MESSAGE,
            details={"value_type": type(value).__name__},
        )

    if not isinstance(value, dict):
        raise InvalidShapeAppError(
            code="not_an_object",
            message=NOT_AN_OBJECT_MESSAGE,
            details={"value_type": type(value).__name__},
        )

    return value


def parse_conversion_request(raw_body: bytes) -> dict[str, Any]:
    """Parse then validate a conversion request body."""
    return validate_document(parse_json_body(raw_body))
