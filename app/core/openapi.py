"""OpenAPI customization for the conversion endpoint.

``POST /api/convert`` reads its body raw, so FastAPI cannot infer the
request schema or the rate-limit headers. This module patches them into the
generated document so ``/docs`` describes the endpoint fully.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

CONVERT_PATH = "/api/convert"

_RATE_LIMIT_HEADERS: Dict[str, Any] = {
    "X-RateLimit-Limit": {
        "description": "Requests allowed per window.",
        "schema": {"type": "integer"},
    },
    "X-RateLimit-Remaining": {
        "description": "Requests left in the current window.",
        "schema": {"type": "integer"},
    },
    "X-RateLimit-Reset": {
        "description": "ISO-8601 UTC instant when the window resets.",
        "schema": {"type": "string", "format": "date-time"},
    },
    "X-RateLimit-Used": {
        "description": "Requests counted in the current window.",
        "schema": {"type": "integer"},
    },
}

_REQUEST_BODY: Dict[str, Any] = {
    "required": True,
    "content": {
        "application/json": {
            "schema": {"type": "object", "additionalProperties": True},
            "example": {"users": [{"id": 1, "name": "John"}]},
        }
    },
}


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation for the conversion endpoint.

    - Declares the JSON object request body
    - Documents the text/plain success body and rate-limit headers
    - Adds ``Retry-After`` to the 429 response
    - Adds tags metadata if not present
    """

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        desired_tags = [
            {
                "name": "Convert",
                "description": "JSON to TOON conversion (rate limited per client).",
            },
            {
                "name": "Health",
                "description": "Liveness checks.",
            },
        ]
        for tag in desired_tags:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        operation = schema.get("paths", {}).get(CONVERT_PATH, {}).get("post")
        if isinstance(operation, dict):
            operation["requestBody"] = _REQUEST_BODY
            responses = operation.setdefault("responses", {})

            ok = responses.setdefault("200", {"description": "TOON text"})
            ok["content"] = {"text/plain": {"schema": {"type": "string"}}}

            for status_code in ("200", "400", "429"):
                if status_code in responses:
                    responses[status_code]["headers"] = dict(_RATE_LIMIT_HEADERS)

            if "429" in responses:
                responses["429"]["headers"]["Retry-After"] = {
                    "description": "Seconds until the window resets.",
                    "schema": {"type": "integer"},
                }

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
