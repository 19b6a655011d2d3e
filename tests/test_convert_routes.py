"""Tests for the /api/convert endpoint.

Covers every response branch (200/400/429/500), the CORS preflight,
rate-limit headers and client key resolution from proxy headers. The
documented TOON examples run against the real encoder.
"""

from datetime import datetime
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from app.api.routes import convert as convert_routes
from app.core.config import settings
from app.core.errors import EncodingAppError
from app.main import app

CORS_EXPECTED = {
    "access-control-allow-origin": "*",
    "access-control-allow-methods": "POST, OPTIONS",
    "access-control-allow-headers": "Content-Type",
}


@pytest.fixture
def client() -> TestClient:
    """Create FastAPI test client."""
    return TestClient(app)


def _assert_cors(response) -> None:
    for name, value in CORS_EXPECTED.items():
        assert response.headers.get(name) == value


def _assert_rate_limit_headers(response, *, used: int, remaining: int) -> None:
    assert response.headers["X-RateLimit-Limit"] == str(settings.app.rate_limit_requests)
    assert response.headers["X-RateLimit-Used"] == str(used)
    assert response.headers["X-RateLimit-Remaining"] == str(remaining)
    reset = response.headers["X-RateLimit-Reset"]
    assert reset.endswith("Z")
    datetime.fromisoformat(reset.replace("Z", "+00:00"))


class TestConvertSuccess:
    def test_simple_object(self, client: TestClient) -> None:
        response = client.post("/api/convert", json={"name": "Alice", "age": 30})

        assert response.status_code == 200
        assert response.headers["content-type"] == "text/plain; charset=utf-8"
        assert response.headers["cache-control"] == "no-cache"
        lines = response.text.splitlines()
        assert "name: Alice" in lines
        assert "age: 30" in lines
        _assert_cors(response)
        _assert_rate_limit_headers(response, used=1, remaining=99)

    def test_uniform_array_is_tabular(self, client: TestClient) -> None:
        response = client.post("/api/convert", json={"users": [{"id": 1, "name": "John"}]})

        assert response.status_code == 200
        assert "users[1]{id,name}:" in response.text
        assert "1,John" in response.text

    def test_counts_down_remaining(self, client: TestClient) -> None:
        client.post("/api/convert", json={"a": 1})
        response = client.post("/api/convert", json={"a": 2})

        _assert_rate_limit_headers(response, used=2, remaining=98)

    def test_request_id_is_echoed(self, client: TestClient) -> None:
        response = client.post(
            "/api/convert",
            json={"a": 1},
            headers={"X-Request-ID": "req-convert-1"},
        )

        assert response.headers["X-Request-ID"] == "req-convert-1"

    def test_nested_single_key_chain_is_folded(self, client: TestClient) -> None:
        response = client.post("/api/convert", json={"a": {"b": {"c": 1}}})

        assert response.status_code == 200
        assert response.text.splitlines() == ["a.b.c: 1"]

    def test_folding_off_keeps_nested_output(self, client: TestClient, monkeypatch) -> None:
        monkeypatch.setattr(convert_routes._encoder, "key_folding", "off")

        response = client.post("/api/convert", json={"a": {"b": {"c": 1}}})

        assert response.status_code == 200
        assert response.text.splitlines() == ["a:", "  b:", "    c: 1"]

    def test_lone_surrogate_is_replaced(self, client: TestClient) -> None:
        response = client.post(
            "/api/convert",
            content=b'{"a": "\\ud800"}',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 200
        assert "\ufffd" in response.text
        _assert_cors(response)
        _assert_rate_limit_headers(response, used=1, remaining=99)


class TestConvertInvalidPayload:
    def test_invalid_json(self, client: TestClient) -> None:
        response = client.post(
            "/api/convert",
            content=b'{"a":',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {
            "error": "Invalid JSON",
            "message": "Request body must be valid JSON",
        }
        _assert_cors(response)
        _assert_rate_limit_headers(response, used=1, remaining=99)

    def test_empty_body(self, client: TestClient) -> None:
        response = client.post("/api/convert")

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid JSON"

    def test_array_body(self, client: TestClient) -> None:
        response = client.post("/api/convert", json=[1, 2, 3])

        assert response.status_code == 400
        assert response.json() == {
            "error": "Validation failed",
            "message": "Input must be a JSON object (not an array or primitive)",
        }
        _assert_cors(response)
        _assert_rate_limit_headers(response, used=1, remaining=99)

    def test_null_body(self, client: TestClient) -> None:
        response = client.post(
            "/api/convert",
            content=b"null",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Request body is required"

    def test_rejected_requests_consume_quota(self, client: TestClient) -> None:
        client.post("/api/convert", content=b"{", headers={"Content-Type": "application/json"})
        client.post("/api/convert", json=[1])

        response = client.post("/api/convert", json={"ok": True})

        _assert_rate_limit_headers(response, used=3, remaining=97)


class TestConvertRateLimit:
    def test_101st_request_is_rejected(self, client: TestClient) -> None:
        for _ in range(100):
            assert client.post("/api/convert", json={"a": 1}).status_code == 200

        response = client.post("/api/convert", json={"a": 1})

        assert response.status_code == 429
        retry_after = response.headers["Retry-After"]
        assert retry_after.isdigit()
        assert 0 < int(retry_after) <= 3600
        body = response.json()
        assert body["error"] == "Rate limit exceeded"
        assert body["retryAfter"] == int(retry_after)
        assert body["message"] == "Too many requests. Try again in 60 minutes."
        assert response.headers["X-RateLimit-Remaining"] == "0"
        assert response.headers["X-RateLimit-Used"] == "100"
        _assert_cors(response)

    def test_limit_is_configurable(self, client: TestClient, monkeypatch) -> None:
        monkeypatch.setattr(settings.app, "rate_limit_requests", 2)

        client.post("/api/convert", json={"a": 1})
        client.post("/api/convert", json={"a": 1})
        response = client.post("/api/convert", json={"a": 1})

        assert response.status_code == 429
        assert response.headers["X-RateLimit-Limit"] == "2"

    def test_distinct_clients_have_separate_quotas(self, client: TestClient, monkeypatch) -> None:
        monkeypatch.setattr(settings.app, "rate_limit_requests", 1)

        first = client.post("/api/convert", json={"a": 1}, headers={"X-Forwarded-For": "10.0.0.1"})
        blocked = client.post("/api/convert", json={"a": 1}, headers={"X-Forwarded-For": "10.0.0.1"})
        other = client.post("/api/convert", json={"a": 1}, headers={"X-Forwarded-For": "10.0.0.2"})

        assert first.status_code == 200
        assert blocked.status_code == 429
        assert other.status_code == 200

    def test_forwarded_chain_uses_first_address(self, client: TestClient, monkeypatch) -> None:
        monkeypatch.setattr(settings.app, "rate_limit_requests", 1)

        client.post(
            "/api/convert",
            json={"a": 1},
            headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
        )
        response = client.post("/api/convert", json={"a": 1}, headers={"X-Real-IP": "203.0.113.7"})

        assert response.status_code == 429

    def test_disabled_rate_limit_omits_headers(self, client: TestClient, monkeypatch) -> None:
        monkeypatch.setattr(settings.app, "rate_limit_enabled", False)

        response = client.post("/api/convert", json={"a": 1})

        assert response.status_code == 200
        assert "X-RateLimit-Limit" not in response.headers
        _assert_cors(response)

    def test_headers_can_be_suppressed(self, client: TestClient, monkeypatch) -> None:
        monkeypatch.setattr(settings.app, "rate_limit_include_headers", False)

        response = client.post("/api/convert", json={"a": 1})

        assert response.status_code == 200
        assert "X-RateLimit-Used" not in response.headers


class TestConvertInternalError:
    def test_encoder_failure_returns_500(self, client: TestClient) -> None:
        with patch.object(
            convert_routes._encoder,
            "encode",
            side_effect=EncodingAppError(code="encoding_failed", message="boom"),
        ):
            response = client.post("/api/convert", json={"a": 1})

        assert response.status_code == 500
        assert response.json() == {
            "error": "Internal server error",
            "message": "An unexpected error occurred while processing your request",
        }
        _assert_cors(response)
        _assert_rate_limit_headers(response, used=1, remaining=99)

    def test_unexpected_failure_does_not_leak(self, client: TestClient) -> None:
        with patch.object(convert_routes._encoder, "encode", side_effect=RuntimeError("db password")):
            response = client.post("/api/convert", json={"a": 1})

        assert response.status_code == 500
        assert "db password" not in response.text


class TestPreflight:
    def test_options_returns_cors_headers(self, client: TestClient) -> None:
        response = client.options("/api/convert")

        assert response.status_code == 200
        assert response.content == b""
        _assert_cors(response)
        assert response.headers["access-control-max-age"] == "86400"

    def test_options_does_not_consume_quota(self, client: TestClient) -> None:
        client.options("/api/convert")

        response = client.post("/api/convert", json={"a": 1})

        _assert_rate_limit_headers(response, used=1, remaining=99)


def test_get_is_not_allowed(client: TestClient) -> None:
    assert client.get("/api/convert").status_code == 405


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_openapi_documents_convert_endpoint(client: TestClient) -> None:
    schema = client.get("/openapi.json").json()

    operation = schema["paths"]["/api/convert"]["post"]
    assert "application/json" in operation["requestBody"]["content"]
    assert "Retry-After" in operation["responses"]["429"]["headers"]
    assert "X-RateLimit-Reset" in operation["responses"]["200"]["headers"]
