"""Tests for request body parsing and shape validation."""

import pytest

from app.core.errors import InvalidShapeAppError, MalformedInputAppError
from app.core.payload_validation import (
    BODY_REQUIRED_MESSAGE,
    NOT_AN_OBJECT_MESSAGE,
    parse_conversion_request,
    parse_json_body,
    validate_document,
)


class TestParseJsonBody:
    def test_parses_object(self) -> None:
        assert parse_json_body(b'{"name": "Alice", "age": 30}') == {"name": "Alice", "age": 30}

    def test_parses_utf8(self) -> None:
        assert parse_json_body('{"city": "São Paulo"}'.encode("utf-8")) == {"city": "São Paulo"}

    @pytest.mark.parametrize(
        "raw",
        [
            b'{"a":',
            b"",
            b"not json",
            b"{'a': 1}",
            b'{"a": NaN}',
            b'{"a": Infinity}',
            b'{"a": "\x80"}',
        ],
    )
    def test_rejects_malformed_input(self, raw: bytes) -> None:
        with pytest.raises(MalformedInputAppError) as exc_info:
            parse_json_body(raw)

        assert exc_info.value.code == "invalid_json"
        assert exc_info.value.message == "Request body must be valid JSON"
        assert exc_info.value.title == "Invalid JSON"


class TestValidateDocument:
    def test_accepts_object(self) -> None:
        document = {"users": [{"id": 1}]}
        assert validate_document(document) is document

    def test_accepts_empty_object(self) -> None:
        assert validate_document({}) == {}

    @pytest.mark.parametrize("value", [None, False, 0, 0.0, ""])
    def test_missing_body(self, value) -> None:
        with pytest.raises(InvalidShapeAppError) as exc_info:
            validate_document(value)

        assert exc_info.value.message == BODY_REQUIRED_MESSAGE
        assert exc_info.value.title == "Validation failed"

    @pytest.mark.parametrize("value", [[1, 2, 3], [], "text", 42, 1.5, True])
    def test_non_object(self, value) -> None:
        with pytest.raises(InvalidShapeAppError) as exc_info:
            validate_document(value)

        assert exc_info.value.code == "not_an_object"
        assert exc_info.value.message == NOT_AN_OBJECT_MESSAGE
        assert exc_info.value.details == {"value_type": type(value).__name__}


def test_parse_conversion_request_chains_both_steps() -> None:
    assert parse_conversion_request(b'{"a": 1}') == {"a": 1}

    with pytest.raises(InvalidShapeAppError):
        parse_conversion_request(b"[1,2,3]")

    with pytest.raises(MalformedInputAppError):
        parse_conversion_request(b'{"a":')
