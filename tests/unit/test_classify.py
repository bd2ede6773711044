"""Unit tests for error classification."""

from __future__ import annotations

import httpx
import pytest

from llmlayer.classify import (
    ShapeTag,
    classify,
    correlation_id_from,
    decode_error_shape,
    is_error_payload,
    kind_for_reason,
    kind_for_status,
)
from llmlayer.errors import ErrorKind, InvalidRequest, RateLimitError

# =============================================================================
# Shape decoding
# =============================================================================


class TestDecodeErrorShape:
    """Tests for decode_error_shape - structural pattern matching."""

    def test_empty_for_none(self) -> None:
        assert decode_error_shape(None).tag is ShapeTag.EMPTY

    def test_nested_envelope_unwrapped(self) -> None:
        """An object under 'detail' is decoded instead of the outer payload."""
        shape = decode_error_shape({"detail": {"error_type": "rate_limit", "message": "slow"}})
        assert shape.tag is ShapeTag.TAGGED
        assert shape.error_type == "rate_limit"
        assert shape.message == "slow"

    def test_detail_envelope_wins_over_error_envelope(self) -> None:
        shape = decode_error_shape(
            {
                "detail": {"error_type": "rate_limit", "message": "inner"},
                "error": {"error_type": "provider_error"},
            }
        )
        assert shape.error_type == "rate_limit"

    def test_only_known_variants(self) -> None:
        assert {tag.value for tag in ShapeTag} == {"tagged", "bare", "untyped", "empty"}

    def test_error_object_unwrapped(self) -> None:
        shape = decode_error_shape({"error": {"type": "provider_error", "message": "down"}})
        assert shape.tag is ShapeTag.TAGGED
        assert shape.error_type == "provider_error"

    def test_plain_text_envelope_is_bare(self) -> None:
        """Text under 'detail' is a message with no structured type."""
        shape = decode_error_shape({"detail": "Not authenticated"})
        assert shape.tag is ShapeTag.BARE
        assert shape.reason == "Not authenticated"
        assert shape.error_type is None

    def test_generic_error_type_is_not_a_tag(self) -> None:
        """type == 'error' only marks an error frame, it does not name a kind."""
        shape = decode_error_shape({"type": "error", "error": "missing_query"})
        assert shape.tag is ShapeTag.BARE
        assert shape.reason == "missing_query"

    def test_untyped_object(self) -> None:
        shape = decode_error_shape({"error_code": 12})
        assert shape.tag is ShapeTag.UNTYPED

    def test_bare_string_payload(self) -> None:
        shape = decode_error_shape("boom")
        assert shape.tag is ShapeTag.BARE
        assert shape.reason == "boom"


# =============================================================================
# Kind resolution helpers
# =============================================================================


class TestKindHelpers:
    @pytest.mark.parametrize(
        ("status", "kind"),
        [
            (400, ErrorKind.INVALID_REQUEST),
            (401, ErrorKind.AUTHENTICATION),
            (403, ErrorKind.AUTHENTICATION),
            (404, ErrorKind.GENERIC),
            (422, ErrorKind.GENERIC),
            (429, ErrorKind.RATE_LIMIT),
            (500, ErrorKind.INTERNAL_SERVER),
            (503, ErrorKind.INTERNAL_SERVER),
        ],
    )
    def test_kind_for_status(self, status: int, kind: ErrorKind) -> None:
        assert kind_for_status(status) is kind

    def test_kind_for_reason_known_phrases(self) -> None:
        assert kind_for_reason("Missing required field: query") is ErrorKind.INVALID_REQUEST
        assert kind_for_reason("invalid selection for model") is ErrorKind.INVALID_REQUEST
        assert kind_for_reason("missing_query") is ErrorKind.INVALID_REQUEST

    def test_kind_for_reason_unknown(self) -> None:
        assert kind_for_reason("something broke") is ErrorKind.GENERIC

    def test_is_error_payload(self) -> None:
        assert is_error_payload({"error_type": "x"})
        assert is_error_payload({"detail": "x"})
        assert is_error_payload({"type": "error"})
        assert is_error_payload({"error": "x"})
        assert not is_error_payload({"error": None, "answer": "ok"})
        assert not is_error_payload({"type": "answer", "content": "a"})
        assert not is_error_payload(["error"])


# =============================================================================
# classify
# =============================================================================


class TestClassify:
    """Tests for classify - payload + status to ErrorRecord."""

    def test_success_payload(self) -> None:
        assert classify({"answer": "42"}, 200) is None

    def test_success_stream_frame(self) -> None:
        assert classify({"type": "answer", "content": "a"}) is None

    def test_nested_rate_limit(self) -> None:
        record = classify({"detail": {"error_type": "rate_limit", "message": "slow down"}})
        assert record is not None
        assert record.kind is ErrorKind.RATE_LIMIT
        assert record.message == "slow down"

    def test_status_503_without_body(self) -> None:
        record = classify(None, 503)
        assert record is not None
        assert record.kind is ErrorKind.INTERNAL_SERVER
        assert record.message == "HTTP 503"
        assert record.status == 503

    def test_tag_wins_over_status(self) -> None:
        """An explicit tag decides the kind even when the status says otherwise."""
        record = classify({"error_type": "provider_error", "message": "upstream"}, 500)
        assert record is not None
        assert record.kind is ErrorKind.PROVIDER

    @pytest.mark.parametrize(
        ("tag", "kind"),
        [
            ("validation_error", ErrorKind.INVALID_REQUEST),
            ("authentication_error", ErrorKind.AUTHENTICATION),
            ("provider_error", ErrorKind.PROVIDER),
            ("rate_limit", ErrorKind.RATE_LIMIT),
            ("internal_error", ErrorKind.INTERNAL_SERVER),
            ("internal_server_error", ErrorKind.INTERNAL_SERVER),
            ("scraping_error", ErrorKind.INTERNAL_SERVER),
        ],
    )
    def test_tag_table(self, tag: str, kind: ErrorKind) -> None:
        record = classify({"error_type": tag, "message": "m"}, 200)
        assert record is not None
        assert record.kind is kind

    def test_unknown_tag_falls_back_to_status(self) -> None:
        record = classify({"error_type": "quota_exceeded", "message": "m"}, 429)
        assert record is not None
        assert record.kind is ErrorKind.RATE_LIMIT

    def test_error_marker_on_200_without_tag_is_generic(self) -> None:
        record = classify({"error": "something odd"}, 200)
        assert record is not None
        assert record.kind is ErrorKind.GENERIC
        assert record.message == "something odd"

    def test_stream_bare_string_known_phrase(self) -> None:
        record = classify({"type": "error", "error": "missing_query"})
        assert record is not None
        assert record.kind is ErrorKind.INVALID_REQUEST
        assert record.message == "missing_query"
        assert record.status is None

    def test_stream_bare_string_unknown(self) -> None:
        record = classify({"type": "error", "error": "model crashed"})
        assert record is not None
        assert record.kind is ErrorKind.GENERIC

    def test_bare_string_phrases_not_used_with_status(self) -> None:
        """Phrase matching is only for stream frames; with a status, the status decides."""
        record = classify({"detail": "missing_query"}, 404)
        assert record is not None
        assert record.kind is ErrorKind.GENERIC

    def test_message_preferred_over_error(self) -> None:
        record = classify({"error_type": "validation_error", "message": "bad model", "error": "x"})
        assert record is not None
        assert record.message == "bad model"

    def test_detail_text_used_as_message(self) -> None:
        record = classify({"detail": "Invalid API key"}, 401)
        assert record is not None
        assert record.kind is ErrorKind.AUTHENTICATION
        assert record.message == "Invalid API key"

    def test_serialized_payload_as_last_resort(self) -> None:
        record = classify({"type": "error", "code": 7})
        assert record is not None
        assert record.message == '{"type": "error", "code": 7}'

    def test_correlation_id_appended(self) -> None:
        record = classify(None, 500, correlation_id="req_123")
        assert record is not None
        assert record.message == "HTTP 500 (request id: req_123)"
        assert record.correlation_id == "req_123"

    def test_record_to_exception(self) -> None:
        record = classify({"detail": {"error_type": "rate_limit", "message": "slow down"}}, 429)
        assert record is not None
        exc = record.to_exception()
        assert isinstance(exc, RateLimitError)
        assert exc.status == 429
        assert str(exc) == "slow down"

    def test_stream_error_to_exception(self) -> None:
        record = classify({"type": "error", "error": "missing_query"})
        assert record is not None
        assert isinstance(record.to_exception(), InvalidRequest)


class TestCorrelationId:
    def test_from_request_id_header(self) -> None:
        assert correlation_id_from(httpx.Headers({"X-Request-ID": "abc"})) == "abc"

    def test_from_correlation_header(self) -> None:
        assert correlation_id_from(httpx.Headers({"x-correlation-id": "def"})) == "def"

    def test_absent(self) -> None:
        assert correlation_id_from(httpx.Headers({})) is None
        assert correlation_id_from(None) is None
