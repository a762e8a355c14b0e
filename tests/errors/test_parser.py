"""Tests for provider error parsing."""

from __future__ import annotations

import math
import time
from email.utils import formatdate

import httpx
import pytest

from llm_bridge.errors.classify import is_quota_error, is_retryable_error, is_user_error
from llm_bridge.errors.models import ErrorKind
from llm_bridge.errors.parser import GOOGLE_ERROR_INFO, GOOGLE_RETRY_INFO, parse_provider_error
from llm_bridge.exceptions import UnsupportedProviderError

# ---------------------------------------------------------------------------
# OpenAI
# ---------------------------------------------------------------------------


class TestOpenAIErrors:
    def test_context_length_code(self) -> None:
        raw = {
            "error": {
                "message": "This model's maximum context length is 8192 tokens.",
                "type": "invalid_request_error",
                "param": "messages",
                "code": "context_length_exceeded",
            }
        }
        envelope = parse_provider_error(raw, "openai", {"status_code": 400, "headers": {"x-request-id": "req_123"}})
        assert envelope.type is ErrorKind.CONTEXT_LENGTH_EXCEEDED
        assert envelope.http_status == 400
        assert envelope.code == "context_length_exceeded"
        assert envelope.request_id == "req_123"
        assert envelope.details == {"param": "messages", "openai_type": "invalid_request_error"}
        assert envelope.original_error is not None
        assert envelope.original_error.raw == raw
        assert is_user_error(envelope)

    def test_rate_limit_from_httpx_response(self) -> None:
        raw = {"error": {"message": "Rate limit reached", "type": "requests", "code": "rate_limit_exceeded"}}
        response = httpx.Response(429, headers={"retry-after": "20"})
        envelope = parse_provider_error(raw, "openai", response)
        assert envelope.type is ErrorKind.RATE_LIMIT
        assert envelope.http_status == 429
        assert envelope.retry_after == 20.0
        assert is_retryable_error(envelope)
        assert is_quota_error(envelope)

    def test_insufficient_quota(self) -> None:
        envelope = parse_provider_error({"error": {"type": "insufficient_quota"}}, "openai")
        assert envelope.type is ErrorKind.INSUFFICIENT_QUOTA
        assert envelope.http_status == 429
        assert envelope.message == "Unknown OpenAI error"
        assert is_quota_error(envelope)
        assert not is_retryable_error(envelope)

    def test_server_error(self) -> None:
        envelope = parse_provider_error({"error": {"type": "server_error", "message": "oops"}}, "openai")
        assert envelope.type is ErrorKind.API_ERROR
        assert envelope.http_status == 500

    def test_universal_kind_accepted(self) -> None:
        envelope = parse_provider_error({"error": {"type": "tool_error", "message": "bad tool"}}, "openai")
        assert envelope.type is ErrorKind.TOOL_ERROR


# ---------------------------------------------------------------------------
# Anthropic
# ---------------------------------------------------------------------------


class TestAnthropicErrors:
    def test_overloaded(self) -> None:
        raw = {"type": "error", "error": {"type": "overloaded_error", "message": "Overloaded"}}
        envelope = parse_provider_error(raw, "anthropic", {"status_code": 529})
        assert envelope.type is ErrorKind.MODEL_OVERLOADED
        assert envelope.http_status == 529
        assert envelope.message == "Overloaded"
        assert envelope.details == {"anthropic_type": "overloaded_error"}
        assert is_retryable_error(envelope)

    def test_request_id_in_body(self) -> None:
        raw = {
            "type": "error",
            "error": {"type": "not_found_error", "message": "model: claude-9"},
            "request_id": "req_011",
        }
        envelope = parse_provider_error(raw, "anthropic")
        assert envelope.type is ErrorKind.NOT_FOUND
        assert envelope.http_status == 404
        assert envelope.request_id == "req_011"

    def test_json_bytes(self) -> None:
        raw = b'{"type": "error", "error": {"type": "authentication_error", "message": "invalid x-api-key"}}'
        envelope = parse_provider_error(raw, "anthropic")
        assert envelope.type is ErrorKind.AUTHENTICATION
        assert envelope.http_status == 401

    def test_exception(self) -> None:
        envelope = parse_provider_error(RuntimeError("connection reset"), "anthropic")
        assert envelope.type is ErrorKind.UNKNOWN
        assert envelope.message == "connection reset"
        assert envelope.http_status == 500


# ---------------------------------------------------------------------------
# Google
# ---------------------------------------------------------------------------


class TestGoogleErrors:
    def test_resource_exhausted_with_retry_info(self) -> None:
        raw = {
            "error": {
                "code": 429,
                "message": "Resource has been exhausted",
                "status": "RESOURCE_EXHAUSTED",
                "details": [{"@type": GOOGLE_RETRY_INFO, "retryDelay": "30s"}],
            }
        }
        envelope = parse_provider_error(raw, "google")
        assert envelope.type is ErrorKind.RATE_LIMIT
        assert envelope.http_status == 429
        assert envelope.code == 429
        assert envelope.retry_after == 30.0

    def test_reason_refines_status(self) -> None:
        raw = {
            "error": {
                "code": 400,
                "message": "API key not valid. Please pass a valid API key.",
                "status": "INVALID_ARGUMENT",
                "details": [{"@type": GOOGLE_ERROR_INFO, "reason": "API_KEY_INVALID", "domain": "googleapis.com"}],
            }
        }
        envelope = parse_provider_error(raw, "google")
        assert envelope.type is ErrorKind.AUTHENTICATION
        assert envelope.http_status == 400
        assert envelope.details is not None
        assert envelope.details["status"] == "INVALID_ARGUMENT"

    def test_header_beats_retry_info(self) -> None:
        raw = {"error": {"status": "UNAVAILABLE", "details": [{"@type": GOOGLE_RETRY_INFO, "retryDelay": "30s"}]}}
        envelope = parse_provider_error(raw, "google", {"headers": {"Retry-After": "5"}})
        assert envelope.type is ErrorKind.UNAVAILABLE
        assert envelope.retry_after == 5.0
        assert envelope.http_status == 503

    def test_unreadable_retry_delay(self) -> None:
        raw = {"error": {"status": "RESOURCE_EXHAUSTED", "details": [{"@type": GOOGLE_RETRY_INFO, "retryDelay": "soon"}]}}
        envelope = parse_provider_error(raw, "google")
        assert envelope.retry_after is not None
        assert math.isnan(envelope.retry_after)

    def test_unknown_status_uses_code(self) -> None:
        envelope = parse_provider_error({"error": {"code": 418, "status": "TEAPOT"}}, "google")
        assert envelope.type is ErrorKind.UNKNOWN
        assert envelope.http_status == 418
        assert envelope.message == "Unknown Google error"
        assert is_user_error(envelope)


# ---------------------------------------------------------------------------
# Transport context and malformed input
# ---------------------------------------------------------------------------


class TestParseEdgeCases:
    def test_unsupported_provider(self) -> None:
        with pytest.raises(UnsupportedProviderError):
            parse_provider_error({}, "cohere")

    def test_plain_text_body(self) -> None:
        envelope = parse_provider_error("Bad Gateway", "openai", {"status": 502})
        assert envelope.type is ErrorKind.UNKNOWN
        assert envelope.message == "Bad Gateway"
        assert envelope.http_status == 502
        assert envelope.original_error is not None
        assert envelope.original_error.raw == "Bad Gateway"
        assert is_retryable_error(envelope)

    @pytest.mark.parametrize("raw", [None, 42, [], {}, {"error": "nope"}])
    def test_garbage_never_raises(self, raw: object) -> None:
        envelope = parse_provider_error(raw, "google")
        assert envelope.type is ErrorKind.UNKNOWN
        assert envelope.http_status == 500

    def test_retry_after_unreadable_is_nan(self) -> None:
        envelope = parse_provider_error({}, "openai", {"status_code": 429, "headers": {"Retry-After": "soon"}})
        assert envelope.retry_after is not None
        assert math.isnan(envelope.retry_after)

    def test_retry_after_http_date(self) -> None:
        header = formatdate(time.time() + 60, usegmt=True)
        envelope = parse_provider_error({}, "openai", {"status_code": 503, "headers": {"retry-after": header}})
        assert envelope.retry_after is not None
        assert 50 < envelope.retry_after <= 60

    def test_retry_after_absent(self) -> None:
        envelope = parse_provider_error({"error": {"type": "api_error"}}, "anthropic")
        assert envelope.retry_after is None
