"""Error log entries and client-safe error views."""

from __future__ import annotations

from typing import Any

from llm_bridge.errors.classify import classify_error
from llm_bridge.errors.models import ErrorEnvelope


def create_error_log_entry(error: ErrorEnvelope) -> dict[str, Any]:
    """Flat, JSON-ready record of *error* with its classification."""
    verdict = classify_error(error.type, error.http_status)
    return {
        "timestamp": error.timestamp,
        "error_type": error.type.value,
        "provider": error.provider,
        "http_status": error.http_status,
        "message": error.message,
        "code": error.code,
        "tool_name": error.tool_name,
        "request_id": error.request_id,
        "retryable": verdict.retryable,
        "user_error": verdict.user_error,
        "quota_error": verdict.quota,
        "usage": error.usage.model_dump(exclude_none=True) if error.usage else None,
        "details": error.details,
    }


def sanitize_error_for_client(error: ErrorEnvelope) -> dict[str, Any]:
    """The parts of *error* safe to return to a caller.

    ``details`` and ``original_error`` are never included.
    """
    return error.model_dump(
        mode="json",
        include={"type", "message", "provider", "http_status", "retry_after", "usage"},
        exclude_none=True,
    )
