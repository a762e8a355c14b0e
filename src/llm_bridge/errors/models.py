"""Data models for the error normalizer."""

from __future__ import annotations

import time
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from llm_bridge.core.interface.models import OriginalPayload, Provider


class ErrorKind(str, Enum):
    """Closed set of provider-neutral error categories."""

    INVALID_REQUEST = "invalid_request_error"
    AUTHENTICATION = "authentication_error"
    PERMISSION = "permission_error"
    NOT_FOUND = "not_found_error"
    MODEL_NOT_FOUND = "model_not_found"
    RATE_LIMIT = "rate_limit_error"
    INSUFFICIENT_QUOTA = "insufficient_quota"
    TOKEN_LIMIT_EXCEEDED = "token_limit_exceeded"
    CONTEXT_LENGTH_EXCEEDED = "context_length_exceeded"
    CONTENT_FILTER = "content_filter"
    CONTENT_POLICY_VIOLATION = "content_policy_violation"
    TOOL_ERROR = "tool_error"
    API_ERROR = "api_error"
    MODEL_OVERLOADED = "model_overloaded"
    UNAVAILABLE = "unavailable"
    DEADLINE_EXCEEDED = "deadline_exceeded"
    INVALID_ARGUMENT = "invalid_argument"
    UNKNOWN = "unknown_error"


class TokenUsage(BaseModel):
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None


class ErrorEnvelope(BaseModel):
    """A provider API error, normalized.

    ``retry_after`` is in seconds. ``NaN`` means a ``retry-after`` header was
    present but unreadable: the wait is unknown, not zero.
    """

    type: ErrorKind
    message: str
    code: str | int | None = None
    provider: Provider
    http_status: int
    retry_after: float | None = None
    details: dict[str, Any] | None = None
    usage: TokenUsage | None = None
    tool_name: str | None = None
    request_id: str | None = None
    timestamp: float = Field(default_factory=time.time)
    original_error: OriginalPayload | None = None


class BuiltError(BaseModel):
    """A provider-shaped error response: status, headers and JSON body."""

    status_code: int
    universal: ErrorEnvelope
    body: dict[str, Any]
    headers: dict[str, str] = {}
