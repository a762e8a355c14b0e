"""Provider error parsing — native error payloads into :class:`ErrorEnvelope`.

Each provider has a fixed lookup table from its native type (OpenAI,
Anthropic) or status (Google) to an :class:`ErrorKind`. Values that are
already ``ErrorKind`` strings are accepted as-is, so envelopes rendered by
:mod:`llm_bridge.errors.builder` parse back to the same kind. Anything else
becomes ``unknown_error`` with the raw payload kept on ``original_error``.
"""

from __future__ import annotations

import json
import logging
import math
import re
import time
from collections.abc import Mapping
from email.utils import parsedate_to_datetime
from typing import Any

from llm_bridge.core.interface.models import PROVIDERS, OriginalPayload
from llm_bridge.errors.classify import default_status
from llm_bridge.errors.models import ErrorEnvelope, ErrorKind
from llm_bridge.exceptions import UnsupportedProviderError

logger = logging.getLogger(__name__)

GOOGLE_RETRY_INFO = "type.googleapis.com/google.rpc.RetryInfo"
GOOGLE_ERROR_INFO = "type.googleapis.com/google.rpc.ErrorInfo"

_KINDS = {kind.value: kind for kind in ErrorKind}

# ---------------------------------------------------------------------------
# Lookup tables
# ---------------------------------------------------------------------------

OPENAI_TYPES: dict[str, ErrorKind] = {
    "invalid_request_error": ErrorKind.INVALID_REQUEST,
    "authentication_error": ErrorKind.AUTHENTICATION,
    "permission_error": ErrorKind.PERMISSION,
    "not_found_error": ErrorKind.NOT_FOUND,
    "rate_limit_error": ErrorKind.RATE_LIMIT,
    "tokens": ErrorKind.TOKEN_LIMIT_EXCEEDED,
    "api_error": ErrorKind.API_ERROR,
    "server_error": ErrorKind.API_ERROR,
    "insufficient_quota": ErrorKind.INSUFFICIENT_QUOTA,
    "context_length_exceeded": ErrorKind.CONTEXT_LENGTH_EXCEEDED,
    "content_filter": ErrorKind.CONTENT_FILTER,
    "model_not_found": ErrorKind.MODEL_NOT_FOUND,
}

# OpenAI reports many failures as a generic type with a specific ``code``.
OPENAI_CODES: dict[str, ErrorKind] = {
    "context_length_exceeded": ErrorKind.CONTEXT_LENGTH_EXCEEDED,
    "model_not_found": ErrorKind.MODEL_NOT_FOUND,
    "insufficient_quota": ErrorKind.INSUFFICIENT_QUOTA,
    "content_policy_violation": ErrorKind.CONTENT_POLICY_VIOLATION,
    "content_filter": ErrorKind.CONTENT_FILTER,
    "invalid_api_key": ErrorKind.AUTHENTICATION,
    "rate_limit_exceeded": ErrorKind.RATE_LIMIT,
}

ANTHROPIC_TYPES: dict[str, ErrorKind] = {
    "invalid_request_error": ErrorKind.INVALID_REQUEST,
    "authentication_error": ErrorKind.AUTHENTICATION,
    "permission_error": ErrorKind.PERMISSION,
    "not_found_error": ErrorKind.NOT_FOUND,
    "request_too_large": ErrorKind.INVALID_REQUEST,
    "rate_limit_error": ErrorKind.RATE_LIMIT,
    "api_error": ErrorKind.API_ERROR,
    "overloaded_error": ErrorKind.MODEL_OVERLOADED,
    "billing_error": ErrorKind.INSUFFICIENT_QUOTA,
    "timeout_error": ErrorKind.DEADLINE_EXCEEDED,
}

GOOGLE_STATUSES: dict[str, ErrorKind] = {
    "INVALID_ARGUMENT": ErrorKind.INVALID_ARGUMENT,
    "FAILED_PRECONDITION": ErrorKind.INVALID_REQUEST,
    "OUT_OF_RANGE": ErrorKind.INVALID_ARGUMENT,
    "UNAUTHENTICATED": ErrorKind.AUTHENTICATION,
    "PERMISSION_DENIED": ErrorKind.PERMISSION,
    "NOT_FOUND": ErrorKind.NOT_FOUND,
    "RESOURCE_EXHAUSTED": ErrorKind.RATE_LIMIT,
    "INTERNAL": ErrorKind.API_ERROR,
    "UNKNOWN": ErrorKind.API_ERROR,
    "UNAVAILABLE": ErrorKind.UNAVAILABLE,
    "DEADLINE_EXCEEDED": ErrorKind.DEADLINE_EXCEEDED,
}

# ``ErrorInfo.reason`` narrows a broad status to a specific kind.
GOOGLE_REASONS: dict[ErrorKind, str] = {
    ErrorKind.INVALID_REQUEST: "INVALID_REQUEST",
    ErrorKind.INVALID_ARGUMENT: "INVALID_ARGUMENT",
    ErrorKind.AUTHENTICATION: "API_KEY_INVALID",
    ErrorKind.PERMISSION: "ACCESS_DENIED",
    ErrorKind.NOT_FOUND: "NOT_FOUND",
    ErrorKind.MODEL_NOT_FOUND: "MODEL_NOT_FOUND",
    ErrorKind.RATE_LIMIT: "RATE_LIMIT_EXCEEDED",
    ErrorKind.INSUFFICIENT_QUOTA: "QUOTA_EXCEEDED",
    ErrorKind.TOKEN_LIMIT_EXCEEDED: "TOKEN_LIMIT_EXCEEDED",
    ErrorKind.CONTEXT_LENGTH_EXCEEDED: "CONTEXT_LENGTH_EXCEEDED",
    ErrorKind.CONTENT_FILTER: "CONTENT_FILTERED",
    ErrorKind.CONTENT_POLICY_VIOLATION: "SAFETY",
    ErrorKind.TOOL_ERROR: "TOOL_ERROR",
    ErrorKind.API_ERROR: "INTERNAL_ERROR",
    ErrorKind.MODEL_OVERLOADED: "MODEL_OVERLOADED",
    ErrorKind.UNAVAILABLE: "SERVICE_UNAVAILABLE",
    ErrorKind.DEADLINE_EXCEEDED: "DEADLINE_EXCEEDED",
    ErrorKind.UNKNOWN: "UNKNOWN_ERROR",
}
_GOOGLE_REASON_KINDS = {reason: kind for kind, reason in GOOGLE_REASONS.items()}

_REQUEST_ID_HEADERS = ("x-request-id", "request-id")
_DURATION = re.compile(r"^\s*(\d+(?:\.\d+)?)s\s*$")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def parse_provider_error(raw: Any, provider: str, response: Any = None) -> ErrorEnvelope:
    """Normalize a provider error payload.

    *response* is optional transport context: anything exposing
    ``status_code`` (or ``status``) and ``headers``, e.g. an
    :class:`httpx.Response`, or a mapping with those keys.

    Raises:
        UnsupportedProviderError: *provider* is not a supported provider.
    """
    if provider not in PROVIDERS:
        raise UnsupportedProviderError(provider)

    payload = _payload(raw)
    if provider == "openai":
        fields = _parse_openai(payload)
    elif provider == "anthropic":
        fields = _parse_anthropic(payload)
    else:
        fields = _parse_google(payload)

    kind: ErrorKind = fields.pop("type")
    if kind is ErrorKind.UNKNOWN:
        logger.debug("Unrecognized %s error payload: %r", provider, raw)

    headers = _headers(response)
    status = _response_status(response) or fields.pop("status", None) or default_status(kind)
    fields.pop("status", None)

    retry_after = _retry_after(_header(headers, "retry-after"))
    if retry_after is None:
        retry_after = fields.pop("retry_after", None)
    fields.pop("retry_after", None)

    request_id = next((v for v in (_header(headers, h) for h in _REQUEST_ID_HEADERS) if v), None)
    if request_id is None and isinstance(raw, Mapping) and isinstance(raw.get("request_id"), str):
        request_id = raw["request_id"]

    return ErrorEnvelope(
        type=kind,
        provider=provider,  # type: ignore[arg-type]
        http_status=status,
        retry_after=retry_after,
        request_id=request_id,
        original_error=OriginalPayload(provider=provider, raw=raw),  # type: ignore[arg-type]
        **fields,
    )


# ---------------------------------------------------------------------------
# Per-provider parsers
# ---------------------------------------------------------------------------


def _parse_openai(error: dict[str, Any]) -> dict[str, Any]:
    native = error.get("type")
    code = error.get("code")
    kind = _kind(native, OPENAI_TYPES)
    if kind in (ErrorKind.INVALID_REQUEST, ErrorKind.UNKNOWN) and isinstance(code, str) and code in OPENAI_CODES:
        kind = OPENAI_CODES[code]
    return {
        "type": kind,
        "message": _message(error, "Unknown OpenAI error"),
        "code": code if isinstance(code, (str, int)) else None,
        "details": {"param": error.get("param"), "openai_type": native},
    }


def _parse_anthropic(error: dict[str, Any]) -> dict[str, Any]:
    native = error.get("type")
    return {
        "type": _kind(native, ANTHROPIC_TYPES),
        "message": _message(error, "Unknown Anthropic error"),
        "details": {"anthropic_type": native},
    }


def _parse_google(error: dict[str, Any]) -> dict[str, Any]:
    native = error.get("status")
    kind = _kind(native, GOOGLE_STATUSES)
    details = error.get("details") if isinstance(error.get("details"), list) else []

    retry_after: float | None = None
    for detail in details:
        if not isinstance(detail, dict):
            continue
        reason = detail.get("reason")
        if isinstance(reason, str) and reason in _GOOGLE_REASON_KINDS:
            kind = _GOOGLE_REASON_KINDS[reason]
        if detail.get("@type") == GOOGLE_RETRY_INFO:
            retry_after = _duration(detail.get("retryDelay"))

    code = error.get("code")
    fields: dict[str, Any] = {
        "type": kind,
        "message": _message(error, "Unknown Google error"),
        "code": code if isinstance(code, (str, int)) and not isinstance(code, bool) else None,
        "details": {"status": native, "details": details or None},
        "retry_after": retry_after,
    }
    if isinstance(code, int) and not isinstance(code, bool) and 100 <= code < 600:
        fields["status"] = code
    return fields


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _payload(raw: Any) -> dict[str, Any]:
    """The inner error object of *raw*, tolerating strings and bare objects."""
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            return {"message": raw.decode(errors="replace") if isinstance(raw, bytes) else raw}
    if isinstance(raw, BaseException):
        return {"message": str(raw)}
    if not isinstance(raw, Mapping):
        return {}
    inner = raw.get("error")
    if isinstance(inner, Mapping):
        return dict(inner)
    return dict(raw)


def _kind(native: Any, table: dict[str, ErrorKind]) -> ErrorKind:
    if not isinstance(native, str):
        return ErrorKind.UNKNOWN
    return table.get(native) or _KINDS.get(native, ErrorKind.UNKNOWN)


def _message(error: dict[str, Any], default: str) -> str:
    message = error.get("message")
    return message if isinstance(message, str) and message else default


def _response_status(response: Any) -> int | None:
    if response is None:
        return None
    for key in ("status_code", "status"):
        value = response.get(key) if isinstance(response, Mapping) else getattr(response, key, None)
        if isinstance(value, int) and not isinstance(value, bool) and value:
            return value
    return None


def _headers(response: Any) -> Any:
    if response is None:
        return None
    if isinstance(response, Mapping):
        return response.get("headers")
    return getattr(response, "headers", None)


def _header(headers: Any, name: str) -> str | None:
    if not headers:
        return None
    getter = getattr(headers, "get", None)
    value = getter(name) if getter else None
    if value is None and isinstance(headers, Mapping):
        value = next((v for k, v in headers.items() if str(k).lower() == name), None)
    return str(value) if value is not None else None


def _retry_after(value: str | None) -> float | None:
    """Seconds to wait from a ``retry-after`` header; ``NaN`` if unreadable."""
    if value is None:
        return None
    value = value.strip()
    try:
        return float(value)
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return math.nan
    return max(0.0, when.timestamp() - time.time())


def _duration(value: Any) -> float | None:
    """Parse a protobuf duration string such as ``"30s"`` or ``"1.5s"``."""
    if not isinstance(value, str):
        return None
    match = _DURATION.match(value)
    return float(match.group(1)) if match else math.nan
