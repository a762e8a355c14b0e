"""Error classification — retryable vs user error, plus the quota tag.

Every (kind, status) pair is exactly one of retryable or user error.
Quota is an orthogonal tag and may co-occur with either.
"""

from __future__ import annotations

from typing import NamedTuple

from llm_bridge.errors.models import ErrorEnvelope, ErrorKind

# ---------------------------------------------------------------------------
# Default HTTP status per kind
# ---------------------------------------------------------------------------

HTTP_STATUS: dict[ErrorKind, int] = {
    ErrorKind.INVALID_REQUEST: 400,
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.CONTEXT_LENGTH_EXCEEDED: 400,
    ErrorKind.CONTENT_FILTER: 400,
    ErrorKind.CONTENT_POLICY_VIOLATION: 400,
    ErrorKind.TOOL_ERROR: 400,
    ErrorKind.AUTHENTICATION: 401,
    ErrorKind.PERMISSION: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.MODEL_NOT_FOUND: 404,
    ErrorKind.RATE_LIMIT: 429,
    ErrorKind.INSUFFICIENT_QUOTA: 429,
    ErrorKind.TOKEN_LIMIT_EXCEEDED: 429,
    ErrorKind.API_ERROR: 500,
    ErrorKind.UNKNOWN: 500,
    ErrorKind.MODEL_OVERLOADED: 503,
    ErrorKind.UNAVAILABLE: 503,
    ErrorKind.DEADLINE_EXCEEDED: 504,
}


def default_status(kind: ErrorKind) -> int:
    return HTTP_STATUS.get(kind, 500)


# ---------------------------------------------------------------------------
# Decision table
# ---------------------------------------------------------------------------

RETRYABLE_KINDS: frozenset[ErrorKind] = frozenset(
    {
        ErrorKind.RATE_LIMIT,
        ErrorKind.TOKEN_LIMIT_EXCEEDED,
        ErrorKind.API_ERROR,
        ErrorKind.MODEL_OVERLOADED,
        ErrorKind.UNAVAILABLE,
        ErrorKind.DEADLINE_EXCEEDED,
    }
)

QUOTA_KINDS: frozenset[ErrorKind] = frozenset(
    {
        ErrorKind.RATE_LIMIT,
        ErrorKind.INSUFFICIENT_QUOTA,
        ErrorKind.TOKEN_LIMIT_EXCEEDED,
    }
)

_RETRYABLE_STATUSES = frozenset({408, 429})


class ErrorClass(NamedTuple):
    retryable: bool
    user_error: bool
    quota: bool


def classify_error(kind: ErrorKind | str, http_status: int) -> ErrorClass:
    """Classify an error by its kind and HTTP status.

    Only ``unknown_error`` looks at the status: server-side and throttling
    statuses make it retryable, anything else is blamed on the request.
    """
    kind = ErrorKind(kind)
    if kind is ErrorKind.UNKNOWN:
        retryable = http_status >= 500 or http_status in _RETRYABLE_STATUSES
    else:
        retryable = kind in RETRYABLE_KINDS
    return ErrorClass(retryable=retryable, user_error=not retryable, quota=kind in QUOTA_KINDS)


def is_retryable_error(error: ErrorEnvelope) -> bool:
    return classify_error(error.type, error.http_status).retryable


def is_user_error(error: ErrorEnvelope) -> bool:
    return classify_error(error.type, error.http_status).user_error


def is_quota_error(error: ErrorEnvelope) -> bool:
    return classify_error(error.type, error.http_status).quota
