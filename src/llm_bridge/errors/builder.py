"""Provider-shaped error rendering.

:func:`build_universal_error` renders an :class:`ErrorKind` as the error
body a given provider would have returned, so a proxy can hand clients the
envelope their SDK expects. :func:`translate_error` does the same for an
envelope parsed from another provider.
"""

from __future__ import annotations

import math
from typing import Any

from llm_bridge.core.interface.models import PROVIDERS
from llm_bridge.errors.classify import default_status
from llm_bridge.errors.models import BuiltError, ErrorEnvelope, ErrorKind, TokenUsage
from llm_bridge.errors.parser import GOOGLE_ERROR_INFO, GOOGLE_REASONS, GOOGLE_RETRY_INFO
from llm_bridge.exceptions import UnsupportedProviderError

ANTHROPIC_TYPES: dict[ErrorKind, str] = {
    ErrorKind.MODEL_OVERLOADED: "overloaded_error",
    ErrorKind.INSUFFICIENT_QUOTA: "billing_error",
    ErrorKind.DEADLINE_EXCEEDED: "timeout_error",
}

GOOGLE_STATUSES: dict[ErrorKind, str] = {
    ErrorKind.INVALID_REQUEST: "INVALID_ARGUMENT",
    ErrorKind.INVALID_ARGUMENT: "INVALID_ARGUMENT",
    ErrorKind.CONTEXT_LENGTH_EXCEEDED: "INVALID_ARGUMENT",
    ErrorKind.CONTENT_FILTER: "INVALID_ARGUMENT",
    ErrorKind.CONTENT_POLICY_VIOLATION: "INVALID_ARGUMENT",
    ErrorKind.TOOL_ERROR: "INVALID_ARGUMENT",
    ErrorKind.AUTHENTICATION: "UNAUTHENTICATED",
    ErrorKind.PERMISSION: "PERMISSION_DENIED",
    ErrorKind.NOT_FOUND: "NOT_FOUND",
    ErrorKind.MODEL_NOT_FOUND: "NOT_FOUND",
    ErrorKind.RATE_LIMIT: "RESOURCE_EXHAUSTED",
    ErrorKind.INSUFFICIENT_QUOTA: "RESOURCE_EXHAUSTED",
    ErrorKind.TOKEN_LIMIT_EXCEEDED: "RESOURCE_EXHAUSTED",
    ErrorKind.API_ERROR: "INTERNAL",
    ErrorKind.UNKNOWN: "INTERNAL",
    ErrorKind.MODEL_OVERLOADED: "UNAVAILABLE",
    ErrorKind.UNAVAILABLE: "UNAVAILABLE",
    ErrorKind.DEADLINE_EXCEEDED: "DEADLINE_EXCEEDED",
}


def build_universal_error(
    kind: ErrorKind | str,
    message: str,
    provider: str,
    *,
    code: str | int | None = None,
    details: dict[str, Any] | None = None,
    tool_name: str | None = None,
    usage: TokenUsage | dict[str, Any] | None = None,
    retry_after: float | None = None,
    http_status: int | None = None,
) -> BuiltError:
    """Render *kind* as *provider*'s native error response.

    The status defaults to the usual one for *kind*; pass *http_status* to
    keep the status the error was originally returned with.

    Raises:
        UnsupportedProviderError: *provider* is not a supported provider.
    """
    if provider not in PROVIDERS:
        raise UnsupportedProviderError(provider)
    kind = ErrorKind(kind)
    status = http_status or default_status(kind)

    universal = ErrorEnvelope(
        type=kind,
        message=message,
        code=code,
        provider=provider,  # type: ignore[arg-type]
        http_status=status,
        retry_after=retry_after,
        details=details,
        usage=TokenUsage.model_validate(usage) if isinstance(usage, dict) else usage,
        tool_name=tool_name,
    )

    if provider == "openai":
        body = _openai_body(kind, message, code, details)
    elif provider == "anthropic":
        body = {"type": "error", "error": {"type": ANTHROPIC_TYPES.get(kind, kind.value), "message": message}}
    else:
        body = _google_body(kind, message, status, retry_after)

    headers: dict[str, str] = {}
    if retry_after is not None and math.isfinite(retry_after):
        headers["retry-after"] = str(max(0, math.ceil(retry_after)))

    return BuiltError(status_code=status, universal=universal, body=body, headers=headers)


def translate_error(envelope: ErrorEnvelope, target: str) -> BuiltError:
    """Re-render *envelope* for *target*, keeping kind, message, status and ``retry_after``."""
    return build_universal_error(
        envelope.type,
        envelope.message,
        target,
        code=envelope.code,
        details=envelope.details,
        tool_name=envelope.tool_name,
        usage=envelope.usage,
        retry_after=envelope.retry_after,
        http_status=envelope.http_status,
    )


def _openai_body(
    kind: ErrorKind,
    message: str,
    code: str | int | None,
    details: dict[str, Any] | None,
) -> dict[str, Any]:
    param = details.get("param") if details else None
    return {
        "error": {
            "type": kind.value,
            "message": message,
            "code": str(code) if code is not None else kind.value,
            "param": param if isinstance(param, str) else None,
        }
    }


def _google_body(kind: ErrorKind, message: str, status: int, retry_after: float | None) -> dict[str, Any]:
    details: list[dict[str, Any]] = [{"@type": GOOGLE_ERROR_INFO, "reason": GOOGLE_REASONS[kind]}]
    if retry_after is not None and math.isfinite(retry_after):
        details.append({"@type": GOOGLE_RETRY_INFO, "retryDelay": f"{max(0, math.ceil(retry_after))}s"})
    return {
        "error": {
            "code": status,
            "message": message,
            "status": GOOGLE_STATUSES[kind],
            "details": details,
        }
    }
