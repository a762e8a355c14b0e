"""Shortcuts for the errors a proxy most often has to produce itself."""

from __future__ import annotations

from llm_bridge.errors.builder import build_universal_error
from llm_bridge.errors.models import BuiltError, ErrorKind, TokenUsage


def create_authentication_error(provider: str, message: str = "Invalid API key") -> BuiltError:
    return build_universal_error(ErrorKind.AUTHENTICATION, message, provider)


def create_rate_limit_error(
    provider: str,
    message: str = "Rate limit exceeded",
    retry_after: float | None = None,
) -> BuiltError:
    return build_universal_error(ErrorKind.RATE_LIMIT, message, provider, retry_after=retry_after)


def create_model_not_found_error(provider: str, model: str) -> BuiltError:
    return build_universal_error(
        ErrorKind.MODEL_NOT_FOUND,
        f"Model '{model}' not found",
        provider,
        details={"model": model},
    )


def create_context_length_error(provider: str, token_count: int, max_tokens: int) -> BuiltError:
    return build_universal_error(
        ErrorKind.CONTEXT_LENGTH_EXCEEDED,
        f"Token count {token_count} exceeds maximum {max_tokens}",
        provider,
        details={"token_count": token_count, "max_tokens": max_tokens},
        usage=TokenUsage(total_tokens=token_count),
    )


def create_tool_error(provider: str, tool_name: str, message: str) -> BuiltError:
    return build_universal_error(
        ErrorKind.TOOL_ERROR,
        f"Tool '{tool_name}' error: {message}",
        provider,
        tool_name=tool_name,
        details={"tool_name": tool_name},
    )


def create_content_filter_error(provider: str, message: str = "Content policy violation") -> BuiltError:
    return build_universal_error(ErrorKind.CONTENT_POLICY_VIOLATION, message, provider)
