"""Error normalizer — parse, classify and re-render provider API errors."""

from llm_bridge.errors.builder import build_universal_error, translate_error
from llm_bridge.errors.classify import (
    ErrorClass,
    classify_error,
    is_quota_error,
    is_retryable_error,
    is_user_error,
)
from llm_bridge.errors.factories import (
    create_authentication_error,
    create_content_filter_error,
    create_context_length_error,
    create_model_not_found_error,
    create_rate_limit_error,
    create_tool_error,
)
from llm_bridge.errors.models import BuiltError, ErrorEnvelope, ErrorKind, TokenUsage
from llm_bridge.errors.parser import parse_provider_error
from llm_bridge.errors.reporting import create_error_log_entry, sanitize_error_for_client

__all__ = [
    "BuiltError",
    "ErrorClass",
    "ErrorEnvelope",
    "ErrorKind",
    "TokenUsage",
    "build_universal_error",
    "classify_error",
    "create_authentication_error",
    "create_content_filter_error",
    "create_context_length_error",
    "create_error_log_entry",
    "create_model_not_found_error",
    "create_rate_limit_error",
    "create_tool_error",
    "is_quota_error",
    "is_retryable_error",
    "is_user_error",
    "parse_provider_error",
    "sanitize_error_for_client",
    "translate_error",
]
