"""Tool-call extraction from provider responses and continuation requests."""

from llm_bridge.tools.continuation import build_continuation_headers, build_continuation_request
from llm_bridge.tools.extractor import (
    ToolCallExtraction,
    extract_tool_calls_from_response,
    find_tool_call,
    has_non_prefixed_tools,
)

__all__ = [
    "ToolCallExtraction",
    "build_continuation_headers",
    "build_continuation_request",
    "extract_tool_calls_from_response",
    "find_tool_call",
    "has_non_prefixed_tools",
]
