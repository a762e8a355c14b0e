"""Token counting — heuristic estimates for universal bodies.

Counts are approximate by construction: text is measured at roughly four
characters per token, and media parts, tool calls and tool definitions add
a fixed surcharge each. Good enough for budgeting and cost previews; not a
tokenizer.
"""

from __future__ import annotations

import json
import math
from typing import Protocol, runtime_checkable

from pydantic import BaseModel

from llm_bridge.core.interface.models import (
    MediaContent,
    TextContent,
    ToolCallContent,
    ToolDefinition,
    ToolResultContent,
    UniversalBody,
    UniversalMessage,
)
from llm_bridge.core.interface.transpilers._common import stringify


class TokenAnalysis(BaseModel):
    """Result of :func:`count_universal_tokens`."""

    input_tokens: int = 0
    estimated_output_tokens: int = 0
    multimodal_content_count: int = 0
    tool_calls_count: int = 0


@runtime_checkable
class TokenCounter(Protocol):
    """Protocol for counting tokens in universal messages."""

    def count_message(self, message: UniversalMessage) -> int:
        """Return the token count for a single message."""
        ...

    def count_body(self, universal: UniversalBody) -> TokenAnalysis:
        """Return the token analysis for a whole request body."""
        ...


# ---------------------------------------------------------------------------
# Estimating counter
# ---------------------------------------------------------------------------

_CHARS_PER_TOKEN = 4

MEDIA_TOKENS: dict[str, int] = {
    "image": 85,
    "audio": 100,
    "video": 200,
    "document": 500,
}
TOOL_CALL_TOKENS = 50
TOOL_DEFINITION_TOKENS = 10
DEFAULT_OUTPUT_TOKENS = 1000


def estimate_text_tokens(text: str) -> int:
    """Approximate token count of *text* (four characters per token, rounded up)."""
    return math.ceil(len(text) / _CHARS_PER_TOKEN)


class EstimatingCounter:
    """Character-ratio counter with fixed surcharges for non-text content."""

    def count_message(self, message: UniversalMessage) -> int:
        tokens = 0
        for part in message.content:
            if isinstance(part, TextContent):
                tokens += estimate_text_tokens(part.text)
            elif isinstance(part, MediaContent):
                tokens += MEDIA_TOKENS.get(part.type, 0)
            elif isinstance(part, ToolCallContent):
                tokens += TOOL_CALL_TOKENS
            elif isinstance(part, ToolResultContent):
                tokens += estimate_text_tokens(stringify(part.tool_result.content))
        tokens += TOOL_CALL_TOKENS * len(message.tool_calls or [])
        return tokens

    def count_tool(self, tool: ToolDefinition) -> int:
        schema = json.dumps(
            {"name": tool.name, "description": tool.description, "parameters": tool.parameters}
        )
        return TOOL_DEFINITION_TOKENS + estimate_text_tokens(schema)

    def count_body(self, universal: UniversalBody) -> TokenAnalysis:
        input_tokens = estimate_text_tokens(universal.system_text or "")
        multimodal = 0
        tool_calls = 0
        for message in universal.messages:
            input_tokens += self.count_message(message)
            multimodal += sum(isinstance(part, MediaContent) for part in message.content)
            tool_calls += sum(isinstance(part, ToolCallContent) for part in message.content)
            tool_calls += len(message.tool_calls or [])
        input_tokens += sum(self.count_tool(tool) for tool in universal.tools or [])

        output = universal.max_tokens if universal.max_tokens is not None else DEFAULT_OUTPUT_TOKENS
        return TokenAnalysis(
            input_tokens=input_tokens,
            estimated_output_tokens=output,
            multimodal_content_count=multimodal,
            tool_calls_count=tool_calls,
        )


def count_universal_tokens(universal: UniversalBody, counter: TokenCounter | None = None) -> TokenAnalysis:
    """Estimate input/output tokens and count media parts and tool calls."""
    return (counter or EstimatingCounter()).count_body(universal)


def extract_model_from_universal(universal: UniversalBody) -> str:
    """The body's model name, or ``"unknown_model"`` when it was never set."""
    if not universal.model or universal.model == "unknown":
        return "unknown_model"
    return universal.model
