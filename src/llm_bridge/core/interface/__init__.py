"""Universal body schema, provider transpilers and translation entry points."""

from llm_bridge.core.interface.detector import detect_provider, is_openai_responses_endpoint
from llm_bridge.core.interface.models import (
    PROVIDERS,
    ContentPart,
    MediaContent,
    MediaSource,
    OriginalPayload,
    Provider,
    SystemPrompt,
    TextContent,
    ToolCall,
    ToolCallContent,
    ToolDefinition,
    ToolResult,
    ToolResultContent,
    UniversalBody,
    UniversalMessage,
)
from llm_bridge.core.interface.transpiler import Transpiler
from llm_bridge.core.interface.translate import (
    from_universal,
    get_transpiler,
    to_universal,
    translate_between_providers,
)

__all__ = [
    "PROVIDERS",
    "ContentPart",
    "MediaContent",
    "MediaSource",
    "OriginalPayload",
    "Provider",
    "SystemPrompt",
    "TextContent",
    "ToolCall",
    "ToolCallContent",
    "ToolDefinition",
    "ToolResult",
    "ToolResultContent",
    "Transpiler",
    "UniversalBody",
    "UniversalMessage",
    "detect_provider",
    "from_universal",
    "get_transpiler",
    "is_openai_responses_endpoint",
    "to_universal",
    "translate_between_providers",
]
