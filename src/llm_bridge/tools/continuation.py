"""Follow-up requests after a tool call has been executed locally.

A proxy that runs some tools itself needs to send the model the call it
made plus the tool's output, then forward the next response to the client.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from llm_bridge.core.interface.models import (
    PROVIDERS,
    ContentPart,
    ToolCall,
    ToolCallContent,
    ToolResult,
    UniversalBody,
    UniversalMessage,
)
from llm_bridge.core.interface.translate import from_universal
from llm_bridge.exceptions import UnsupportedProviderError

_BASE_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}

# Canonical spelling of the auth headers forwarded for each provider.
AUTH_HEADERS: dict[str, tuple[str, ...]] = {
    "openai": ("Authorization", "OpenAI-Organization", "OpenAI-Project"),
    "anthropic": ("x-api-key", "anthropic-version", "anthropic-beta", "Authorization"),
    "google": ("x-goog-api-key", "Authorization"),
}


def build_continuation_headers(provider: str, headers: Mapping[str, str]) -> dict[str, str]:
    """JSON content headers plus *provider*'s auth headers from *headers*.

    Hop-by-hop and body-specific headers (``host``, ``content-length``, ...)
    are never copied. Lookup is case-insensitive.
    """
    if provider not in PROVIDERS:
        raise UnsupportedProviderError(provider)
    lowered = {str(key).lower(): value for key, value in headers.items()}
    result = dict(_BASE_HEADERS)
    for name in AUTH_HEADERS[provider]:
        value = lowered.get(name.lower())
        if value:
            result[name] = value
    return result


def build_continuation_request(
    provider: str,
    universal: UniversalBody,
    tool_call: ToolCall,
    result: Any,
    *,
    target_url: str | None = None,
    is_error: bool | None = None,
) -> dict[str, Any]:
    """Append *tool_call* and its *result* to the conversation and render it for *provider*.

    *universal* is not modified.
    """
    call: list[ContentPart] = [ToolCallContent(tool_call=tool_call)]
    messages = [
        *universal.messages,
        UniversalMessage(id=f"assistant_tool_{tool_call.id}", role="assistant", content=call),
        UniversalMessage.tool(
            ToolResult(tool_call_id=tool_call.id, name=tool_call.name, content=result, is_error=is_error),
            name=tool_call.name,
        ),
    ]
    continued = universal.model_copy(update={"messages": messages})
    return from_universal(provider, continued, target_url)
