"""Tool-call extraction from raw provider *responses*.

Works on the JSON a provider returned, not on a universal body; for
universal messages use :func:`llm_bridge.core.interface.helpers.extract_tool_calls`.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from llm_bridge.core.interface.models import PROVIDERS, ToolCall
from llm_bridge.core.interface.transpilers._common import as_dict, as_list, parse_arguments
from llm_bridge.core.interface.transpilers.google import CallIds
from llm_bridge.exceptions import UnsupportedProviderError


class ToolCallExtraction(BaseModel):
    tool_calls: list[ToolCall] = []

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)


def extract_tool_calls_from_response(response: Any, provider: str) -> ToolCallExtraction:
    """Collect the tool calls in a provider response, in response order.

    OpenAI responses may be Chat Completions (``choices``) or Responses
    (``output``) shaped. Google calls without an id get ``call_<name>`` ids,
    numbered from the second call to the same function.

    Raises:
        UnsupportedProviderError: *provider* is not a supported provider.
    """
    if provider not in PROVIDERS:
        raise UnsupportedProviderError(provider)
    body = as_dict(response)

    if provider == "openai":
        calls = _openai_calls(body) if "choices" in body else _responses_calls(body)
    elif provider == "anthropic":
        calls = _anthropic_calls(body)
    else:
        calls = _google_calls(body)
    return ToolCallExtraction(tool_calls=calls)


def find_tool_call(calls: list[ToolCall], name: str) -> ToolCall | None:
    return next((call for call in calls if call.name == name), None)


def has_non_prefixed_tools(calls: list[ToolCall], prefix: str) -> bool:
    """True if any call's name does not start with *prefix*."""
    return any(not call.name.startswith(prefix) for call in calls)


# ---------------------------------------------------------------------------
# Per-provider extraction
# ---------------------------------------------------------------------------


def _openai_calls(body: dict[str, Any]) -> list[ToolCall]:
    choices = as_list(body.get("choices"))
    message = as_dict(as_dict(choices[0]).get("message")) if choices else {}
    calls: list[ToolCall] = []
    for raw in map(as_dict, as_list(message.get("tool_calls"))):
        function = as_dict(raw.get("function"))
        calls.append(
            ToolCall(
                id=str(raw.get("id") or ""),
                name=str(function.get("name") or ""),
                arguments=parse_arguments(function.get("arguments")),
            )
        )
    legacy = as_dict(message.get("function_call"))
    if legacy:
        calls.append(
            ToolCall(
                id=f"call_{legacy.get('name', '')}",
                name=str(legacy.get("name") or ""),
                arguments=parse_arguments(legacy.get("arguments")),
            )
        )
    return calls


def _responses_calls(body: dict[str, Any]) -> list[ToolCall]:
    return [
        ToolCall(
            id=str(item.get("call_id") or item.get("id") or ""),
            name=str(item.get("name") or ""),
            arguments=parse_arguments(item.get("arguments")),
        )
        for item in map(as_dict, as_list(body.get("output")))
        if item.get("type") == "function_call"
    ]


def _anthropic_calls(body: dict[str, Any]) -> list[ToolCall]:
    return [
        ToolCall(
            id=str(block.get("id") or ""),
            name=str(block.get("name") or ""),
            arguments=parse_arguments(block.get("input")),
        )
        for block in map(as_dict, as_list(body.get("content")))
        if block.get("type") == "tool_use"
    ]


def _google_calls(body: dict[str, Any]) -> list[ToolCall]:
    candidates = as_list(body.get("candidates"))
    content = as_dict(as_dict(candidates[0]).get("content")) if candidates else {}
    ids = CallIds()
    calls: list[ToolCall] = []
    for part in map(as_dict, as_list(content.get("parts"))):
        function_call = as_dict(part.get("functionCall") or part.get("function_call"))
        if not function_call:
            continue
        name = str(function_call.get("name") or "")
        call_id, synthetic = ids.for_call(name, function_call.get("id"))
        calls.append(
            ToolCall(
                id=call_id,
                name=name,
                arguments=parse_arguments(function_call.get("args")),
                metadata={"synthetic_id": True} if synthetic else {},
            )
        )
    return calls
