"""Anthropic transpiler — handles system extraction, content blocks and role alternation.

Key differences from the universal body:
- System prompt is a separate top-level parameter (string or text blocks).
- ``max_tokens`` is mandatory; 1024 is supplied when absent.
- Tool calls are ``tool_use`` blocks inside assistant messages and tool
  results are ``tool_result`` blocks inside user messages.
- Messages must alternate between user and assistant roles, so consecutive
  same-role messages are merged when translating from another provider.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from llm_bridge.core.interface.models import (
    ContentPart,
    MediaContent,
    MediaSource,
    SystemPrompt,
    TextContent,
    ToolCall,
    ToolCallContent,
    ToolDefinition,
    ToolResult,
    ToolResultContent,
    UniversalBody,
    UniversalMessage,
    generate_id,
)
from llm_bridge.core.interface.transpilers._common import (
    add_params,
    as_dict,
    as_list,
    boolean,
    from_provider,
    integer,
    is_opaque,
    number,
    opaque_part,
    original_raw,
    overlay,
    passthrough,
    pristine_system,
    raw_of,
    snapshot,
    split_known,
    stop_list,
    stringify,
    system_content,
    take,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 1024

_KNOWN = frozenset(
    {
        "model",
        "messages",
        "system",
        "max_tokens",
        "temperature",
        "top_p",
        "stream",
        "stop_sequences",
        "tools",
        "tool_choice",
    }
)
_CHOICE_TO_UNIVERSAL = {"auto": "auto", "any": "required", "none": "none"}
_CHOICE_FROM_UNIVERSAL = {"auto": "auto", "required": "any", "none": "none"}


def _block_text(blocks: list[Any]) -> str:
    return "\n\n".join(
        str(b.get("text", "")) for b in blocks if isinstance(b, dict) and b.get("type") == "text"
    )


class AnthropicTranspiler:
    """Converts between the universal body and Anthropic's messages API request."""

    provider = "anthropic"

    # ------------------------------------------------------------------
    # Anthropic -> universal
    # ------------------------------------------------------------------

    def to_universal(self, body: Any) -> UniversalBody:
        if not isinstance(body, dict):
            body = {}
        bag = split_known(body, _KNOWN)

        max_tokens = take(body, "max_tokens", integer, bag)
        if max_tokens is None and "max_tokens" not in bag:
            max_tokens = DEFAULT_MAX_TOKENS

        messages = [
            self._parse_message(msg, index)
            for index, msg in enumerate(as_list(body.get("messages")))
            if isinstance(msg, dict)
        ]

        tools = [self._parse_tool(t) for t in as_list(body.get("tools")) if isinstance(t, dict)]
        if not tools and body.get("tools") is not None:
            bag["tools"] = copy.deepcopy(body["tools"])

        model = body.get("model")
        return UniversalBody(
            provider="anthropic",
            model=str(model) if model is not None else "unknown",
            messages=messages,
            system=self._parse_system(body.get("system"), bag),
            temperature=take(body, "temperature", number, bag),
            top_p=take(body, "top_p", number, bag),
            max_tokens=max_tokens,
            stream=take(body, "stream", boolean, bag),
            stop=take(body, "stop_sequences", stop_list, bag),
            tools=tools or None,
            tool_choice=self._parse_tool_choice(body.get("tool_choice"), bag),
            provider_params=bag,
            original=snapshot("anthropic", body),
        )

    def _parse_system(self, value: Any, bag: dict[str, Any]) -> str | SystemPrompt | None:
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, list):
            cache_control = next(
                (b["cache_control"] for b in value if isinstance(b, dict) and b.get("cache_control")),
                None,
            )
            return SystemPrompt(
                content=_block_text(value),
                cache_control=copy.deepcopy(cache_control),
                original=snapshot("anthropic", value),
            )
        bag["system"] = copy.deepcopy(value)
        return None

    def _parse_message(self, msg: dict[str, Any], index: int) -> UniversalMessage:
        raw_role = msg.get("role")
        role = raw_role if raw_role in ("user", "assistant") else "user"
        metadata: dict[str, Any] = {"provider": "anthropic", "original_index": index}
        if role != raw_role:
            metadata["original_role"] = raw_role

        content = msg.get("content")
        parts: list[ContentPart]
        if isinstance(content, str):
            parts = [TextContent(text=content, original=snapshot("anthropic", content))]
        elif isinstance(content, list):
            parts = [self._parse_block(block) for block in content]
        elif content is None:
            parts = []
        else:
            parts = [opaque_part("anthropic", content)]
        return UniversalMessage(role=role, content=parts, metadata=metadata, original=snapshot("anthropic", msg))

    def _parse_block(self, block: Any) -> ContentPart:
        if not isinstance(block, dict):
            return opaque_part("anthropic", block)
        kind = block.get("type")
        original = snapshot("anthropic", block)

        if kind == "text":
            return TextContent(text=str(block.get("text", "")), original=original)

        if kind in ("image", "document"):
            source = as_dict(block.get("source"))
            media = MediaSource(file_name=block.get("title"))
            if source.get("type") == "base64":
                media.data = source.get("data")
                media.mime_type = source.get("media_type")
            elif source.get("type") == "url":
                media.url = source.get("url")
            elif source.get("type") == "file":
                media.file_uri = source.get("file_id")
            else:
                return opaque_part("anthropic", block)
            return MediaContent(type=kind, media=media, original=original)

        if kind == "tool_use":
            call = ToolCall(
                id=str(block.get("id") or generate_id("toolu")),
                name=str(block.get("name", "")),
                arguments=copy.deepcopy(as_dict(block.get("input"))),
            )
            return ToolCallContent(tool_call=call, original=original)

        if kind == "tool_result":
            result = ToolResult(
                tool_call_id=str(block.get("tool_use_id", "")),
                content=copy.deepcopy(block.get("content")),
                is_error=boolean(block.get("is_error")),
            )
            return ToolResultContent(tool_result=result, original=original)

        return opaque_part("anthropic", block)

    def _parse_tool(self, tool: dict[str, Any]) -> ToolDefinition:
        if "input_schema" in tool or tool.get("type") in (None, "custom"):
            return ToolDefinition(
                name=str(tool.get("name", "")),
                description=str(tool.get("description") or ""),
                parameters=copy.deepcopy(as_dict(tool.get("input_schema"))),
                original=snapshot("anthropic", tool),
            )
        return ToolDefinition(
            name=str(tool.get("name") or tool.get("type")),
            metadata={"builtin": True},
            original=snapshot("anthropic", tool),
        )

    def _parse_tool_choice(self, value: Any, bag: dict[str, Any]) -> str | dict[str, Any] | None:
        if value is None:
            return None
        choice = as_dict(value)
        kind = choice.get("type")
        if kind in _CHOICE_TO_UNIVERSAL:
            return _CHOICE_TO_UNIVERSAL[kind]
        if kind == "tool" and choice.get("name"):
            return {"name": choice["name"]}
        bag["tool_choice"] = copy.deepcopy(value)
        return None

    # ------------------------------------------------------------------
    # universal -> Anthropic
    # ------------------------------------------------------------------

    def from_universal(self, universal: UniversalBody) -> dict[str, Any]:
        raw_body = original_raw(universal, "anthropic")
        result: dict[str, Any] = {}
        if universal.model != "unknown" or "model" in raw_body:
            result["model"] = universal.model
        result["max_tokens"] = universal.max_tokens if universal.max_tokens is not None else DEFAULT_MAX_TOKENS

        system = self._render_system(universal)
        if system is not None:
            result["system"] = system

        messages = [self._render_message(msg) for msg in universal.messages if msg.role != "system"]
        if universal.provider != "anthropic":
            messages = _merge_consecutive_roles(messages)
        result["messages"] = messages

        if universal.temperature is not None:
            result["temperature"] = universal.temperature
        if universal.top_p is not None:
            result["top_p"] = universal.top_p
        if universal.stream is not None:
            result["stream"] = universal.stream
        if universal.stop is not None:
            result["stop_sequences"] = list(universal.stop)
        for knob in ("frequency_penalty", "presence_penalty", "seed"):
            if getattr(universal, knob) is not None:
                logger.debug("Anthropic has no %s; dropping it", knob)

        tools = [rendered for tool in universal.tools or [] if (rendered := self._render_tool(tool)) is not None]
        if tools:
            result["tools"] = tools
        if universal.tool_choice is not None:
            raw_choice = raw_body.get("tool_choice")
            if raw_choice is not None and self._parse_tool_choice(raw_choice, {}) == universal.tool_choice:
                result["tool_choice"] = copy.deepcopy(raw_choice)
            else:
                result["tool_choice"] = self._render_tool_choice(universal.tool_choice)

        return add_params(result, passthrough(universal, "anthropic"))

    def _render_system(self, universal: UniversalBody) -> str | list[dict[str, Any]] | None:
        text = system_content(universal)
        if text is None:
            return None
        system = universal.system
        raw = pristine_system(system, "anthropic")
        if isinstance(raw, list) and isinstance(system, SystemPrompt) and text == system.content == _block_text(raw):
            return copy.deepcopy(raw)
        if isinstance(system, SystemPrompt) and system.cache_control:
            return [{"type": "text", "text": text, "cache_control": copy.deepcopy(system.cache_control)}]
        return text

    def _render_message(self, msg: UniversalMessage) -> dict[str, Any]:
        role = msg.metadata.get("original_role") if from_provider(msg.original, "anthropic") else None
        role = role or ("assistant" if msg.role == "assistant" else "user")

        # Anthropic rejects empty text blocks
        parts = [
            p
            for p in msg.content
            if not (isinstance(p, TextContent) and not p.text and not from_provider(p.original, "anthropic"))
        ]
        blocks = [self._render_block(part) for part in parts]
        blocks.extend(self._render_tool_use(call) for call in msg.tool_calls or [])

        content: Any = blocks
        if len(parts) == 1 and not msg.tool_calls and isinstance(parts[0], TextContent):
            single = parts[0]
            if not is_opaque(single, "anthropic") and not raw_of(single.original, "anthropic"):
                content = single.text

        return overlay(msg.original, "anthropic", {"role": role, "content": content})

    def _render_block(self, part: ContentPart) -> dict[str, Any]:
        if is_opaque(part, "anthropic"):
            return copy.deepcopy(part.original.raw)  # type: ignore[union-attr]

        if isinstance(part, TextContent):
            return overlay(part.original, "anthropic", {"type": "text", "text": part.text})

        if isinstance(part, ToolCallContent):
            return overlay(part.original, "anthropic", self._render_tool_use(part.tool_call))

        if isinstance(part, ToolResultContent):
            result = part.tool_result
            rendered = {
                "type": "tool_result",
                "tool_use_id": result.tool_call_id,
                "content": self._render_result_content(result.content),
                "is_error": result.is_error,
            }
            return overlay(part.original, "anthropic", rendered)

        return self._render_media(part)

    def _render_media(self, part: MediaContent) -> dict[str, Any]:
        media = part.media
        source: dict[str, Any] | None = None
        if media.data:
            default = "image/png" if part.type == "image" else "application/pdf"
            source = {"type": "base64", "media_type": media.mime_type or default, "data": media.data}
        elif media.url:
            source = {"type": "url", "url": media.url}
        elif media.file_uri:
            if media.file_uri.startswith(("http://", "https://")):
                source = {"type": "url", "url": media.file_uri}
            else:
                source = {"type": "file", "file_id": media.file_uri}

        if part.type in ("image", "document") and source is not None:
            rendered: dict[str, Any] = {"type": part.type, "source": source}
            if part.type == "document":
                rendered["title"] = media.file_name
            return overlay(part.original, "anthropic", rendered)

        # Anthropic doesn't natively support audio or video
        location = media.url or media.file_uri or "inline"
        return {"type": "text", "text": f"[{part.type.capitalize()}: {location}]"}

    def _render_result_content(self, content: Any) -> Any:
        if content is None or isinstance(content, str):
            return content
        if isinstance(content, list) and all(
            isinstance(b, dict) and b.get("type") in ("text", "image") for b in content
        ):
            return copy.deepcopy(content)
        return stringify(content)

    def _render_tool_use(self, call: ToolCall) -> dict[str, Any]:
        return {"type": "tool_use", "id": call.id, "name": call.name, "input": copy.deepcopy(call.arguments)}

    def _render_tool(self, tool: ToolDefinition) -> dict[str, Any] | None:
        raw = raw_of(tool.original, "anthropic")
        if tool.is_builtin:
            return copy.deepcopy(raw) if raw else None
        schema = tool.parameters if tool.parameters or "input_schema" in raw else {"type": "object", "properties": {}}
        rendered = {
            "name": tool.name,
            "description": tool.description if tool.description or "description" in raw else None,
            "input_schema": copy.deepcopy(schema),
        }
        return overlay(tool.original, "anthropic", rendered)

    def _render_tool_choice(self, choice: str | dict[str, Any]) -> dict[str, Any]:
        if isinstance(choice, dict):
            return {"type": "tool", "name": choice.get("name")}
        return {"type": _CHOICE_FROM_UNIVERSAL.get(choice, choice)}


def _merge_consecutive_roles(
    messages: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Merge consecutive messages with the same role.

    Anthropic requires strict user/assistant alternation. When multiple
    consecutive messages share a role, their content is merged into one message.
    """
    merged: list[dict[str, Any]] = []
    for msg in messages:
        if merged and merged[-1]["role"] == msg["role"]:
            merged[-1]["content"] = _merge_content(merged[-1]["content"], msg["content"])
        else:
            merged.append(msg)
    return merged


def _merge_content(
    existing: str | list[dict[str, Any]], new: str | list[dict[str, Any]]
) -> list[dict[str, Any]]:
    """Merge two content values (str or list of blocks) into a single list."""
    result: list[dict[str, Any]] = []
    for item in (existing, new):
        if isinstance(item, str):
            if item:
                result.append({"type": "text", "text": item})
        else:
            result.extend(item)
    return result
