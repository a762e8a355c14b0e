"""OpenAI Responses API transpiler.

The Responses dialect replaces ``messages`` with an ``input`` that is either
a string or a list of items: role messages, ``function_call`` and
``function_call_output`` items, and provider-side items such as reasoning
traces. ``instructions`` carries the system prompt.
"""

from __future__ import annotations

import copy
import logging
from collections import deque
from typing import Any

from llm_bridge.core.interface.models import (
    ContentPart,
    MediaContent,
    MediaSource,
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
    layer,
    number,
    opaque_part,
    original_raw,
    overlay,
    parse_arguments,
    parse_data_uri,
    passthrough,
    raw_of,
    serialize_arguments,
    snapshot,
    split_known,
    stringify,
    take,
    to_data_uri,
)

logger = logging.getLogger(__name__)

DIALECT = "responses"

_KNOWN = frozenset(
    {
        "model",
        "input",
        "instructions",
        "temperature",
        "top_p",
        "max_output_tokens",
        "stream",
        "tools",
        "tool_choice",
    }
)
_TEXT_PARTS = ("input_text", "output_text", "text")


def _is_function_tool(tool: Any) -> bool:
    return isinstance(tool, dict) and tool.get("type", "function") == "function"


def is_responses_body(body: Any) -> bool:
    """True when *body* is shaped like a Responses API request."""
    return isinstance(body, dict) and "input" in body and "messages" not in body


class OpenAIResponsesTranspiler:
    """Converts between the universal body and OpenAI's Responses API request."""

    provider = "openai"
    dialect = DIALECT

    # ------------------------------------------------------------------
    # Responses -> universal
    # ------------------------------------------------------------------

    def to_universal(self, body: Any) -> UniversalBody:
        if not isinstance(body, dict):
            body = {}
        bag = split_known(body, _KNOWN)

        instructions = body.get("instructions")
        system = instructions if isinstance(instructions, str) else None
        if instructions is not None and system is None:
            bag["instructions"] = copy.deepcopy(instructions)

        raw_tools = as_list(body.get("tools"))
        tools = [self._parse_tool(t) for t in raw_tools if _is_function_tool(t)]
        if len(tools) != len(raw_tools) or (not tools and body.get("tools") is not None):
            bag["responses_tools"] = copy.deepcopy(body["tools"])

        model = body.get("model")
        return UniversalBody(
            provider="openai",
            model=str(model) if model is not None else "unknown",
            messages=self._parse_input(body.get("input")),
            system=system,
            temperature=take(body, "temperature", number, bag),
            top_p=take(body, "top_p", number, bag),
            max_tokens=take(body, "max_output_tokens", integer, bag),
            stream=take(body, "stream", boolean, bag),
            tools=tools or None,
            tool_choice=self._parse_tool_choice(body.get("tool_choice"), bag),
            provider_params=bag,
            original=snapshot("openai", body, dialect=DIALECT),
        )

    def _parse_input(self, value: Any) -> list[UniversalMessage]:
        if value is None:
            return []
        if isinstance(value, str):
            return [
                UniversalMessage(
                    role="user",
                    content=[TextContent(text=value, original=snapshot("openai", value, DIALECT))],
                    metadata={"provider": "openai"},
                )
            ]

        messages: list[UniversalMessage] = []
        for index, item in enumerate(as_list(value)):
            if not isinstance(item, dict):
                logger.debug("Skipping non-object Responses input item: %r", item)
                continue
            kind = item.get("type", "message" if "role" in item else None)
            metadata: dict[str, Any] = {"provider": "openai", "original_index": index}

            if kind == "message":
                messages.append(self._parse_message(item, metadata))
            elif kind == "function_call":
                call = ToolCall(
                    id=str(item.get("call_id") or item.get("id") or generate_id("call")),
                    name=str(item.get("name", "")),
                    arguments=parse_arguments(item.get("arguments")),
                    metadata={"raw_arguments": item.get("arguments"), "raw_item": copy.deepcopy(item)},
                )
                previous = messages[-1] if messages else None
                if previous is not None and previous.role == "assistant" and not previous.metadata.get("opaque_item"):
                    previous.tool_calls = [*(previous.tool_calls or []), call]
                else:
                    messages.append(UniversalMessage(role="assistant", tool_calls=[call], metadata=metadata))
            elif kind == "function_call_output":
                call_id = str(item.get("call_id", ""))
                result = ToolResult(tool_call_id=call_id, content=copy.deepcopy(item.get("output")))
                messages.append(
                    UniversalMessage(
                        role="tool",
                        content=[ToolResultContent(tool_result=result)],
                        metadata={**metadata, "tool_call_id": call_id},
                        original=snapshot("openai", item, DIALECT),
                    )
                )
            else:
                messages.append(
                    UniversalMessage(
                        role="assistant",
                        content=[opaque_part("openai", item, DIALECT)],
                        metadata={**metadata, "opaque_item": True},
                    )
                )
        return messages

    def _parse_message(self, item: dict[str, Any], metadata: dict[str, Any]) -> UniversalMessage:
        raw_role = item.get("role")
        role = "system" if raw_role == "developer" else raw_role
        if role not in ("system", "user", "assistant"):
            role = "user"
        if role != raw_role:
            metadata["original_role"] = raw_role

        content = item.get("content")
        parts: list[ContentPart]
        if isinstance(content, str):
            parts = [TextContent(text=content, original=snapshot("openai", content, DIALECT))]
        else:
            parts = [self._parse_part(part) for part in as_list(content)]
        return UniversalMessage(role=role, content=parts, metadata=metadata, original=snapshot("openai", item, DIALECT))

    def _parse_part(self, part: Any) -> ContentPart:
        if not isinstance(part, dict):
            return opaque_part("openai", part, DIALECT)
        kind = part.get("type")
        original = snapshot("openai", part, DIALECT)

        if kind in _TEXT_PARTS:
            return TextContent(text=str(part.get("text", "")), original=original)

        if kind == "input_image":
            url = part.get("image_url")
            parsed = parse_data_uri(url)
            source = MediaSource(detail=part.get("detail"), file_uri=part.get("file_id"))
            if parsed:
                source.mime_type, source.data = parsed
            else:
                source.url = url
            return MediaContent(type="image", media=source, original=original)

        if kind == "input_file":
            parsed = parse_data_uri(part.get("file_data"))
            source = MediaSource(file_uri=part.get("file_id"), file_name=part.get("filename"), url=part.get("file_url"))
            if parsed:
                source.mime_type, source.data = parsed
            return MediaContent(type="document", media=source, original=original)

        if kind == "input_audio":
            audio = as_dict(part.get("input_audio"))
            return MediaContent(
                type="audio",
                media=MediaSource(data=audio.get("data"), mime_type=f"audio/{audio.get('format', 'wav')}"),
                original=original,
            )

        return opaque_part("openai", part, DIALECT)

    def _parse_tool(self, tool: dict[str, Any]) -> ToolDefinition:
        function = tool["function"] if isinstance(tool.get("function"), dict) else tool
        return ToolDefinition(
            name=str(function.get("name", "")),
            description=str(function.get("description") or ""),
            parameters=copy.deepcopy(as_dict(function.get("parameters"))),
            original=snapshot("openai", tool, DIALECT),
        )

    def _parse_tool_choice(self, value: Any, bag: dict[str, Any]) -> str | dict[str, Any] | None:
        if value is None:
            return None
        if isinstance(value, str):
            return value
        choice = as_dict(value)
        name = choice.get("name") or as_dict(choice.get("function")).get("name")
        if choice.get("type") == "function" and name:
            return {"name": name}
        bag["responses_tool_choice"] = copy.deepcopy(value)
        return None

    # ------------------------------------------------------------------
    # universal -> Responses
    # ------------------------------------------------------------------

    def from_universal(self, universal: UniversalBody) -> dict[str, Any]:
        raw_body = original_raw(universal, "openai", DIALECT)
        result: dict[str, Any] = {}
        if universal.model != "unknown" or "model" in raw_body:
            result["model"] = universal.model

        if universal.system_text is not None:
            result["instructions"] = universal.system_text
        result["input"] = self._render_input(universal.messages)

        if universal.temperature is not None:
            result["temperature"] = universal.temperature
        if universal.top_p is not None:
            result["top_p"] = universal.top_p
        if universal.max_tokens is not None:
            result["max_output_tokens"] = universal.max_tokens
        if universal.stream is not None:
            result["stream"] = universal.stream

        params = passthrough(universal, "openai", DIALECT)
        tools = self._render_tools(universal.tools or [], params.pop("responses_tools", None))
        if tools is not None:
            result["tools"] = tools
        raw_choice = params.pop("responses_tool_choice", None)
        choice = universal.tool_choice
        if isinstance(choice, dict) and "name" in choice:
            result["tool_choice"] = {"type": "function", "name": choice["name"]}
        elif choice is not None:
            result["tool_choice"] = choice
        elif raw_choice is not None:
            result["tool_choice"] = raw_choice

        if universal.stop is not None:
            logger.debug("Responses API has no stop sequences; dropping %r", universal.stop)
        return add_params(result, params)

    def _render_input(self, messages: list[UniversalMessage]) -> str | list[dict[str, Any]]:
        if len(messages) == 1:
            only = messages[0]
            if (
                only.role == "user"
                and not only.tool_calls
                and len(only.content) == 1
                and isinstance(only.content[0], TextContent)
                and not raw_of(only.original, "openai", DIALECT)
                and not raw_of(only.content[0].original, "openai", DIALECT)
                and not is_opaque(only.content[0], "openai")
            ):
                return only.content[0].text

        items: list[dict[str, Any]] = []
        for msg in messages:
            items.extend(self._render_message(msg))
        return items

    def _render_message(self, msg: UniversalMessage) -> list[dict[str, Any]]:
        if msg.metadata.get("opaque_item") and len(msg.content) == 1 and is_opaque(msg.content[0], "openai", DIALECT):
            return [copy.deepcopy(msg.content[0].original.raw)]  # type: ignore[union-attr]

        items: list[dict[str, Any]] = []
        pending: list[ContentPart] = []
        role = msg.metadata.get("original_role") if from_provider(msg.original, "openai", DIALECT) else None
        role = role or ("user" if msg.role == "tool" else msg.role)
        keep_original = not any(isinstance(p, (ToolCallContent, ToolResultContent)) for p in msg.content)

        def flush() -> None:
            if not pending:
                return
            rendered = {"role": role, "content": self._render_content(list(pending), role)}
            if keep_original:
                rendered = overlay(msg.original, "openai", rendered, DIALECT)
            else:
                rendered["type"] = "message"
            items.append(rendered)
            pending.clear()

        for part in msg.content:
            if isinstance(part, ToolResultContent):
                flush()
                items.append(self._render_result(part.tool_result, msg))
            elif isinstance(part, ToolCallContent):
                flush()
                items.append(self._render_call(part.tool_call))
            else:
                pending.append(part)
        flush()

        items.extend(self._render_call(call) for call in msg.tool_calls or [])
        return items

    def _render_content(self, parts: list[ContentPart], role: str) -> Any:
        if len(parts) == 1 and isinstance(parts[0], TextContent) and not is_opaque(parts[0], "openai", DIALECT):
            if not raw_of(parts[0].original, "openai", DIALECT):
                return parts[0].text
        return [self._render_part(part, role) for part in parts]

    def _render_part(self, part: ContentPart, role: str) -> dict[str, Any]:
        if is_opaque(part, "openai", DIALECT):
            return copy.deepcopy(part.original.raw)  # type: ignore[union-attr]

        if isinstance(part, TextContent):
            kind = "output_text" if role == "assistant" else "input_text"
            return overlay(part.original, "openai", {"type": kind, "text": part.text}, DIALECT)

        media = part.media  # type: ignore[union-attr]
        raw = raw_of(part.original, "openai", DIALECT)
        if part.type == "image":
            url = to_data_uri(media.mime_type, media.data) if media.data else media.url
            detail = media.detail if media.detail is not None or raw else "auto"
            rendered = {"type": "input_image", "image_url": url, "detail": detail}
            if url is None:
                rendered["file_id"] = media.file_uri
            return overlay(part.original, "openai", rendered, DIALECT)

        if part.type == "document":
            rendered = {
                "type": "input_file",
                "file_data": to_data_uri(media.mime_type, media.data, "application/pdf") if media.data else None,
                "file_id": media.file_uri,
                "file_url": media.url,
                "filename": media.file_name,
            }
            return overlay(part.original, "openai", rendered, DIALECT)

        if part.type == "audio" and media.data and raw:
            return copy.deepcopy(raw)

        location = media.url or media.file_uri or "inline data"
        logger.debug("Responses input has no %s part; emitting a placeholder", part.type)
        return {"type": "input_text", "text": f"[{part.type.capitalize()}: {location}]"}

    def _render_call(self, call: ToolCall) -> dict[str, Any]:
        raw_item = call.metadata.get("raw_item")
        rendered = {
            "type": "function_call",
            "call_id": call.id,
            "name": call.name,
            "arguments": serialize_arguments(call.arguments, call.metadata.get("raw_arguments")),
        }
        if isinstance(raw_item, dict):
            return {**copy.deepcopy(raw_item), **rendered}
        return rendered

    def _render_result(self, result: ToolResult, msg: UniversalMessage) -> dict[str, Any]:
        output = result.content if isinstance(result.content, str) else stringify(result.content)
        rendered = {"type": "function_call_output", "call_id": result.tool_call_id, "output": output}
        if msg.role == "tool":
            return overlay(msg.original, "openai", rendered, DIALECT)
        return rendered

    def _render_tools(self, tools: list[ToolDefinition], raw_tools: Any) -> list[dict[str, Any]] | None:
        """Render function tools, keeping built-in entries where they stood."""
        functions = [self._render_tool(tool) for tool in tools if not tool.is_builtin]
        if raw_tools is None:
            return functions or None
        if not isinstance(raw_tools, list):
            return functions if functions else copy.deepcopy(raw_tools)
        pending = deque(functions)
        rendered: list[dict[str, Any]] = []
        for entry in as_list(raw_tools):
            if not _is_function_tool(entry):
                rendered.append(copy.deepcopy(entry))
                continue
            if pending:
                rendered.append(pending.popleft())
        rendered.extend(pending)
        return rendered

    def _render_tool(self, tool: ToolDefinition) -> dict[str, Any]:
        raw = raw_of(tool.original, "openai", DIALECT)
        nested = isinstance(raw.get("function"), dict)
        source = raw["function"] if nested else raw
        fields = layer(
            source,
            {
                "name": tool.name,
                "description": tool.description if tool.description or "description" in source else None,
                "parameters": copy.deepcopy(tool.parameters) if tool.parameters or "parameters" in source else None,
            },
        )
        if nested:
            return {**copy.deepcopy(raw), "type": "function", "function": fields}
        return {**fields, "type": "function"}
