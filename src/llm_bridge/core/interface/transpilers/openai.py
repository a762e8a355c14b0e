"""OpenAI Chat Completions transpiler.

The universal body is modelled closely on ChatML, so this is the most
direct mapping: system and developer messages are lifted into ``system``,
``tool`` messages carry a single tool-result part, and assistant
``tool_calls`` stay at message level.
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
    layer,
    number,
    opaque_part,
    original_raw,
    overlay,
    parse_arguments,
    parse_data_uri,
    passthrough,
    pristine_system,
    raw_of,
    serialize_arguments,
    snapshot,
    split_known,
    stop_list,
    stringify,
    take,
    to_data_uri,
)

logger = logging.getLogger(__name__)

_KNOWN = frozenset(
    {
        "model",
        "messages",
        "temperature",
        "top_p",
        "max_tokens",
        "stream",
        "stop",
        "tools",
        "tool_choice",
        "frequency_penalty",
        "presence_penalty",
        "seed",
    }
)
_SYSTEM_ROLES = ("system", "developer")
_ROLES = ("user", "assistant", "tool")


def _system_text(messages: list[dict[str, Any]]) -> str:
    texts: list[str] = []
    for msg in messages:
        content = msg.get("content")
        if isinstance(content, str):
            texts.append(content)
        elif isinstance(content, list):
            texts.append(
                "".join(str(p.get("text", "")) for p in content if isinstance(p, dict) and p.get("type") == "text")
            )
    return "\n\n".join(texts)


def _audio_format(mime_type: str | None) -> str:
    if mime_type and "/" in mime_type:
        subtype = mime_type.split("/", 1)[1]
        return "mp3" if subtype == "mpeg" else subtype
    return "wav"


class OpenAITranspiler:
    """Converts between the universal body and OpenAI's chat completion request."""

    provider = "openai"

    # ------------------------------------------------------------------
    # OpenAI -> universal
    # ------------------------------------------------------------------

    def to_universal(self, body: Any) -> UniversalBody:
        if not isinstance(body, dict):
            body = {}
        bag = split_known(body, _KNOWN)

        raw_messages = [m for m in as_list(body.get("messages")) if isinstance(m, dict)]
        system = self._parse_system([m for m in raw_messages if m.get("role") in _SYSTEM_ROLES])
        messages = [
            self._parse_message(msg, index)
            for index, msg in enumerate(raw_messages)
            if msg.get("role") not in _SYSTEM_ROLES
        ]

        max_tokens = take(body, "max_tokens", integer, bag)
        if max_tokens is None and "max_tokens" not in body and integer(body.get("max_completion_tokens")) is not None:
            max_tokens = integer(bag.pop("max_completion_tokens"))

        tools = [self._parse_tool(t) for t in as_list(body.get("tools")) if isinstance(t, dict)]
        if not tools and body.get("tools") is not None:
            bag["tools"] = copy.deepcopy(body["tools"])
        tool_choice = self._parse_tool_choice(body.get("tool_choice"), bag)

        model = body.get("model")
        return UniversalBody(
            provider="openai",
            model=str(model) if model is not None else "unknown",
            messages=messages,
            system=system,
            temperature=take(body, "temperature", number, bag),
            top_p=take(body, "top_p", number, bag),
            max_tokens=max_tokens,
            stream=take(body, "stream", boolean, bag),
            stop=take(body, "stop", stop_list, bag),
            frequency_penalty=take(body, "frequency_penalty", number, bag),
            presence_penalty=take(body, "presence_penalty", number, bag),
            seed=take(body, "seed", integer, bag),
            tools=tools or None,
            tool_choice=tool_choice,
            provider_params=bag,
            original=snapshot("openai", body, dialect="chat"),
        )

    def _parse_system(self, messages: list[dict[str, Any]]) -> str | SystemPrompt | None:
        if not messages:
            return None
        first = messages[0]
        if (
            len(messages) == 1
            and first.get("role") == "system"
            and isinstance(first.get("content"), str)
            and set(first) <= {"role", "content"}
        ):
            return first["content"]
        return SystemPrompt(content=_system_text(messages), original=snapshot("openai", messages))

    def _parse_message(self, msg: dict[str, Any], index: int) -> UniversalMessage:
        raw_role = msg.get("role")
        metadata: dict[str, Any] = {"provider": "openai", "original_index": index}

        if raw_role in ("tool", "function"):
            tool_call_id = str(msg.get("tool_call_id") or msg.get("name") or "")
            metadata["tool_call_id"] = tool_call_id
            result = ToolResult(tool_call_id=tool_call_id, name=msg.get("name"), content=copy.deepcopy(msg.get("content")))
            return UniversalMessage(
                role="tool",
                content=[ToolResultContent(tool_result=result)],
                metadata=metadata,
                original=snapshot("openai", msg),
            )

        role = raw_role if raw_role in _ROLES else "user"
        if role != raw_role:
            metadata["original_role"] = raw_role

        content = self._parse_content(msg.get("content"), metadata)
        tool_calls = [self._parse_tool_call(tc) for tc in as_list(msg.get("tool_calls")) if isinstance(tc, dict)]
        return UniversalMessage(
            role=role,
            content=content,
            tool_calls=tool_calls or None,
            metadata=metadata,
            original=snapshot("openai", msg),
        )

    def _parse_content(self, content: Any, metadata: dict[str, Any]) -> list[ContentPart]:
        if content is None:
            return []
        if isinstance(content, str):
            return [TextContent(text=content, original=snapshot("openai", content))]
        if not isinstance(content, list):
            return [opaque_part("openai", content)]
        return [self._parse_part(part, metadata) for part in content]

    def _parse_part(self, part: Any, metadata: dict[str, Any]) -> ContentPart:
        if isinstance(part, str):
            return TextContent(text=part, original=snapshot("openai", part))
        if not isinstance(part, dict):
            return opaque_part("openai", part)

        kind = part.get("type")
        original = snapshot("openai", part)

        if kind == "text":
            return TextContent(text=str(part.get("text", "")), original=original)

        if kind == "image_url":
            image = part.get("image_url")
            url = image if isinstance(image, str) else as_dict(image).get("url")
            detail = as_dict(image).get("detail")
            if detail:
                metadata["detail"] = detail
            parsed = parse_data_uri(url)
            if parsed:
                source = MediaSource(mime_type=parsed[0], data=parsed[1], detail=detail)
            else:
                source = MediaSource(url=url, detail=detail)
            return MediaContent(type="image", media=source, original=original)

        if kind == "input_audio":
            audio = as_dict(part.get("input_audio"))
            return MediaContent(
                type="audio",
                media=MediaSource(data=audio.get("data"), mime_type=f"audio/{audio.get('format', 'wav')}"),
                original=original,
            )

        if kind == "file":
            file = as_dict(part.get("file"))
            parsed = parse_data_uri(file.get("file_data"))
            source = MediaSource(file_uri=file.get("file_id"), file_name=file.get("filename"))
            if parsed:
                source.mime_type, source.data = parsed
            elif file.get("file_data"):
                source.data = file["file_data"]
            return MediaContent(type="document", media=source, original=original)

        return opaque_part("openai", part)

    def _parse_tool_call(self, tc: dict[str, Any]) -> ToolCall:
        function = as_dict(tc.get("function"))
        metadata: dict[str, Any] = {"raw_arguments": function.get("arguments")}
        if tc.get("type") not in (None, "function"):
            metadata["type"] = tc["type"]
        return ToolCall(
            id=str(tc.get("id") or generate_id("call")),
            name=str(function.get("name", "")),
            arguments=parse_arguments(function.get("arguments")),
            metadata=metadata,
        )

    def _parse_tool(self, tool: dict[str, Any]) -> ToolDefinition:
        function = tool.get("function")
        if tool.get("type", "function") == "function" and isinstance(function, dict):
            return ToolDefinition(
                name=str(function.get("name", "")),
                description=str(function.get("description") or ""),
                parameters=copy.deepcopy(as_dict(function.get("parameters"))),
                original=snapshot("openai", tool),
            )
        return ToolDefinition(
            name=str(tool.get("type", "unknown")),
            metadata={"builtin": True},
            original=snapshot("openai", tool),
        )

    def _parse_tool_choice(self, value: Any, bag: dict[str, Any]) -> str | dict[str, Any] | None:
        if value is None:
            return None
        if isinstance(value, str):
            return value
        name = as_dict(as_dict(value).get("function")).get("name")
        if as_dict(value).get("type") == "function" and name:
            return {"name": name}
        bag["tool_choice"] = copy.deepcopy(value)
        return None

    # ------------------------------------------------------------------
    # universal -> OpenAI
    # ------------------------------------------------------------------

    def from_universal(self, universal: UniversalBody) -> dict[str, Any]:
        raw_body = original_raw(universal, "openai")
        result: dict[str, Any] = {}
        if universal.model != "unknown" or "model" in raw_body:
            result["model"] = universal.model

        messages = self._render_system(universal.system)
        for msg in universal.messages:
            messages.extend(self._render_message(msg))
        result["messages"] = messages

        if universal.temperature is not None:
            result["temperature"] = universal.temperature
        if universal.top_p is not None:
            result["top_p"] = universal.top_p
        if universal.max_tokens is not None:
            uses_completion_field = "max_completion_tokens" in raw_body and "max_tokens" not in raw_body
            result["max_completion_tokens" if uses_completion_field else "max_tokens"] = universal.max_tokens
        if universal.stream is not None:
            result["stream"] = universal.stream
        if universal.stop is not None:
            raw_stop = raw_body.get("stop")
            result["stop"] = raw_stop if isinstance(raw_stop, str) and universal.stop == [raw_stop] else list(universal.stop)
        if universal.frequency_penalty is not None:
            result["frequency_penalty"] = universal.frequency_penalty
        if universal.presence_penalty is not None:
            result["presence_penalty"] = universal.presence_penalty
        if universal.seed is not None:
            result["seed"] = universal.seed

        tools = [rendered for tool in universal.tools or [] if (rendered := self._render_tool(tool)) is not None]
        if tools:
            result["tools"] = tools
        if universal.tool_choice is not None:
            result["tool_choice"] = self._render_tool_choice(universal.tool_choice)

        return add_params(result, passthrough(universal, "openai"))

    def _render_system(self, system: str | SystemPrompt | None) -> list[dict[str, Any]]:
        if system is None:
            return []
        raw = pristine_system(system, "openai")
        text = system.content if isinstance(system, SystemPrompt) else system
        if isinstance(raw, list) and _system_text(raw) == text:
            return copy.deepcopy(raw)
        return [{"role": "system", "content": text}]

    def _render_message(self, msg: UniversalMessage) -> list[dict[str, Any]]:
        if msg.role == "system":
            return [overlay(msg.original, "openai", {"role": "system", "content": msg.text})]

        if msg.role == "tool" or any(isinstance(p, ToolResultContent) for p in msg.content):
            return self._render_results(msg)

        calls = list(msg.tool_calls or [])
        calls.extend(p.tool_call for p in msg.content if isinstance(p, ToolCallContent))
        parts = [p for p in msg.content if not isinstance(p, ToolCallContent)]

        role = msg.metadata.get("original_role") if from_provider(msg.original, "openai") else None
        rendered: dict[str, Any] = {
            "role": role or msg.role,
            "content": self._render_content(parts, msg),
        }
        if calls:
            rendered["tool_calls"] = [self._render_tool_call(call) for call in calls]
        return [overlay(msg.original, "openai", rendered)]

    def _render_results(self, msg: UniversalMessage) -> list[dict[str, Any]]:
        """Split tool results into ``tool`` messages, keeping surrounding parts in order."""
        out: list[dict[str, Any]] = []
        pending: list[ContentPart] = []
        results = [p for p in msg.content if isinstance(p, ToolResultContent)]
        role = "user" if msg.role == "tool" else msg.role

        def flush() -> None:
            if pending:
                out.append({"role": role, "content": self._render_content(list(pending), msg)})
                pending.clear()

        for part in msg.content:
            if not isinstance(part, ToolResultContent):
                pending.append(part)
                continue
            flush()
            result = part.tool_result
            rendered = {
                "role": "tool",
                "tool_call_id": result.tool_call_id,
                "content": self._render_result_content(result),
            }
            if msg.role == "tool" and len(results) == 1:
                out.append(overlay(msg.original, "openai", rendered))
            else:
                out.append(rendered)
        flush()
        return out

    def _render_result_content(self, result: ToolResult) -> Any:
        content = result.content
        if isinstance(content, str):
            return content
        if isinstance(content, list) and all(isinstance(b, dict) and b.get("type") == "text" for b in content):
            return [{"type": "text", "text": str(b.get("text", ""))} for b in content]
        return stringify(content)

    def _render_content(self, parts: list[ContentPart], msg: UniversalMessage) -> Any:
        if not parts:
            return None if msg.role == "assistant" else ""
        if len(parts) == 1 and isinstance(parts[0], TextContent) and not is_opaque(parts[0], "openai"):
            single = parts[0]
            if not (from_provider(single.original, "openai") and isinstance(single.original.raw, dict)):  # type: ignore[union-attr]
                return single.text
        return [self._render_part(part, msg) for part in parts]

    def _render_part(self, part: ContentPart, msg: UniversalMessage) -> dict[str, Any]:
        if is_opaque(part, "openai"):
            return copy.deepcopy(part.original.raw)  # type: ignore[union-attr]

        if isinstance(part, TextContent):
            return overlay(part.original, "openai", {"type": "text", "text": part.text})

        if isinstance(part, MediaContent):
            return self._render_media(part, msg)

        if isinstance(part, ToolCallContent):
            call = part.tool_call
            return {"type": "text", "text": f"[Tool call: {call.name}({serialize_arguments(call.arguments)})]"}

        return {"type": "text", "text": stringify(part.tool_result.content)}

    def _render_media(self, part: MediaContent, msg: UniversalMessage) -> dict[str, Any]:
        media = part.media
        raw = raw_of(part.original, "openai")

        if part.type == "image":
            url = to_data_uri(media.mime_type, media.data) if media.data else (media.url or media.file_uri)
            detail = media.detail
            if detail is None and not from_provider(part.original, "openai"):
                detail = msg.metadata.get("detail")
            image = layer(raw.get("image_url"), {"url": url, "detail": detail})
            return overlay(part.original, "openai", {"type": "image_url", "image_url": image})

        if part.type == "audio" and media.data:
            audio = {"data": media.data, "format": _audio_format(media.mime_type)}
            return overlay(part.original, "openai", {"type": "input_audio", "input_audio": audio})

        if part.type == "document" and (media.data or media.file_uri):
            file = layer(
                raw.get("file"),
                {
                    "file_data": to_data_uri(media.mime_type, media.data, "application/pdf") if media.data else None,
                    "file_id": media.file_uri if not media.data else None,
                    "filename": media.file_name,
                },
            )
            return overlay(part.original, "openai", {"type": "file", "file": file})

        location = media.url or media.file_uri or "inline data"
        logger.debug("OpenAI chat has no %s input; emitting a placeholder", part.type)
        return {"type": "text", "text": f"[{part.type.capitalize()}: {location}]"}

    def _render_tool_call(self, call: ToolCall) -> dict[str, Any]:
        return {
            "id": call.id,
            "type": call.metadata.get("type", "function"),
            "function": {
                "name": call.name,
                "arguments": serialize_arguments(call.arguments, call.metadata.get("raw_arguments")),
            },
        }

    def _render_tool(self, tool: ToolDefinition) -> dict[str, Any] | None:
        raw = raw_of(tool.original, "openai")
        if tool.is_builtin:
            return copy.deepcopy(raw) if raw else None
        raw_function = as_dict(raw.get("function"))
        function = layer(
            raw_function,
            {
                "name": tool.name,
                "description": tool.description if tool.description or "description" in raw_function else None,
                "parameters": copy.deepcopy(tool.parameters) if tool.parameters or "parameters" in raw_function else None,
            },
        )
        return overlay(tool.original, "openai", {"type": "function", "function": function})

    def _render_tool_choice(self, choice: str | dict[str, Any]) -> Any:
        if isinstance(choice, dict) and "name" in choice:
            return {"type": "function", "function": {"name": choice["name"]}}
        return choice
