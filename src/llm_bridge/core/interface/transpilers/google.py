"""Google GenerateContent transpiler — maps contents/parts to universal messages.

Key differences from the universal body:
- Uses "model" role instead of "assistant".
- System prompt is ``systemInstruction``, sampling knobs live in ``generationConfig``.
- Tool calls are ``functionCall`` parts; tool results are ``functionResponse``
  parts inside user contents. Calls usually carry no id, so deterministic
  ``call_<name>`` ids are assigned and responses are paired with them by name.
- Request keys may arrive in camelCase or snake_case; output is camelCase.
"""

from __future__ import annotations

import copy
import json
import logging
import re
from collections import defaultdict, deque
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
)
from llm_bridge.core.interface.transpilers._common import (
    add_params,
    as_dict,
    as_list,
    deep_merge,
    from_provider,
    integer,
    is_opaque,
    layer,
    media_kind,
    number,
    opaque_part,
    original_raw,
    overlay,
    passthrough,
    pristine_system,
    raw_of,
    snapshot,
    stop_list,
    stringify,
    system_content,
    take,
)

logger = logging.getLogger(__name__)

_SNAKE = re.compile(r"_([a-z])")

_ROLE_TO_UNIVERSAL = {"user": "user", "model": "assistant"}
_MODE_TO_UNIVERSAL = {"AUTO": "auto", "ANY": "required", "NONE": "none"}
_MODE_FROM_UNIVERSAL = {"auto": "AUTO", "required": "ANY", "none": "NONE"}
_DEFAULT_MIME = {
    "image": "image/jpeg",
    "audio": "audio/mp3",
    "video": "video/mp4",
    "document": "application/pdf",
}

# generationConfig keys modelled by the universal body
_GENERATION_KNOBS = (
    ("temperature", "temperature", number),
    ("topP", "top_p", number),
    ("maxOutputTokens", "max_tokens", integer),
    ("stopSequences", "stop", stop_list),
    ("seed", "seed", integer),
    ("frequencyPenalty", "frequency_penalty", number),
    ("presencePenalty", "presence_penalty", number),
)


def _camel(name: str) -> str:
    return _SNAKE.sub(lambda m: m.group(1).upper(), name)


def _camel_keys(value: Any) -> dict[str, Any]:
    """Shallow copy of a dict with snake_case keys renamed to camelCase."""
    return {_camel(k): v for k, v in as_dict(value).items()}


def _text_of(content: dict[str, Any]) -> str:
    return "\n\n".join(
        str(p["text"]) for p in as_list(content.get("parts")) if isinstance(p, dict) and "text" in p
    )


class CallIds:
    """Assigns deterministic ids to Google function calls and pairs responses."""

    def __init__(self) -> None:
        self._calls: defaultdict[str, int] = defaultdict(int)
        self._responses: defaultdict[str, int] = defaultdict(int)
        self._pending: defaultdict[str, deque[str]] = defaultdict(deque)

    @staticmethod
    def _make(name: str, n: int) -> str:
        return f"call_{name}" if n == 1 else f"call_{name}_{n}"

    def for_call(self, name: str, given: Any) -> tuple[str, bool]:
        self._calls[name] += 1
        call_id = str(given) if given else self._make(name, self._calls[name])
        self._pending[name].append(call_id)
        return call_id, not given

    def for_response(self, name: str, given: Any) -> str:
        self._responses[name] += 1
        if given:
            return str(given)
        if self._pending[name]:
            return self._pending[name].popleft()
        return self._make(name, self._responses[name])


class GoogleTranspiler:
    """Converts between the universal body and Google's generateContent request."""

    provider = "google"

    # ------------------------------------------------------------------
    # Google -> universal
    # ------------------------------------------------------------------

    def to_universal(self, body: Any) -> UniversalBody:
        body = _camel_keys(body)
        known = {"model", "contents", "systemInstruction", "generationConfig", "tools", "toolConfig"}
        bag = {k: copy.deepcopy(v) for k, v in body.items() if k not in known}

        raw_generation = body.get("generationConfig")
        generation = _camel_keys(raw_generation)
        knob_keys = {key for key, _, _ in _GENERATION_KNOBS}
        knobs: dict[str, Any] = {}
        leftover: dict[str, Any] = {}
        for key, field, coerce in _GENERATION_KNOBS:
            knobs[field] = take(generation, key, coerce, leftover)
        leftover.update({k: copy.deepcopy(v) for k, v in generation.items() if k not in knob_keys})
        if leftover:
            bag["generationConfig"] = leftover
        elif raw_generation is not None and not isinstance(raw_generation, dict):
            bag["generationConfig"] = copy.deepcopy(raw_generation)

        ids = CallIds()
        messages = [
            self._parse_content(content, index, ids)
            for index, content in enumerate(as_list(body.get("contents")))
            if isinstance(content, dict)
        ]

        tools = self._parse_tools(body.get("tools"))
        if not tools and body.get("tools") is not None:
            bag["tools"] = copy.deepcopy(body["tools"])

        model = body.get("model")
        return UniversalBody(
            provider="google",
            model=str(model).removeprefix("models/") if model is not None else "unknown",
            messages=messages,
            system=self._parse_system(body.get("systemInstruction"), bag),
            tools=tools or None,
            tool_choice=self._parse_tool_config(body.get("toolConfig"), bag),
            provider_params=bag,
            original=snapshot("google", body),
            **knobs,
        )

    def _parse_system(self, value: Any, bag: dict[str, Any]) -> str | SystemPrompt | None:
        if value is None or isinstance(value, str):
            return value
        if not isinstance(value, dict):
            bag["systemInstruction"] = copy.deepcopy(value)
            return None
        instruction = _camel_keys(value)
        parts = as_list(instruction.get("parts"))
        if set(instruction) == {"parts"} and len(parts) == 1 and set(as_dict(parts[0])) == {"text"}:
            return str(parts[0]["text"])
        return SystemPrompt(content=_text_of(instruction), original=snapshot("google", instruction))

    def _parse_content(self, content: dict[str, Any], index: int, ids: CallIds) -> UniversalMessage:
        raw_role = content.get("role", "user")
        role = _ROLE_TO_UNIVERSAL.get(raw_role, "user")
        metadata: dict[str, Any] = {"provider": "google", "original_index": index}
        if raw_role != role and raw_role != "model":
            metadata["original_role"] = raw_role

        parts = [self._parse_part(part, ids) for part in as_list(content.get("parts"))]
        return UniversalMessage(role=role, content=parts, metadata=metadata, original=snapshot("google", _camel_keys(content)))

    def _parse_part(self, part: Any, ids: CallIds) -> ContentPart:
        if not isinstance(part, dict):
            return opaque_part("google", part)
        part = _camel_keys(part)
        original = snapshot("google", part)

        if "text" in part and not part.get("thought"):
            return TextContent(text=str(part["text"]), original=original)

        if "inlineData" in part:
            inline = _camel_keys(part["inlineData"])
            mime = inline.get("mimeType")
            return MediaContent(
                type=media_kind(mime),
                media=MediaSource(data=inline.get("data"), mime_type=mime),
                original=original,
            )

        if "fileData" in part:
            file = _camel_keys(part["fileData"])
            mime = file.get("mimeType")
            return MediaContent(
                type=media_kind(mime),
                media=MediaSource(file_uri=file.get("fileUri"), mime_type=mime),
                original=original,
            )

        if "functionCall" in part:
            call = as_dict(part["functionCall"])
            name = str(call.get("name", ""))
            call_id, synthetic = ids.for_call(name, call.get("id"))
            tool_call = ToolCall(
                id=call_id,
                name=name,
                arguments=copy.deepcopy(as_dict(call.get("args"))),
                metadata={"synthetic_id": True} if synthetic else {},
            )
            return ToolCallContent(tool_call=tool_call, original=original)

        if "functionResponse" in part:
            response = as_dict(part["functionResponse"])
            name = str(response.get("name", ""))
            result = ToolResult(
                tool_call_id=ids.for_response(name, response.get("id")),
                name=name,
                content=copy.deepcopy(response.get("response")),
                metadata={} if response.get("id") else {"synthetic_id": True},
            )
            return ToolResultContent(tool_result=result, original=original)

        return opaque_part("google", part)

    def _parse_tools(self, value: Any) -> list[ToolDefinition]:
        tools: list[ToolDefinition] = []
        for group, entry in enumerate(as_list(value)):
            entry = _camel_keys(entry)
            if not entry:
                continue
            if "functionDeclarations" not in entry:
                tools.append(
                    ToolDefinition(name=next(iter(entry)), metadata={"builtin": True}, original=snapshot("google", entry))
                )
                continue
            for decl in as_list(entry["functionDeclarations"]):
                decl = _camel_keys(decl)
                schema = decl.get("parameters", decl.get("parametersJsonSchema"))
                tools.append(
                    ToolDefinition(
                        name=str(decl.get("name", "")),
                        description=str(decl.get("description") or ""),
                        parameters=copy.deepcopy(as_dict(schema)),
                        metadata={"declaration_group": group},
                        original=snapshot("google", decl),
                    )
                )
        return tools

    def _parse_tool_config(self, value: Any, bag: dict[str, Any]) -> str | dict[str, Any] | None:
        if value is None:
            return None
        config = _camel_keys(value)
        calling = _camel_keys(config.pop("functionCallingConfig", None))
        mode = calling.pop("mode", None)
        allowed = calling.get("allowedFunctionNames")

        choice: str | dict[str, Any] | None = None
        if isinstance(mode, str) and mode.upper() in _MODE_TO_UNIVERSAL:
            choice = _MODE_TO_UNIVERSAL[mode.upper()]
            if choice == "required" and isinstance(allowed, list) and len(allowed) == 1:
                choice = {"name": allowed[0]}
                calling.pop("allowedFunctionNames")
        elif mode is not None:
            calling["mode"] = mode

        if calling:
            config["functionCallingConfig"] = calling
        if config:
            bag["toolConfig"] = copy.deepcopy(config)
        return choice

    # ------------------------------------------------------------------
    # universal -> Google
    # ------------------------------------------------------------------

    def from_universal(self, universal: UniversalBody) -> dict[str, Any]:
        raw_body = original_raw(universal, "google")
        params = passthrough(universal, "google")
        result: dict[str, Any] = {}
        if "model" in raw_body:
            result["model"] = raw_body["model"] if universal.model == str(raw_body["model"]).removeprefix("models/") else universal.model

        names: dict[str, str] = {}
        contents = [self._render_content(msg, names) for msg in universal.messages if msg.role != "system"]
        if universal.provider != "google":
            contents = _merge_consecutive_roles(contents)
        result["contents"] = contents

        system = self._render_system(universal)
        if system is not None:
            result["systemInstruction"] = system

        generation: dict[str, Any] = {}
        for key, field, _ in _GENERATION_KNOBS:
            value = getattr(universal, field)
            if value is not None:
                generation[key] = list(value) if field == "stop" else value
        generation = deep_merge(as_dict(params.pop("generationConfig", None)), generation)
        if generation:
            result["generationConfig"] = generation

        tools = self._render_tools(universal.tools or [])
        if tools:
            result["tools"] = tools

        tool_config: dict[str, Any] = {}
        if universal.tool_choice is not None:
            tool_config = {"functionCallingConfig": self._render_tool_choice(universal.tool_choice)}
        raw_config = params.pop("toolConfig", None)
        if isinstance(raw_config, dict):
            tool_config = deep_merge(raw_config, tool_config)
        elif raw_config is not None and not tool_config:
            tool_config = raw_config
        if tool_config:
            result["toolConfig"] = tool_config

        return add_params(result, params)

    def _render_system(self, universal: UniversalBody) -> dict[str, Any] | None:
        text = system_content(universal)
        if text is None:
            return None
        raw = pristine_system(universal.system, "google")
        if isinstance(raw, dict) and isinstance(universal.system, SystemPrompt) and text == universal.system.content == _text_of(raw):
            return copy.deepcopy(raw)
        return {"parts": [{"text": text}]}

    def _render_content(self, msg: UniversalMessage, names: dict[str, str]) -> dict[str, Any]:
        role = msg.metadata.get("original_role") if from_provider(msg.original, "google") else None
        role = role or ("model" if msg.role == "assistant" else "user")

        parts = [self._render_part(part, names) for part in msg.content]
        for call in msg.tool_calls or []:
            names[call.id] = call.name
            function_call = {"name": call.name, "args": copy.deepcopy(call.arguments)}
            call_id = _wire_id(call.id, call.metadata)
            if call_id is not None:
                function_call["id"] = call_id
            parts.append({"functionCall": function_call})
        raw = raw_of(msg.original, "google")
        if raw and "role" not in raw and role == "user":
            role = None
        return overlay(msg.original, "google", {"role": role, "parts": parts})

    def _render_part(self, part: ContentPart, names: dict[str, str]) -> dict[str, Any]:
        if is_opaque(part, "google"):
            return copy.deepcopy(part.original.raw)  # type: ignore[union-attr]

        if isinstance(part, TextContent):
            return overlay(part.original, "google", {"text": part.text})

        raw = raw_of(part.original, "google")

        if isinstance(part, ToolCallContent):
            call = part.tool_call
            names[call.id] = call.name
            raw_call = as_dict(raw.get("functionCall"))
            function_call = layer(
                raw_call,
                {
                    "name": call.name,
                    "args": copy.deepcopy(call.arguments),
                    "id": _wire_id(call.id, call.metadata),
                },
            )
            return overlay(part.original, "google", {"functionCall": function_call})

        if isinstance(part, ToolResultContent):
            result = part.tool_result
            raw_response = as_dict(raw.get("functionResponse"))
            function_response = layer(
                raw_response,
                {
                    "name": result.name or names.get(result.tool_call_id) or result.tool_call_id,
                    "response": self._render_response(result.content),
                    "id": _wire_id(result.tool_call_id, result.metadata),
                },
            )
            return overlay(part.original, "google", {"functionResponse": function_response})

        media = part.media
        mime = media.mime_type or _DEFAULT_MIME[part.type]
        if media.data:
            return overlay(part.original, "google", {"inlineData": {"mimeType": mime, "data": media.data}})
        uri = media.file_uri or media.url
        if uri:
            return overlay(part.original, "google", {"fileData": {"mimeType": mime, "fileUri": uri}})
        logger.debug("Media part without data or URI dropped to placeholder text")
        return {"text": f"[{part.type.capitalize()}: missing source]"}

    def _render_response(self, content: Any) -> dict[str, Any]:
        """Google requires ``functionResponse.response`` to be an object."""
        if isinstance(content, dict):
            return copy.deepcopy(content)
        if isinstance(content, str):
            try:
                parsed = json.loads(content)
            except json.JSONDecodeError:
                parsed = None
            if isinstance(parsed, dict):
                return parsed
        return {"content": stringify(content)}

    def _render_tools(self, tools: list[ToolDefinition]) -> list[dict[str, Any]]:
        rendered: list[dict[str, Any]] = []
        # Declarations read from Google keep their original tools[] entry.
        groups: dict[Any, list[dict[str, Any]]] = {}
        for tool in tools:
            raw = raw_of(tool.original, "google")
            if tool.is_builtin:
                if raw:
                    rendered.append(copy.deepcopy(raw))
                continue
            group = tool.metadata.get("declaration_group") if from_provider(tool.original, "google") else None
            declarations = groups.get(group)
            if declarations is None:
                declarations = groups[group] = []
                rendered.append({"functionDeclarations": declarations})
            schema_key = "parametersJsonSchema" if "parametersJsonSchema" in raw else "parameters"
            declarations.append(
                overlay(
                    tool.original,
                    "google",
                    {
                        "name": tool.name,
                        "description": tool.description if tool.description or "description" in raw else None,
                        schema_key: copy.deepcopy(tool.parameters) if tool.parameters or schema_key in raw else None,
                    },
                )
            )
        return rendered

    def _render_tool_choice(self, choice: str | dict[str, Any]) -> dict[str, Any]:
        if isinstance(choice, dict):
            return {"mode": "ANY", "allowedFunctionNames": [choice.get("name")]}
        return {"mode": _MODE_FROM_UNIVERSAL.get(choice, choice.upper())}


def _wire_id(call_id: str, metadata: dict[str, Any]) -> str | None:
    """The id to send to Google; ids generated while reading Google bodies are not sent back."""
    if not call_id or metadata.get("synthetic_id"):
        return None
    return call_id


def _merge_consecutive_roles(contents: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Merge consecutive contents with the same role into one content."""
    merged: list[dict[str, Any]] = []
    for content in contents:
        if merged and merged[-1].get("role") == content.get("role"):
            merged[-1]["parts"] = [*merged[-1]["parts"], *content["parts"]]
        else:
            merged.append(content)
    return merged

