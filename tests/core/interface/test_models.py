"""Tests for the universal body Pydantic models."""

import json

import pytest
from pydantic import ValidationError

from llm_bridge.core.interface.models import (
    MediaContent,
    MediaSource,
    OriginalPayload,
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


class TestContentParts:
    def test_text_content(self) -> None:
        part = TextContent(text="hello")
        assert part.type == "text"
        assert part.original is None

    def test_media_content_defaults(self) -> None:
        part = MediaContent(media=MediaSource(url="https://example.com/img.png"))
        assert part.type == "image"
        assert part.media.data is None

    def test_discriminated_union(self) -> None:
        message = UniversalMessage.model_validate(
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "look"},
                    {"type": "audio", "media": {"data": "AAA", "mime_type": "audio/wav"}},
                    {"type": "tool_call", "tool_call": {"id": "c1", "name": "f"}},
                    {"type": "tool_result", "tool_result": {"tool_call_id": "c1", "content": "ok"}},
                ],
            }
        )
        assert [type(p) for p in message.content] == [TextContent, MediaContent, ToolCallContent, ToolResultContent]

    def test_unknown_part_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            UniversalMessage.model_validate({"role": "user", "content": [{"type": "hologram"}]})


class TestToolCall:
    def test_auto_id(self) -> None:
        call = ToolCall(name="search")
        assert call.id.startswith("call_")
        assert call.arguments == {}

    def test_unique_ids(self) -> None:
        assert ToolCall(name="a").id != ToolCall(name="a").id

    def test_generate_id(self) -> None:
        assert generate_id().startswith("msg_")
        assert len(generate_id("toolu")) == len("toolu_") + 12


class TestUniversalMessage:
    def test_factories(self) -> None:
        assert UniversalMessage.system("Rules").role == "system"
        assert UniversalMessage.user("Hi").text == "Hi"
        assert UniversalMessage.assistant().content == []

    def test_tool_factory(self) -> None:
        message = UniversalMessage.tool(ToolResult(tool_call_id="c1", content="42"), name="calc")
        assert message.role == "tool"
        assert message.metadata == {"tool_call_id": "c1", "name": "calc"}

    def test_text_joins_parts(self) -> None:
        message = UniversalMessage.user([TextContent(text="a"), MediaContent(), TextContent(text="b")])
        assert message.text == "ab"

    def test_invalid_role(self) -> None:
        with pytest.raises(ValidationError):
            UniversalMessage(role="wizard")  # type: ignore[arg-type]


class TestUniversalBody:
    def test_defaults(self) -> None:
        body = UniversalBody(provider="anthropic")
        assert body.model == "unknown"
        assert body.messages == []
        assert body.temperature is None
        assert body.provider_params == {}

    def test_system_text(self) -> None:
        assert UniversalBody(provider="openai").system_text is None
        assert UniversalBody(provider="openai", system="plain").system_text == "plain"
        assert UniversalBody(provider="openai", system=SystemPrompt(content="rich")).system_text == "rich"

    def test_invalid_provider(self) -> None:
        with pytest.raises(ValidationError):
            UniversalBody(provider="cohere")  # type: ignore[arg-type]

    def test_builtin_tool(self) -> None:
        assert ToolDefinition(name="web_search", metadata={"builtin": True}).is_builtin
        assert not ToolDefinition(name="get_weather").is_builtin

    def test_json_round_trip(self) -> None:
        body = UniversalBody(
            provider="google",
            model="gemini-1.5-pro",
            messages=[
                UniversalMessage.user("Hi"),
                UniversalMessage(
                    role="assistant",
                    content=[ToolCallContent(tool_call=ToolCall(id="call_f", name="f", arguments={"x": 1}))],
                ),
            ],
            original=OriginalPayload(provider="google", raw={"contents": []}),
        )
        restored = UniversalBody.model_validate(json.loads(body.model_dump_json()))
        assert restored == body
