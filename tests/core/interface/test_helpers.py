"""Tests for universal message helpers."""

from llm_bridge.core.interface.helpers import (
    add_text_content,
    extract_tool_calls,
    get_text_content,
    has_multimodal_content,
    has_tool_calls,
    replace_text_content,
    validate_universal_body,
)
from llm_bridge.core.interface.models import (
    MediaContent,
    MediaSource,
    TextContent,
    ToolCall,
    ToolCallContent,
    ToolDefinition,
    UniversalBody,
    UniversalMessage,
)


def _mixed_message() -> UniversalMessage:
    return UniversalMessage.user(
        [
            TextContent(text="Look at"),
            MediaContent(type="image", media=MediaSource(url="https://example.com/cat.png")),
            TextContent(text="this"),
        ]
    )


class TestInspection:
    def test_get_text_content(self) -> None:
        assert get_text_content(_mixed_message()) == "Look at this"
        assert get_text_content(UniversalMessage.assistant()) == ""

    def test_has_multimodal_content(self) -> None:
        assert has_multimodal_content(_mixed_message())
        assert not has_multimodal_content(UniversalMessage.user("plain"))

    def test_has_tool_calls(self) -> None:
        assert has_tool_calls(UniversalMessage.assistant(tool_calls=[ToolCall(name="f")]))
        inline = UniversalMessage(role="assistant", content=[ToolCallContent(tool_call=ToolCall(name="g"))])
        assert has_tool_calls(inline)
        assert not has_tool_calls(UniversalMessage.user("hi"))

    def test_extract_tool_calls_order(self) -> None:
        message = UniversalMessage(
            role="assistant",
            content=[ToolCallContent(tool_call=ToolCall(id="inline", name="a"))],
            tool_calls=[ToolCall(id="listed", name="b")],
        )
        assert [c.id for c in extract_tool_calls(message)] == ["inline", "listed"]


class TestEditing:
    def test_add_text_content_copies(self) -> None:
        original = UniversalMessage.user("Hello")
        updated = add_text_content(original, "world")
        assert [p.text for p in updated.content if isinstance(p, TextContent)] == ["Hello", "world"]
        assert len(original.content) == 1

    def test_replace_text_content_keeps_media(self) -> None:
        original = _mixed_message()
        updated = replace_text_content(original, "Describe")
        assert isinstance(updated.content[0], TextContent)
        assert updated.content[0].text == "Describe"
        assert len(updated.content) == 2
        assert isinstance(updated.content[1], MediaContent)
        assert get_text_content(original) == "Look at this"


class TestValidation:
    def test_valid_body(self) -> None:
        body = UniversalBody(provider="openai", model="gpt-4", messages=[UniversalMessage.user("Hi")])
        report = validate_universal_body(body)
        assert report.valid
        assert report.errors == []

    def test_missing_model_and_messages(self) -> None:
        report = validate_universal_body(UniversalBody(provider="openai"))
        assert not report.valid
        assert report.errors == ["Model is required", "At least one message is required"]

    def test_content_problems(self) -> None:
        body = UniversalBody(
            provider="anthropic",
            model="claude",
            messages=[
                UniversalMessage(role="user"),
                UniversalMessage.user([TextContent(text="")]),
                UniversalMessage(role="assistant", content=[ToolCallContent(tool_call=ToolCall(name=""))]),
            ],
            tools=[ToolDefinition(name="")],
        )
        report = validate_universal_body(body)
        assert report.errors == [
            "Message at index 0 is missing content",
            "Text content at message 1, content 0 is missing text",
            "Tool call at message 2, content 0 is missing a name",
            "Tool at index 0 is missing a name",
        ]
