"""Convenience helpers for inspecting and editing universal messages.

Editing helpers return updated copies; the message passed in is never
mutated.
"""

from __future__ import annotations

from pydantic import BaseModel

from llm_bridge.core.interface.models import (
    MEDIA_KINDS,
    ContentPart,
    TextContent,
    ToolCall,
    ToolCallContent,
    UniversalBody,
    UniversalMessage,
)


class ValidationReport(BaseModel):
    """Outcome of :func:`validate_universal_body`."""

    valid: bool
    errors: list[str] = []


def get_text_content(message: UniversalMessage) -> str:
    """All text parts of *message*, joined with single spaces."""
    return " ".join(part.text for part in message.content if isinstance(part, TextContent))


def has_tool_calls(message: UniversalMessage) -> bool:
    return bool(message.tool_calls) or any(isinstance(p, ToolCallContent) for p in message.content)


def has_multimodal_content(message: UniversalMessage) -> bool:
    return any(part.type in MEDIA_KINDS for part in message.content)


def extract_tool_calls(message: UniversalMessage) -> list[ToolCall]:
    """Inline tool-call parts first, then message-level ``tool_calls``."""
    calls = [part.tool_call for part in message.content if isinstance(part, ToolCallContent)]
    calls.extend(message.tool_calls or [])
    return calls


def add_text_content(message: UniversalMessage, text: str) -> UniversalMessage:
    """Return a copy of *message* with a text part appended."""
    content: list[ContentPart] = [*message.content, TextContent(text=text)]
    return message.model_copy(update={"content": content}, deep=True)


def replace_text_content(message: UniversalMessage, text: str) -> UniversalMessage:
    """Return a copy of *message* whose text parts are replaced by one part holding *text*.

    Non-text parts are kept, after the new text.
    """
    content: list[ContentPart] = [
        TextContent(text=text),
        *(part for part in message.content if not isinstance(part, TextContent)),
    ]
    return message.model_copy(update={"content": content}, deep=True)


def validate_universal_body(universal: UniversalBody) -> ValidationReport:
    """Check a body for the problems that make every provider reject it."""
    errors: list[str] = []

    if not universal.model or universal.model == "unknown":
        errors.append("Model is required")
    if not universal.messages:
        errors.append("At least one message is required")

    for index, message in enumerate(universal.messages):
        if not message.content and not message.tool_calls:
            errors.append(f"Message at index {index} is missing content")
        for part_index, part in enumerate(message.content):
            if isinstance(part, TextContent) and not part.text:
                errors.append(f"Text content at message {index}, content {part_index} is missing text")
            elif isinstance(part, ToolCallContent) and not part.tool_call.name:
                errors.append(f"Tool call at message {index}, content {part_index} is missing a name")

    for index, tool in enumerate(universal.tools or []):
        if not tool.name:
            errors.append(f"Tool at index {index} is missing a name")

    return ValidationReport(valid=not errors, errors=errors)
