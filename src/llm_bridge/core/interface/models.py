"""Universal Body Schema — the canonical request format for llm-bridge.

The universal body is a superset of every supported provider's request
shape. Adapters convert provider payloads into it and back; anything a
provider sends that the schema does not model is kept either on the
``original`` snapshot of the element it came from or in the body-level
``provider_params`` bag, so a same-provider round trip loses nothing.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal
from uuid import uuid4

from pydantic import BaseModel, Field

Provider = Literal["openai", "anthropic", "google"]
PROVIDERS: tuple[Provider, ...] = ("openai", "anthropic", "google")

Role = Literal["system", "user", "assistant", "tool"]
MediaKind = Literal["image", "audio", "video", "document"]
MEDIA_KINDS: frozenset[str] = frozenset({"image", "audio", "video", "document"})

ToolChoice = str | dict[str, Any]


def generate_id(prefix: str = "msg") -> str:
    """Return a fresh identifier such as ``msg_3f9a0c1b2d4e``."""
    return f"{prefix}_{uuid4().hex[:12]}"


class OriginalPayload(BaseModel):
    """Snapshot of the untranslated provider value an element was built from."""

    provider: Provider
    raw: Any = None
    dialect: str | None = None


# ---------------------------------------------------------------------------
# Content Parts: closed tagged union
# ---------------------------------------------------------------------------


class MediaSource(BaseModel):
    """Where the bytes of a media part live: inline, by URL, or by file URI."""

    data: str | None = None
    mime_type: str | None = None
    url: str | None = None
    detail: str | None = None
    file_uri: str | None = None
    file_name: str | None = None


class TextContent(BaseModel):
    """Plain text content part."""

    type: Literal["text"] = "text"
    text: str
    original: OriginalPayload | None = None


class MediaContent(BaseModel):
    """Image, audio, video, or document content part."""

    type: MediaKind = "image"
    media: MediaSource = Field(default_factory=MediaSource)
    original: OriginalPayload | None = None


class ToolCall(BaseModel):
    """A tool invocation. ``arguments`` is always a parsed object."""

    id: str = Field(default_factory=lambda: generate_id("call"))
    name: str
    arguments: dict[str, Any] = {}
    metadata: dict[str, Any] = {}


class ToolResult(BaseModel):
    """The outcome of a tool invocation, keyed by the call's identifier."""

    tool_call_id: str
    name: str | None = None
    content: Any = None
    is_error: bool | None = None
    metadata: dict[str, Any] = {}


class ToolCallContent(BaseModel):
    """Inline tool-call content part (Anthropic ``tool_use``, Google ``functionCall``)."""

    type: Literal["tool_call"] = "tool_call"
    tool_call: ToolCall
    original: OriginalPayload | None = None


class ToolResultContent(BaseModel):
    """Tool-result content part."""

    type: Literal["tool_result"] = "tool_result"
    tool_result: ToolResult
    original: OriginalPayload | None = None


ContentPart = Annotated[
    TextContent | MediaContent | ToolCallContent | ToolResultContent,
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Messages, tools and the system prompt
# ---------------------------------------------------------------------------


class UniversalMessage(BaseModel):
    """A single conversational message.

    Roles:
    - system: instruction messages left in the message list
    - user: human input (may carry tool results for Anthropic/Google)
    - assistant: model output, with inline tool calls and/or ``tool_calls``
    - tool: tool results (OpenAI style)

    ``tool_calls`` holds calls that the source format placed at message level
    (OpenAI); inline calls stay in ``content`` as ``tool_call`` parts.
    """

    id: str = Field(default_factory=generate_id)
    role: Role
    content: list[ContentPart] = []
    tool_calls: list[ToolCall] | None = None
    metadata: dict[str, Any] = {}
    original: OriginalPayload | None = None

    @property
    def text(self) -> str:
        """Concatenated text of all text parts."""
        return "".join(part.text for part in self.content if isinstance(part, TextContent))

    @classmethod
    def system(cls, text: str, **metadata: Any) -> UniversalMessage:
        """Create a system message."""
        parts: list[ContentPart] = [TextContent(text=text)]
        return cls(role="system", content=parts, metadata=metadata)

    @classmethod
    def user(cls, content: str | list[ContentPart], **metadata: Any) -> UniversalMessage:
        """Create a user message from text or a list of parts."""
        parts: list[ContentPart] = (
            [TextContent(text=content)] if isinstance(content, str) else list(content)
        )
        return cls(role="user", content=parts, metadata=metadata)

    @classmethod
    def assistant(
        cls,
        text: str = "",
        tool_calls: list[ToolCall] | None = None,
        **metadata: Any,
    ) -> UniversalMessage:
        """Create an assistant message."""
        content: list[ContentPart] = [TextContent(text=text)] if text else []
        return cls(role="assistant", content=content, tool_calls=tool_calls, metadata=metadata)

    @classmethod
    def tool(cls, result: ToolResult, **metadata: Any) -> UniversalMessage:
        """Create a tool-result message."""
        parts: list[ContentPart] = [ToolResultContent(tool_result=result)]
        return cls(
            role="tool",
            content=parts,
            metadata={"tool_call_id": result.tool_call_id, **metadata},
        )


class ToolDefinition(BaseModel):
    """A tool the model may call. ``parameters`` is a JSON Schema object.

    Provider built-in tools (web search, code execution, ...) are kept with
    ``metadata["builtin"] = True`` and are only emitted for their own provider.
    """

    name: str
    description: str = ""
    parameters: dict[str, Any] = {}
    metadata: dict[str, Any] = {}
    original: OriginalPayload | None = None

    @property
    def is_builtin(self) -> bool:
        return bool(self.metadata.get("builtin"))


class SystemPrompt(BaseModel):
    """A system prompt whose source representation was richer than a string."""

    content: str
    cache_control: dict[str, Any] | None = None
    original: OriginalPayload | None = None


# ---------------------------------------------------------------------------
# Universal Body: the request envelope
# ---------------------------------------------------------------------------


class UniversalBody(BaseModel):
    """Canonical chat request shared by all providers.

    Optional knobs use ``None`` for "not specified"; ``0`` and ``False`` are
    explicit values. ``provider`` names the dialect the body was read from.
    """

    provider: Provider
    model: str = "unknown"
    messages: list[UniversalMessage] = []
    system: str | SystemPrompt | None = None

    temperature: float | None = None
    top_p: float | None = None
    max_tokens: int | None = None
    stream: bool | None = None
    stop: list[str] | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None
    seed: int | None = None

    tools: list[ToolDefinition] | None = None
    tool_choice: ToolChoice | None = None

    provider_params: dict[str, Any] = {}
    metadata: dict[str, Any] = {}
    original: OriginalPayload | None = None

    @property
    def system_text(self) -> str | None:
        """The system prompt as plain text, whichever form it is stored in."""
        if self.system is None:
            return None
        if isinstance(self.system, SystemPrompt):
            return self.system.content
        return self.system
