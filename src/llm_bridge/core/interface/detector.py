"""Provider detection — structural sniffing of untagged request bodies."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlparse

from llm_bridge.core.interface.models import Provider

logger = logging.getLogger(__name__)

_HOSTS: tuple[tuple[str, Provider], ...] = (
    ("anthropic.com", "anthropic"),
    ("claude.ai", "anthropic"),
    ("googleapis.com", "google"),
    ("openai.com", "openai"),
    ("openai.azure.com", "openai"),
)
_GOOGLE_KEYS = ("contents", "systemInstruction", "system_instruction", "generationConfig", "generation_config")
_ANTHROPIC_KEYS = ("system", "anthropic_version", "max_tokens_to_sample")
_ANTHROPIC_BLOCKS = frozenset({"tool_use", "tool_result", "thinking", "redacted_thinking"})
_OPENAI_ROLES = frozenset({"system", "developer", "tool", "function"})
_OPENAI_PARTS = frozenset({"image_url", "input_audio"})


def _host_provider(target_url: str | None) -> Provider | None:
    if not target_url:
        return None
    try:
        host = (urlparse(target_url).hostname or "").lower()
    except ValueError:
        logger.debug("Ignoring unparsable target URL %r", target_url)
        return None
    for suffix, provider in _HOSTS:
        if host == suffix or host.endswith(f".{suffix}"):
            return provider
    return None


def _blocks(messages: list[Any]) -> list[dict[str, Any]]:
    blocks: list[dict[str, Any]] = []
    for msg in messages:
        content = msg.get("content") if isinstance(msg, dict) else None
        if isinstance(content, list):
            blocks.extend(b for b in content if isinstance(b, dict))
    return blocks


def _has_openai_shapes(messages: list[Any]) -> bool:
    for msg in messages:
        if not isinstance(msg, dict):
            continue
        if msg.get("role") in _OPENAI_ROLES or "tool_calls" in msg:
            return True
    return any(b.get("type") in _OPENAI_PARTS for b in _blocks(messages))


def detect_provider(body: Any, target_url: str | None = None) -> Provider:
    """Guess which provider's wire format *body* is written in.

    A recognizable provider host in *target_url* wins. Otherwise the body's
    structure decides; anything ambiguous resolves to ``"openai"``, whose
    schema is the most permissive. Never raises.
    """
    from_host = _host_provider(target_url)
    if from_host is not None:
        return from_host
    if not isinstance(body, dict):
        return "openai"

    if isinstance(body.get("contents"), list) or any(body.get(key) is not None for key in _GOOGLE_KEYS[1:]):
        return "google"
    tools = body.get("tools")
    if isinstance(tools, list) and tools and isinstance(tools[0], dict):
        if "functionDeclarations" in tools[0] or "function_declarations" in tools[0]:
            return "google"

    messages = body.get("messages")
    if not isinstance(messages, list) or _has_openai_shapes(messages):
        return "openai"

    if any(body.get(key) is not None for key in _ANTHROPIC_KEYS):
        return "anthropic"
    if "max_tokens" in body and "temperature" not in body:
        return "anthropic"
    if any(b.get("type") in _ANTHROPIC_BLOCKS for b in _blocks(messages)):
        return "anthropic"
    return "openai"


def is_openai_responses_endpoint(target_url: str | None, body: Any = None) -> bool:
    """True when a request targets the OpenAI Responses API rather than Chat Completions.

    The URL path decides when given; otherwise a body with ``input`` or
    ``instructions`` and no ``messages``, or with Responses-only fields such as
    ``previous_response_id``, is treated as a Responses request.
    """
    if target_url:
        try:
            path = urlparse(target_url).path.lower()
        except ValueError:
            path = target_url.lower()
        if "/responses" in path:
            return True
        if "/chat/completions" in path:
            return False
    if not isinstance(body, dict):
        return False
    if ("input" in body or "instructions" in body) and "messages" not in body:
        return True
    return "previous_response_id" in body
