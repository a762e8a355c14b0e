"""Helpers shared by the provider transpilers."""

from __future__ import annotations

import copy
import json
import logging
import re
from typing import Any

from llm_bridge.core.interface.models import (
    ContentPart,
    OriginalPayload,
    Provider,
    SystemPrompt,
    TextContent,
    UniversalBody,
)

logger = logging.getLogger(__name__)

_DATA_URI = re.compile(r"^data:([^;,]+);base64,(.+)$", re.DOTALL)


def snapshot(provider: Provider, raw: Any, dialect: str | None = None) -> OriginalPayload:
    """Deep-copy *raw* into an :class:`OriginalPayload` so later edits never alias it."""
    return OriginalPayload(provider=provider, raw=copy.deepcopy(raw), dialect=dialect)


def from_provider(original: OriginalPayload | None, provider: Provider, dialect: str | None = None) -> bool:
    """True when *original* was captured from *provider* in *dialect*.

    OpenAI has two request dialects; an unset dialect means Chat Completions.
    """
    if original is None or original.provider != provider:
        return False
    return (original.dialect or "chat") == (dialect or "chat")


def layer(raw: Any, rendered: dict[str, Any]) -> dict[str, Any]:
    """Layer *rendered* over a raw dict.

    Rendered keys win. A rendered ``None`` is dropped when the raw value
    never had that key, so absent fields stay absent.
    """
    result: dict[str, Any] = copy.deepcopy(raw) if isinstance(raw, dict) else {}
    for key, value in rendered.items():
        if value is None and key not in result:
            continue
        result[key] = value
    return result


def overlay(
    original: OriginalPayload | None,
    provider: Provider,
    rendered: dict[str, Any],
    dialect: str | None = None,
) -> dict[str, Any]:
    """:func:`layer` *rendered* over the raw dict the element was parsed from."""
    return layer(raw_of(original, provider, dialect), rendered)


def raw_of(original: OriginalPayload | None, provider: Provider, dialect: str | None = None) -> dict[str, Any]:
    """The raw dict behind *original* when it came from *provider*, else ``{}``."""
    if from_provider(original, provider, dialect) and isinstance(original.raw, dict):  # type: ignore[union-attr]
        return original.raw  # type: ignore[union-attr]
    return {}


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge *override* into a copy of *base*."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def passthrough(
    universal: UniversalBody,
    provider: Provider,
    dialect: str | None = None,
    *,
    exclude: frozenset[str] = frozenset(),
) -> dict[str, Any]:
    """Return the provider-specific params that may be written for *provider*."""
    if universal.provider != provider:
        return {}
    if universal.original is not None and not from_provider(universal.original, provider, dialect):
        return {}
    return {k: copy.deepcopy(v) for k, v in universal.provider_params.items() if k not in exclude}


def original_raw(universal: UniversalBody, provider: Provider, dialect: str | None = None) -> dict[str, Any]:
    """The untranslated request body when it came from *provider*, else ``{}``."""
    return raw_of(universal.original, provider, dialect)


def split_known(body: dict[str, Any], known: frozenset[str]) -> dict[str, Any]:
    """Everything in *body* the adapter does not model, deep-copied."""
    return {k: copy.deepcopy(v) for k, v in body.items() if k not in known}


def add_params(rendered: dict[str, Any], params: dict[str, Any]) -> dict[str, Any]:
    """Append passthrough params to a rendered body; rendered keys win."""
    for key, value in params.items():
        if key not in rendered:
            rendered[key] = value
    return rendered


# ---------------------------------------------------------------------------
# Scalar knobs
# ---------------------------------------------------------------------------


def number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def integer(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def boolean(value: Any) -> bool | None:
    return value if isinstance(value, bool) else None


def stop_list(value: Any) -> list[str] | None:
    """Normalize a stop value to a list of strings."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(s, str) for s in value):
        return list(value)
    return None


def take(body: dict[str, Any], key: str, coerce: Any, bag: dict[str, Any]) -> Any:
    """Read *key* from *body* through *coerce*.

    A present value that fails coercion is parked in *bag* untouched so a
    same-provider round trip still emits it.
    """
    value = body.get(key)
    if value is None:
        return None
    coerced = coerce(value)
    if coerced is None:
        logger.debug("Malformed %r value kept as a provider param: %r", key, value)
        bag[key] = copy.deepcopy(value)
    return coerced


# ---------------------------------------------------------------------------
# Tool-call arguments
# ---------------------------------------------------------------------------


def parse_arguments(raw: Any) -> dict[str, Any]:
    """Parse JSON string arguments; malformed input becomes ``{"raw": raw}``."""
    if isinstance(raw, dict):
        return copy.deepcopy(raw)
    if raw is None or raw == "":
        return {}
    try:
        result = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        logger.debug("Unparsable tool-call arguments kept verbatim: %r", raw)
        return {"raw": raw}
    if not isinstance(result, dict):
        return {"value": result}
    return result


def serialize_arguments(arguments: dict[str, Any], raw: Any = None) -> str:
    """Serialize arguments to JSON, reusing *raw* when it still parses to the same object."""
    if isinstance(raw, str) and parse_arguments(raw) == arguments:
        return raw
    if set(arguments) == {"raw"} and isinstance(arguments["raw"], str):
        return arguments["raw"]
    return json.dumps(arguments)


# ---------------------------------------------------------------------------
# Media helpers
# ---------------------------------------------------------------------------


def parse_data_uri(url: str | None) -> tuple[str, str] | None:
    """Split ``data:<mime>;base64,<data>`` into ``(mime, data)``."""
    if not url:
        return None
    match = _DATA_URI.match(url)
    if match is None:
        return None
    return match.group(1), match.group(2)


def to_data_uri(mime_type: str | None, data: str, default_mime: str = "image/png") -> str:
    return f"data:{mime_type or default_mime};base64,{data}"


def media_kind(mime_type: str | None, default: str = "document") -> str:
    """Map a MIME type onto a media part type."""
    if not mime_type:
        return default
    for kind in ("image", "audio", "video"):
        if mime_type.startswith(f"{kind}/"):
            return kind
    return "document"


# ---------------------------------------------------------------------------
# Opaque blocks, system prompts, tool results
# ---------------------------------------------------------------------------


def opaque_text(raw: Any) -> str:
    """Text stand-in for a content block the schema does not model."""
    return json.dumps(raw, sort_keys=True, default=str)


def opaque_part(provider: Provider, raw: Any, dialect: str | None = None) -> TextContent:
    logger.debug("Unrecognized %s content block kept as opaque text", provider)
    return TextContent(text=opaque_text(raw), original=snapshot(provider, raw, dialect))


def is_opaque(part: ContentPart, provider: Provider, dialect: str | None = None) -> bool:
    """True for an untouched opaque block that should be re-emitted verbatim."""
    return (
        isinstance(part, TextContent)
        and from_provider(part.original, provider, dialect)
        and isinstance(part.original.raw, dict)  # type: ignore[union-attr]
        and part.text == opaque_text(part.original.raw)  # type: ignore[union-attr]
    )


def stringify(value: Any) -> str:
    """Render a tool-result payload as text."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, list) and all(isinstance(b, dict) and b.get("type") == "text" for b in value):
        return "".join(str(b.get("text", "")) for b in value)
    return json.dumps(value, default=str)


def system_content(universal: UniversalBody) -> str | None:
    """System text plus any role-``system`` messages still in the message list.

    Used by providers that have no system role inside the conversation.
    """
    texts = [universal.system_text] if universal.system_text else []
    texts.extend(m.text for m in universal.messages if m.role == "system" and m.text)
    if not texts:
        return None
    return "\n\n".join(texts)


def pristine_system(system: str | SystemPrompt | None, provider: Provider, dialect: str | None = None) -> Any:
    """Return the raw system value if it came from *provider*."""
    if not isinstance(system, SystemPrompt) or not from_provider(system.original, provider, dialect):
        return None
    return system.original.raw  # type: ignore[union-attr]


def as_list(value: Any) -> list[Any]:
    """Return *value* if it is a list, else an empty list."""
    return value if isinstance(value, list) else []


def as_dict(value: Any) -> dict[str, Any]:
    """Return *value* if it is a dict, else an empty dict."""
    return value if isinstance(value, dict) else {}
