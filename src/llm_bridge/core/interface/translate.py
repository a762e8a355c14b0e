"""Translation entry points — dispatch over the closed provider set.

``to_universal`` and ``from_universal`` pick the adapter for a provider tag
(and, for OpenAI, the Chat Completions or Responses dialect);
``translate_between_providers`` chains the two.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from llm_bridge.core.interface.detector import is_openai_responses_endpoint
from llm_bridge.core.interface.models import PROVIDERS, UniversalBody
from llm_bridge.core.interface.transpiler import Transpiler
from llm_bridge.core.interface.transpilers import (
    AnthropicTranspiler,
    GoogleTranspiler,
    OpenAIResponsesTranspiler,
    OpenAITranspiler,
)
from llm_bridge.core.interface.transpilers.openai_responses import is_responses_body
from llm_bridge.exceptions import UnsupportedProviderError
from llm_bridge.utils.telemetry import (
    ATTR_DIALECT,
    ATTR_MESSAGE_COUNT,
    ATTR_MODEL,
    ATTR_SOURCE_PROVIDER,
    ATTR_TARGET_PROVIDER,
    get_tracer,
)

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

DIALECTS = ("chat", "responses")

_GOOGLE_MODEL = re.compile(r"/models/([^/:?]+)")

_TRANSPILERS: dict[str, Transpiler] = {
    "openai": OpenAITranspiler(),
    "anthropic": AnthropicTranspiler(),
    "google": GoogleTranspiler(),
}
_RESPONSES = OpenAIResponsesTranspiler()


def _check_provider(provider: str) -> None:
    if provider not in PROVIDERS:
        raise UnsupportedProviderError(provider)


def _check_dialect(dialect: str | None) -> None:
    if dialect is not None and dialect not in DIALECTS:
        msg = f"Unknown OpenAI dialect {dialect!r}; expected one of {DIALECTS}"
        raise ValueError(msg)


def get_transpiler(provider: str, dialect: str | None = None) -> Transpiler:
    """Return the adapter for *provider* (and OpenAI *dialect*)."""
    _check_provider(provider)
    _check_dialect(dialect)
    if provider == "openai" and dialect == "responses":
        return _RESPONSES
    return _TRANSPILERS[provider]


def _input_dialect(body: Any, target_url: str | None, dialect: str | None) -> str:
    if dialect is not None:
        return dialect
    if target_url:
        return "responses" if is_openai_responses_endpoint(target_url, body) else "chat"
    return "responses" if is_responses_body(body) else "chat"


def _output_dialect(universal: UniversalBody, target_url: str | None, dialect: str | None) -> str:
    if dialect is not None:
        return dialect
    if target_url:
        return "responses" if is_openai_responses_endpoint(target_url) else "chat"
    original = universal.original
    if original is not None and original.provider == "openai" and original.dialect in DIALECTS:
        return original.dialect
    return "chat"


def to_universal(
    provider: str,
    body: Any,
    target_url: str | None = None,
    *,
    dialect: str | None = None,
) -> UniversalBody:
    """Convert a raw *provider* request body into a :class:`UniversalBody`.

    Raises :class:`UnsupportedProviderError` for an unknown provider tag;
    structural defects in *body* never raise.
    """
    _check_provider(provider)
    _check_dialect(dialect)
    if provider == "openai":
        dialect = _input_dialect(body, target_url, dialect)

    universal = get_transpiler(provider, dialect).to_universal(body)

    if provider == "google" and universal.model == "unknown" and target_url:
        match = _GOOGLE_MODEL.search(target_url)
        if match:
            universal.model = match.group(1)
    return universal


def from_universal(
    provider: str,
    universal: UniversalBody,
    target_url: str | None = None,
    *,
    dialect: str | None = None,
) -> dict[str, Any]:
    """Render *universal* as a *provider* request body.

    For OpenAI the dialect is, in order: *dialect*, the *target_url* path
    (``/responses``), the dialect the body was read in, then Chat Completions.
    """
    _check_provider(provider)
    _check_dialect(dialect)
    if provider == "openai":
        dialect = _output_dialect(universal, target_url, dialect)
    return get_transpiler(provider, dialect).from_universal(universal)


def translate_between_providers(
    source: str,
    target: str,
    body: Any,
    *,
    source_url: str | None = None,
    target_url: str | None = None,
) -> dict[str, Any]:
    """Translate a request body from *source*'s wire format to *target*'s."""
    _check_provider(source)
    _check_provider(target)
    with _tracer.start_as_current_span("bridge.translate") as span:
        span.set_attribute(ATTR_SOURCE_PROVIDER, source)
        span.set_attribute(ATTR_TARGET_PROVIDER, target)

        universal = to_universal(source, body, source_url)
        span.set_attribute(ATTR_MODEL, universal.model)
        span.set_attribute(ATTR_MESSAGE_COUNT, len(universal.messages))

        result = from_universal(target, universal, target_url)
        if target == "openai":
            span.set_attribute(ATTR_DIALECT, _output_dialect(universal, target_url, None))

    logger.debug("Translated %s request to %s (%d messages)", source, target, len(universal.messages))
    return result
