"""Transpiler protocol — converts between provider request bodies and the universal body.

Each provider dialect (OpenAI Chat Completions, OpenAI Responses, Anthropic
Messages, Google GenerateContent) has a concrete transpiler implementing
both directions.
"""

from typing import Any, Protocol

from llm_bridge.core.interface.models import Provider, UniversalBody


class Transpiler(Protocol):
    """Protocol for provider-specific request transpilers."""

    provider: Provider

    def to_universal(self, body: Any) -> UniversalBody:
        """Convert a raw provider request body into a :class:`UniversalBody`.

        Never raises on missing or malformed optional fields; documented
        defaults are substituted instead.
        """
        ...

    def from_universal(self, universal: UniversalBody) -> dict[str, Any]:
        """Render a :class:`UniversalBody` as this provider's request body.

        Recognized fields are rendered from the universal body and layered
        over any passthrough data captured from the same provider.
        """
        ...
