"""Provider-specific transpiler implementations."""

from llm_bridge.core.interface.transpilers.anthropic import AnthropicTranspiler
from llm_bridge.core.interface.transpilers.google import GoogleTranspiler
from llm_bridge.core.interface.transpilers.openai import OpenAITranspiler
from llm_bridge.core.interface.transpilers.openai_responses import OpenAIResponsesTranspiler

__all__ = ["AnthropicTranspiler", "GoogleTranspiler", "OpenAIResponsesTranspiler", "OpenAITranspiler"]
