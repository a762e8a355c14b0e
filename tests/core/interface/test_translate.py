"""Tests for the translation entry points."""

from __future__ import annotations

import itertools
from typing import Any

import pytest

from llm_bridge.core.interface.models import UniversalBody, UniversalMessage
from llm_bridge.core.interface.translate import (
    from_universal,
    get_transpiler,
    to_universal,
    translate_between_providers,
)
from llm_bridge.core.interface.transpilers import (
    AnthropicTranspiler,
    GoogleTranspiler,
    OpenAIResponsesTranspiler,
    OpenAITranspiler,
)
from llm_bridge.exceptions import UnsupportedProviderError

PROVIDERS = ("openai", "anthropic", "google")

MALFORMED_BODIES: list[Any] = [
    None,
    [],
    "body",
    {"messages": "nope", "contents": 3},
    {"messages": [1, None, {"role": "user", "content": 5}, {"role": "wizard", "content": [7, {"type": "?"}]}]},
    {"contents": [{"parts": [1, "x", None, {"inlineData": "bad"}, {"functionCall": "bad"}]}], "tools": "x"},
    {"input": [None, {"type": "function_call"}, {"type": "mystery"}], "tools": {"a": 1}},
    {"temperature": "hot", "max_tokens": "many", "stop": 5, "tool_choice": 9, "system": 3},
]


class TestGetTranspiler:
    def test_dispatch(self) -> None:
        assert isinstance(get_transpiler("openai"), OpenAITranspiler)
        assert isinstance(get_transpiler("openai", "responses"), OpenAIResponsesTranspiler)
        assert isinstance(get_transpiler("anthropic"), AnthropicTranspiler)
        assert isinstance(get_transpiler("google"), GoogleTranspiler)

    def test_unknown_provider(self) -> None:
        with pytest.raises(UnsupportedProviderError):
            get_transpiler("cohere")

    def test_unknown_dialect(self) -> None:
        with pytest.raises(ValueError, match="dialect"):
            get_transpiler("openai", "legacy")


class TestUnsupportedProvider:
    def test_to_universal(self) -> None:
        with pytest.raises(UnsupportedProviderError):
            to_universal("cohere", {})

    def test_from_universal(self) -> None:
        with pytest.raises(UnsupportedProviderError):
            from_universal("cohere", UniversalBody(provider="openai"))

    def test_translate(self) -> None:
        with pytest.raises(UnsupportedProviderError):
            translate_between_providers("openai", "mistral", {})
        with pytest.raises(UnsupportedProviderError):
            translate_between_providers("mistral", "openai", {})


class TestNeverRaises:
    @pytest.mark.parametrize(("source", "target"), list(itertools.product(PROVIDERS, PROVIDERS)))
    @pytest.mark.parametrize("body", MALFORMED_BODIES)
    def test_malformed_bodies(self, source: str, target: str, body: Any) -> None:
        result = translate_between_providers(source, target, body)
        assert isinstance(result, dict)


class TestToUniversal:
    def test_google_model_from_url(self) -> None:
        url = "https://generativelanguage.googleapis.com/v1beta/models/gemini-1.5-pro:generateContent"
        universal = to_universal("google", {"contents": []}, url)
        assert universal.model == "gemini-1.5-pro"

    def test_google_body_model_beats_url(self) -> None:
        url = "https://generativelanguage.googleapis.com/v1beta/models/gemini-1.5-pro:generateContent"
        universal = to_universal("google", {"model": "gemini-2.0-flash", "contents": []}, url)
        assert universal.model == "gemini-2.0-flash"

    def test_source_body_not_mutated(self) -> None:
        body = {"model": "gpt-4", "messages": [{"role": "user", "content": "hi"}]}
        universal = to_universal("openai", body)
        universal.messages[0].metadata["edited"] = True
        universal.original.raw["model"] = "changed"  # type: ignore[union-attr]
        assert body == {"model": "gpt-4", "messages": [{"role": "user", "content": "hi"}]}

    def test_explicit_dialect(self) -> None:
        universal = to_universal("openai", {"input": "hi"}, dialect="chat")
        assert universal.messages == []
        assert universal.provider_params == {"input": "hi"}


class TestFromUniversal:
    def test_hand_built_body(self) -> None:
        universal = UniversalBody(
            provider="openai",
            model="gpt-4o",
            system="Be brief.",
            messages=[UniversalMessage.user("Hello")],
            max_tokens=50,
        )
        assert from_universal("openai", universal) == {
            "model": "gpt-4o",
            "messages": [{"role": "system", "content": "Be brief."}, {"role": "user", "content": "Hello"}],
            "max_tokens": 50,
        }
        assert from_universal("anthropic", universal) == {
            "model": "gpt-4o",
            "max_tokens": 50,
            "system": "Be brief.",
            "messages": [{"role": "user", "content": "Hello"}],
        }
        assert from_universal("google", universal) == {
            "contents": [{"role": "user", "parts": [{"text": "Hello"}]}],
            "systemInstruction": {"parts": [{"text": "Be brief."}]},
            "generationConfig": {"maxOutputTokens": 50},
        }

    def test_explicit_responses_dialect(self) -> None:
        universal = UniversalBody(provider="openai", model="gpt-4o", messages=[UniversalMessage.user("Hi")])
        assert from_universal("openai", universal, dialect="responses") == {"model": "gpt-4o", "input": "Hi"}
