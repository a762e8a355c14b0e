"""Tests for tool continuation requests."""

from __future__ import annotations

import pytest

from llm_bridge.core.interface.models import ToolCall
from llm_bridge.core.interface.translate import to_universal
from llm_bridge.exceptions import UnsupportedProviderError
from llm_bridge.tools.continuation import build_continuation_headers, build_continuation_request


class TestBuildContinuationHeaders:
    def test_anthropic(self) -> None:
        headers = build_continuation_headers(
            "anthropic",
            {"X-Api-Key": "sk-ant", "Anthropic-Version": "2023-06-01", "Host": "api.anthropic.com", "Content-Length": "9"},
        )
        assert headers == {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "x-api-key": "sk-ant",
            "anthropic-version": "2023-06-01",
        }

    def test_openai(self) -> None:
        headers = build_continuation_headers("openai", {"authorization": "Bearer sk", "x-api-key": "ignored"})
        assert headers["Authorization"] == "Bearer sk"
        assert "x-api-key" not in headers

    def test_google(self) -> None:
        headers = build_continuation_headers("google", {"x-goog-api-key": "AIza"})
        assert headers["x-goog-api-key"] == "AIza"

    def test_unsupported_provider(self) -> None:
        with pytest.raises(UnsupportedProviderError):
            build_continuation_headers("cohere", {})


class TestBuildContinuationRequest:
    def test_openai(self) -> None:
        universal = to_universal("openai", {"model": "gpt-4o", "messages": [{"role": "user", "content": "Search cats"}]})
        call = ToolCall(id="call_1", name="search", arguments={"q": "cats"})
        body = build_continuation_request("openai", universal, call, "3 results")
        assert body["model"] == "gpt-4o"
        assert body["messages"] == [
            {"role": "user", "content": "Search cats"},
            {
                "role": "assistant",
                "tool_calls": [
                    {"id": "call_1", "type": "function", "function": {"name": "search", "arguments": '{"q": "cats"}'}}
                ],
            },
            {"role": "tool", "tool_call_id": "call_1", "content": "3 results"},
        ]
        assert len(universal.messages) == 1

    def test_anthropic_error_result(self) -> None:
        universal = to_universal(
            "anthropic",
            {"model": "claude-3-5-sonnet-20241022", "max_tokens": 50, "messages": [{"role": "user", "content": "Go"}]},
        )
        call = ToolCall(id="toolu_1", name="search", arguments={})
        body = build_continuation_request("anthropic", universal, call, "timeout", is_error=True)
        assert body["max_tokens"] == 50
        assert body["messages"][1] == {
            "role": "assistant",
            "content": [{"type": "tool_use", "id": "toolu_1", "name": "search", "input": {}}],
        }
        assert body["messages"][2] == {
            "role": "user",
            "content": [{"type": "tool_result", "tool_use_id": "toolu_1", "content": "timeout", "is_error": True}],
        }

    def test_google_result_named(self) -> None:
        universal = to_universal("google", {"contents": [{"role": "user", "parts": [{"text": "Go"}]}]})
        call = ToolCall(id="call_search", name="search", arguments={"q": "x"})
        body = build_continuation_request("google", universal, call, {"hits": 2})
        assert body["contents"][1] == {
            "role": "model",
            "parts": [{"functionCall": {"name": "search", "args": {"q": "x"}, "id": "call_search"}}],
        }
        assert body["contents"][2] == {
            "role": "user",
            "parts": [{"functionResponse": {"name": "search", "response": {"hits": 2}, "id": "call_search"}}],
        }

    def test_responses_target_url(self) -> None:
        universal = to_universal("openai", {"model": "gpt-4o", "messages": [{"role": "user", "content": "Go"}]})
        call = ToolCall(id="call_1", name="search", arguments={})
        body = build_continuation_request(
            "openai", universal, call, "done", target_url="https://api.openai.com/v1/responses"
        )
        assert body["input"][1] == {"type": "function_call", "call_id": "call_1", "name": "search", "arguments": "{}"}
        assert body["input"][2] == {"type": "function_call_output", "call_id": "call_1", "output": "done"}
