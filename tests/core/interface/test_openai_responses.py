"""Tests for the OpenAI Responses API dialect."""

from __future__ import annotations

import copy
from typing import Any

from llm_bridge.core.interface.models import ToolResultContent
from llm_bridge.core.interface.transpilers.openai_responses import OpenAIResponsesTranspiler, is_responses_body
from llm_bridge.core.interface.translate import from_universal, to_universal, translate_between_providers

RESPONSES_URL = "https://api.openai.com/v1/responses"


def _responses_body() -> dict[str, Any]:
    return {
        "model": "gpt-4o",
        "instructions": "Be brief.",
        "input": [
            {"role": "user", "content": "Weather in Paris?"},
            {"type": "function_call", "call_id": "call_1", "name": "get_weather", "arguments": '{"city":"Paris"}'},
            {"type": "function_call_output", "call_id": "call_1", "output": "22C"},
        ],
        "tools": [
            {"type": "web_search_preview"},
            {
                "type": "function",
                "name": "get_weather",
                "description": "Get the weather",
                "parameters": {"type": "object", "properties": {"city": {"type": "string"}}},
            },
        ],
        "max_output_tokens": 200,
        "previous_response_id": "resp_abc",
        "store": False,
    }


class TestOpenAIResponsesTranspiler:
    def setup_method(self) -> None:
        self.transpiler = OpenAIResponsesTranspiler()

    def test_is_responses_body(self) -> None:
        assert is_responses_body({"input": "hi"})
        assert not is_responses_body({"input": "hi", "messages": []})
        assert not is_responses_body("input")

    def test_string_input_round_trip(self) -> None:
        body = {"model": "gpt-4o", "input": "Hello"}
        universal = self.transpiler.to_universal(body)
        assert universal.messages[0].role == "user"
        assert universal.messages[0].text == "Hello"
        assert self.transpiler.from_universal(universal) == body

    def test_round_trip_is_exact(self) -> None:
        body = _responses_body()
        universal = self.transpiler.to_universal(copy.deepcopy(body))
        assert self.transpiler.from_universal(universal) == body

    def test_parse_items(self) -> None:
        universal = self.transpiler.to_universal(_responses_body())
        assert universal.system == "Be brief."
        assert universal.max_tokens == 200
        assert [m.role for m in universal.messages] == ["user", "assistant", "tool"]

        call = universal.messages[1].tool_calls[0]  # type: ignore[index]
        assert call.id == "call_1"
        assert call.arguments == {"city": "Paris"}

        result = universal.messages[2].content[0]
        assert isinstance(result, ToolResultContent)
        assert result.tool_result.tool_call_id == "call_1"

    def test_builtin_tools_kept_in_params(self) -> None:
        universal = self.transpiler.to_universal(_responses_body())
        assert [t.name for t in universal.tools or []] == ["get_weather"]
        assert universal.provider_params["responses_tools"][0] == {"type": "web_search_preview"}

    def test_same_name_function_tools_kept(self) -> None:
        first = {"type": "function", "name": "lookup", "parameters": {"type": "object"}}
        second = {"type": "function", "name": "lookup", "description": "Other", "parameters": {"type": "object"}}
        body = {"input": "Hi", "tools": [first, {"type": "file_search"}, second]}
        universal = self.transpiler.to_universal(copy.deepcopy(body))
        assert len(universal.tools or []) == 2
        assert self.transpiler.from_universal(universal) == body

    def test_reasoning_item_kept_verbatim(self) -> None:
        reasoning = {"type": "reasoning", "id": "rs_1", "summary": []}
        body = {"input": [{"role": "user", "content": "Hi"}, reasoning]}
        universal = self.transpiler.to_universal(copy.deepcopy(body))
        assert universal.messages[1].metadata["opaque_item"] is True
        assert self.transpiler.from_universal(universal)["input"][1] == reasoning

    def test_function_tool_choice(self) -> None:
        body = {"input": "Hi", "tool_choice": {"type": "function", "name": "get_weather"}}
        universal = self.transpiler.to_universal(copy.deepcopy(body))
        assert universal.tool_choice == {"name": "get_weather"}
        assert self.transpiler.from_universal(universal) == body

    def test_hosted_tool_choice_kept(self) -> None:
        body = {"input": "Hi", "tool_choice": {"type": "web_search_preview"}}
        universal = self.transpiler.to_universal(copy.deepcopy(body))
        assert universal.tool_choice is None
        assert self.transpiler.from_universal(universal) == body


class TestResponsesDispatch:
    def test_body_shape_selects_dialect(self) -> None:
        universal = to_universal("openai", {"model": "gpt-4o", "input": "Hi"})
        assert universal.original is not None
        assert universal.original.dialect == "responses"
        assert from_universal("openai", universal) == {"model": "gpt-4o", "input": "Hi"}

    def test_chat_to_responses_by_url(self) -> None:
        body = {
            "model": "gpt-4o",
            "messages": [{"role": "system", "content": "Be brief."}, {"role": "user", "content": "Hi"}],
        }
        result = translate_between_providers("openai", "openai", body, target_url=RESPONSES_URL)
        assert result == {"model": "gpt-4o", "instructions": "Be brief.", "input": "Hi"}

    def test_responses_to_anthropic(self) -> None:
        result = translate_between_providers("openai", "anthropic", _responses_body())
        assert result["system"] == "Be brief."
        assert result["max_tokens"] == 200
        assert result["messages"][1]["content"] == [
            {"type": "tool_use", "id": "call_1", "name": "get_weather", "input": {"city": "Paris"}}
        ]
        assert result["messages"][2]["content"] == [{"type": "tool_result", "tool_use_id": "call_1", "content": "22C"}]
        assert [t["name"] for t in result["tools"]] == ["get_weather"]
        assert "previous_response_id" not in result

    def test_chat_tool_messages_become_items(self) -> None:
        body = {
            "messages": [
                {"role": "user", "content": "Weather?"},
                {
                    "role": "assistant",
                    "content": None,
                    "tool_calls": [
                        {"id": "call_9", "type": "function", "function": {"name": "get_weather", "arguments": "{}"}}
                    ],
                },
                {"role": "tool", "tool_call_id": "call_9", "content": "sunny"},
            ]
        }
        result = from_universal("openai", to_universal("openai", body), RESPONSES_URL)
        assert result["input"][0] == {"role": "user", "content": "Weather?"}
        assert result["input"][1] == {"type": "function_call", "call_id": "call_9", "name": "get_weather", "arguments": "{}"}
        assert result["input"][2] == {"type": "function_call_output", "call_id": "call_9", "output": "sunny"}
