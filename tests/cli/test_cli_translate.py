"""Tests for ``llm-bridge translate`` CLI command."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from click.testing import CliRunner

from llm_bridge.cli import main

if TYPE_CHECKING:
    from collections.abc import Callable

OPENAI_BODY = {
    "model": "gpt-4",
    "messages": [
        {"role": "system", "content": "Be brief."},
        {"role": "user", "content": "Hello"},
    ],
    "temperature": 0.7,
}


class TestTranslate:
    def test_openai_to_anthropic(self, write_json: Callable[[str, Any], str]) -> None:
        path = write_json("body.json", OPENAI_BODY)
        result = CliRunner().invoke(main, ["translate", path, "--from", "openai", "--to", "anthropic"])
        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "model": "gpt-4",
            "max_tokens": 1024,
            "system": "Be brief.",
            "messages": [{"role": "user", "content": "Hello"}],
            "temperature": 0.7,
        }

    def test_source_detected(self, write_json: Callable[[str, Any], str]) -> None:
        path = write_json("body.json", OPENAI_BODY)
        result = CliRunner().invoke(main, ["translate", path, "--to", "google"])
        assert result.exit_code == 0
        output = json.loads(result.output)
        assert output["contents"] == [{"role": "user", "parts": [{"text": "Hello"}]}]
        assert output["generationConfig"] == {"temperature": 0.7}

    def test_responses_target_url(self, write_json: Callable[[str, Any], str]) -> None:
        path = write_json("body.json", OPENAI_BODY)
        result = CliRunner().invoke(
            main,
            ["translate", path, "--to", "openai", "--target-url", "https://api.openai.com/v1/responses"],
        )
        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "model": "gpt-4",
            "instructions": "Be brief.",
            "input": "Hello",
            "temperature": 0.7,
        }

    def test_target_required(self, write_json: Callable[[str, Any], str]) -> None:
        path = write_json("body.json", OPENAI_BODY)
        result = CliRunner().invoke(main, ["translate", path])
        assert result.exit_code != 0

    def test_unknown_provider_choice(self, write_json: Callable[[str, Any], str]) -> None:
        path = write_json("body.json", OPENAI_BODY)
        result = CliRunner().invoke(main, ["translate", path, "--to", "cohere"])
        assert result.exit_code != 0
