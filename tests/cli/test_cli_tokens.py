"""Tests for ``llm-bridge tokens`` CLI command."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from llm_bridge.cli import main
from llm_bridge.config import CONFIG_ENV_VAR
from llm_bridge.core.context.pricing import ModelCosts, ModelMetadataCache

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

BODY = {"model": "gpt-4o", "messages": [{"role": "user", "content": "abcdefgh"}], "max_tokens": 100}


@pytest.fixture
def no_pricing(tmp_path: Path) -> str:
    path = tmp_path / "bridge.yaml"
    path.write_text("pricing:\n  enabled: false\n")
    return str(path)


@pytest.fixture(autouse=True)
def _no_env_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


class TestTokens:
    def test_table(self, write_json: Callable[[str, Any], str], no_pricing: str) -> None:
        path = write_json("body.json", BODY)
        result = CliRunner().invoke(main, ["tokens", path, "--config", no_pricing])
        assert result.exit_code == 0
        assert "Token Estimate" in result.output
        assert "Input tokens" in result.output
        assert "cost" not in result.output

    def test_json(self, write_json: Callable[[str, Any], str], no_pricing: str) -> None:
        path = write_json("body.json", BODY)
        result = CliRunner().invoke(main, ["tokens", path, "--config", no_pricing, "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "tokens": {
                "input_tokens": 2,
                "estimated_output_tokens": 100,
                "multimodal_content_count": 0,
                "tool_calls_count": 0,
            }
        }

    def test_with_pricing(self, write_json: Callable[[str, Any], str]) -> None:
        cache = AsyncMock(spec=ModelMetadataCache)
        cache.get_model_costs.return_value = ModelCosts(input_cost=1e-03, output_cost=2e-03)
        path = write_json("body.json", BODY)

        with patch("llm_bridge.cli_commands.tokens.ModelMetadataCache.from_settings", return_value=cache):
            result = CliRunner().invoke(main, ["tokens", path, "--json"])

        assert result.exit_code == 0
        cache.get_model_costs.assert_awaited_once_with("gpt-4o")
        observability = json.loads(result.output)["observability"]
        assert observability["estimated_input_cost"] == 0.002
        assert observability["estimated_output_cost"] == 0.2
        assert observability["provider"] == "openai"

    def test_bad_config(self, write_json: Callable[[str, Any], str], tmp_path: Path) -> None:
        config = tmp_path / "bad.yaml"
        config.write_text("pricing: [oops\n")
        path = write_json("body.json", BODY)
        result = CliRunner().invoke(main, ["tokens", path, "--config", str(config)])
        assert result.exit_code == 1
        assert "YAML parse error" in result.output
