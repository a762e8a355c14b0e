"""Tests for ``llm-bridge detect`` CLI command."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from click.testing import CliRunner

from llm_bridge.cli import main

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


class TestDetect:
    def test_anthropic(self, write_json: Callable[[str, Any], str]) -> None:
        path = write_json("body.json", {"system": "x", "messages": [{"role": "user", "content": "hi"}]})
        result = CliRunner().invoke(main, ["detect", path])
        assert result.exit_code == 0
        assert result.output.strip() == "anthropic"

    def test_google(self, write_json: Callable[[str, Any], str]) -> None:
        path = write_json("body.json", {"contents": []})
        result = CliRunner().invoke(main, ["detect", path])
        assert result.output.strip() == "google"

    def test_responses(self, write_json: Callable[[str, Any], str]) -> None:
        path = write_json("body.json", {"model": "gpt-4o", "input": "hi"})
        result = CliRunner().invoke(main, ["detect", path])
        assert result.exit_code == 0
        assert result.output.strip() == "openai (responses)"

    def test_target_url_host(self, write_json: Callable[[str, Any], str]) -> None:
        path = write_json("body.json", {"contents": []})
        result = CliRunner().invoke(main, ["detect", path, "--target-url", "https://api.anthropic.com/v1/messages"])
        assert result.output.strip() == "anthropic"

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        result = CliRunner().invoke(main, ["detect", str(path)])
        assert result.exit_code == 1
        assert "Error reading" in result.output

    def test_missing_file(self) -> None:
        result = CliRunner().invoke(main, ["detect", "/nonexistent/body.json"])
        assert result.exit_code != 0


class TestMainGroup:
    def test_version(self) -> None:
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "llm-bridge" in result.output
        assert "0.1.0" in result.output

    def test_help_lists_commands(self) -> None:
        result = CliRunner().invoke(main, ["--help"])
        assert result.exit_code == 0
        for command in ("detect", "translate", "tokens", "error"):
            assert command in result.output
