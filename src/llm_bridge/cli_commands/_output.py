"""Shared CLI output formatters."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from llm_bridge.core.context.counter import TokenAnalysis  # noqa: TC001
from llm_bridge.core.context.observability import ObservabilityData  # noqa: TC001
from llm_bridge.errors.classify import classify_error
from llm_bridge.errors.models import ErrorEnvelope  # noqa: TC001

console = Console()


def load_json_file(path: str) -> Any:
    """Read a JSON document, exiting with status 1 on failure."""
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        console.print(f"[red]Error reading {path}:[/red] {exc}")
        sys.exit(1)


def print_json_data(data: Any) -> None:
    console.print_json(json.dumps(data, default=str))


def print_token_table(analysis: TokenAnalysis, observability: ObservabilityData | None = None) -> None:
    """Pretty-print a token analysis, with cost estimates when available."""
    table = Table(title="Token Estimate")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Input tokens", str(analysis.input_tokens))
    table.add_row("Estimated output tokens", str(analysis.estimated_output_tokens))
    table.add_row("Multimodal parts", str(analysis.multimodal_content_count))
    table.add_row("Tool calls", str(analysis.tool_calls_count))
    if observability is not None:
        table.add_row("Estimated input cost (USD)", f"{observability.estimated_input_cost:.4f}")
        table.add_row("Estimated output cost (USD)", f"{observability.estimated_output_cost:.4f}")

    console.print(table)


def print_error_summary(envelope: ErrorEnvelope) -> None:
    """Pretty-print a normalized error and its classification."""
    verdict = classify_error(envelope.type, envelope.http_status)
    table = Table(title=f"{envelope.provider} error")
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("Type", envelope.type.value)
    table.add_row("HTTP status", str(envelope.http_status))
    table.add_row("Message", _truncate(envelope.message))
    if envelope.code is not None:
        table.add_row("Code", str(envelope.code))
    if envelope.retry_after is not None:
        table.add_row("Retry after (s)", str(envelope.retry_after))
    table.add_row("Retryable", _yes_no(verdict.retryable))
    table.add_row("User error", _yes_no(verdict.user_error))
    table.add_row("Quota", _yes_no(verdict.quota))

    console.print(table)


def _yes_no(value: bool) -> str:
    return "[green]yes[/green]" if value else "no"


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
