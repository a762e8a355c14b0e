"""``llm-bridge tokens`` — estimate tokens and cost for a request body."""

from __future__ import annotations

import asyncio
import sys

import click

from llm_bridge.cli_commands._output import console, load_json_file, print_json_data, print_token_table
from llm_bridge.config import load_settings
from llm_bridge.core.context.counter import count_universal_tokens, extract_model_from_universal
from llm_bridge.core.context.observability import create_observability_data
from llm_bridge.core.context.pricing import ModelMetadataCache
from llm_bridge.core.interface.detector import detect_provider
from llm_bridge.core.interface.models import PROVIDERS
from llm_bridge.core.interface.translate import to_universal
from llm_bridge.exceptions import BridgeError


@click.command()
@click.argument("body_file", type=click.Path(exists=True))
@click.option(
    "--provider",
    type=click.Choice(PROVIDERS),
    default=None,
    help="Provider format of the body (detected when omitted).",
)
@click.option("--config", "config_path", type=click.Path(exists=True), default=None, help="Settings YAML file.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def tokens(body_file: str, provider: str | None, config_path: str | None, as_json: bool) -> None:
    """Estimate token usage (and cost, when pricing is enabled) for BODY_FILE."""
    body = load_json_file(body_file)

    try:
        settings = load_settings(config_path)
        universal = to_universal(provider or detect_provider(body), body)
    except BridgeError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)

    analysis = count_universal_tokens(universal)
    observability = None
    if settings.pricing.enabled:
        cache = ModelMetadataCache.from_settings(settings.pricing)
        observability = asyncio.run(
            create_observability_data(
                analysis.input_tokens,
                analysis.input_tokens,
                universal.provider,
                extract_model_from_universal(universal),
                False,
                cache=cache,
                estimated_output_tokens=analysis.estimated_output_tokens,
                multimodal_content_count=analysis.multimodal_content_count,
                tool_calls_count=analysis.tool_calls_count,
            )
        )

    if as_json:
        data = {"tokens": analysis.model_dump()}
        if observability is not None:
            data["observability"] = observability.model_dump(mode="json")
        print_json_data(data)
        return

    print_token_table(analysis, observability)
