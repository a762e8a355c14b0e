"""``llm-bridge error`` — normalize a provider error and optionally re-render it."""

from __future__ import annotations

import click

from llm_bridge.cli_commands._output import console, load_json_file, print_error_summary, print_json_data
from llm_bridge.core.interface.models import PROVIDERS
from llm_bridge.errors.builder import translate_error
from llm_bridge.errors.parser import parse_provider_error


@click.command("error")
@click.argument("error_file", type=click.Path(exists=True))
@click.option("--provider", type=click.Choice(PROVIDERS), required=True, help="Provider that returned the error.")
@click.option("--status", type=int, default=None, help="HTTP status of the original response.")
@click.option("--to", "target", type=click.Choice(PROVIDERS), default=None, help="Re-render for this provider.")
def error_cmd(error_file: str, provider: str, status: int | None, target: str | None) -> None:
    """Classify the provider error body in ERROR_FILE."""
    raw = load_json_file(error_file)
    envelope = parse_provider_error(raw, provider, {"status_code": status} if status else None)
    print_error_summary(envelope)

    if target:
        built = translate_error(envelope, target)
        console.print(f"\n[bold]{target} response ({built.status_code})[/bold]")
        print_json_data(built.body)
