"""``llm-bridge translate`` — convert a request body between provider formats."""

from __future__ import annotations

import sys

import click

from llm_bridge.cli_commands._output import console, load_json_file, print_json_data
from llm_bridge.core.interface.detector import detect_provider
from llm_bridge.core.interface.models import PROVIDERS
from llm_bridge.core.interface.translate import translate_between_providers
from llm_bridge.exceptions import BridgeError


@click.command()
@click.argument("body_file", type=click.Path(exists=True))
@click.option(
    "--from",
    "source",
    type=click.Choice(PROVIDERS),
    default=None,
    help="Source provider (detected from the body when omitted).",
)
@click.option("--to", "target", type=click.Choice(PROVIDERS), required=True, help="Target provider.")
@click.option("--source-url", default=None, help="Endpoint the body was written for.")
@click.option("--target-url", default=None, help="Endpoint the result is for (selects the OpenAI dialect).")
def translate(
    body_file: str,
    source: str | None,
    target: str,
    source_url: str | None,
    target_url: str | None,
) -> None:
    """Translate the request body in BODY_FILE and print the result as JSON."""
    body = load_json_file(body_file)
    source = source or detect_provider(body, source_url)

    try:
        result = translate_between_providers(source, target, body, source_url=source_url, target_url=target_url)
    except BridgeError as exc:
        console.print(f"[red]Translation error:[/red] {exc}")
        sys.exit(1)

    print_json_data(result)
