"""``llm-bridge detect`` — identify the provider format of a request body."""

from __future__ import annotations

import click

from llm_bridge.cli_commands._output import console, load_json_file
from llm_bridge.core.interface.detector import detect_provider, is_openai_responses_endpoint


@click.command()
@click.argument("body_file", type=click.Path(exists=True))
@click.option("--target-url", default=None, help="URL the request is sent to; its host takes precedence.")
def detect(body_file: str, target_url: str | None) -> None:
    """Print the provider whose wire format BODY_FILE uses."""
    body = load_json_file(body_file)
    provider = detect_provider(body, target_url)
    if provider == "openai" and is_openai_responses_endpoint(target_url, body):
        console.print("openai (responses)")
        return
    console.print(provider)
