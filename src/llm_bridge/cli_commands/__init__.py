"""CLI subcommand registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all subcommands on the CLI group."""
    from llm_bridge.cli_commands.detect import detect
    from llm_bridge.cli_commands.error import error_cmd
    from llm_bridge.cli_commands.tokens import tokens
    from llm_bridge.cli_commands.translate import translate

    cli.add_command(detect)
    cli.add_command(translate)
    cli.add_command(tokens)
    cli.add_command(error_cmd)
