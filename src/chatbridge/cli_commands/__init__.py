"""CLI subcommand registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all subcommands on the CLI group."""
    from chatbridge.cli_commands.convert import convert_request_cmd, convert_response_cmd
    from chatbridge.cli_commands.detect import detect_cmd
    from chatbridge.cli_commands.pairs import pairs_cmd

    cli.add_command(convert_request_cmd)
    cli.add_command(convert_response_cmd)
    cli.add_command(detect_cmd)
    cli.add_command(pairs_cmd)
