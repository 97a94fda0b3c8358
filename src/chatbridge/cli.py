"""chatbridge CLI entrypoint."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from chatbridge import __version__
from chatbridge.cli_commands._output import console


@click.group()
@click.version_option(version=__version__, prog_name="chatbridge")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="EngineConfig YAML file.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Logging level for engine diagnostics.",
)
@click.option("--otel", is_flag=True, help="Export conversion spans as JSON to stderr.")
@click.option(
    "--otlp-endpoint",
    default=None,
    help="Export conversion spans to this OTLP/gRPC collector.",
)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: str | None,
    log_level: str,
    otel: bool,
    otlp_endpoint: str | None,
) -> None:
    """chatbridge — convert chat API payloads between provider formats."""
    from chatbridge.core.errors import ConfigError
    from chatbridge.core.interface.config import EngineConfig, load_config
    from chatbridge.core.interface.engine import FormatConverter
    from chatbridge.utils import telemetry

    logging.basicConfig(level=log_level.upper(), stream=sys.stderr)

    if otel or otlp_endpoint:
        try:
            telemetry.configure_telemetry(console=otel, otlp_endpoint=otlp_endpoint)
        except ImportError as exc:
            console.print(f"[red]Telemetry error:[/red] {exc}")
            sys.exit(1)

    config = EngineConfig()
    if config_path:
        try:
            config = load_config(Path(config_path))
        except ConfigError as exc:
            console.print(f"[red]Config error:[/red] {exc}")
            sys.exit(1)

    ctx.obj = FormatConverter(config=config)


# Register subcommands
from chatbridge.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
