"""``chatbridge pairs`` — list how each format pair is converted."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from chatbridge.cli_commands._output import print_routes_table
from chatbridge.core.interface.registry_data import KNOWN_FORMATS

if TYPE_CHECKING:
    from chatbridge.core.interface.engine import FormatConverter


@click.command("pairs")
@click.option("--all", "show_all", is_flag=True, help="Include fallback and identity routes.")
@click.pass_obj
def pairs_cmd(converter: FormatConverter, show_all: bool) -> None:
    """List registered conversion pairs."""
    if not show_all:
        print_routes_table([(s, t, "registered") for s, t in converter.registry.pairs()])
        return

    routes: list[tuple[str, str, str]] = []
    for source in KNOWN_FORMATS:
        for target in KNOWN_FORMATS:
            if source == target:
                route = "identity"
            elif (source, target) in converter.registry:
                route = "registered"
            else:
                route = "fallback"
            routes.append((source, target, route))
    print_routes_table(routes)
