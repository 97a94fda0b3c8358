"""Shared CLI input/output helpers."""

from __future__ import annotations

import json
import sys
from typing import IO, Any

from rich.console import Console
from rich.table import Table

console = Console()


def read_payload(stream: IO[str]) -> Any:
    """Read a JSON document from *stream*, exiting with an error if invalid."""
    try:
        return json.load(stream)
    except json.JSONDecodeError as exc:
        console.print(f"[red]Invalid JSON:[/red] {exc}")
        sys.exit(1)


def print_payload(data: Any) -> None:
    """Pretty-print a payload as JSON."""
    console.print_json(json.dumps(data, default=str))


def print_routes_table(routes: list[tuple[str, str, str]]) -> None:
    """Pretty-print (source, target, route) rows as a table."""
    table = Table(title="Conversion Routes")
    table.add_column("Source", style="cyan")
    table.add_column("Target", style="cyan")
    table.add_column("Route")

    styles = {"registered": "green", "fallback": "yellow", "identity": "dim"}
    for source, target, route in routes:
        table.add_row(source, target, f"[{styles.get(route, 'white')}]{route}[/]")

    console.print(table)
