"""``chatbridge convert-request`` / ``convert-response`` — convert a JSON payload."""

from __future__ import annotations

from typing import IO, TYPE_CHECKING

import click

from chatbridge.cli_commands._output import print_payload, read_payload
from chatbridge.core.interface.registry_data import KNOWN_FORMATS

if TYPE_CHECKING:
    from chatbridge.core.interface.engine import FormatConverter

_format_choice = click.Choice(list(KNOWN_FORMATS))


@click.command("convert-request")
@click.option("--from", "source", type=_format_choice, required=True, help="Source format.")
@click.option("--to", "target", type=_format_choice, required=True, help="Target format.")
@click.argument("payload_file", type=click.File("r"), default="-")
@click.pass_obj
def convert_request_cmd(
    converter: FormatConverter, source: str, target: str, payload_file: IO[str]
) -> None:
    """Convert a request payload.

    PAYLOAD_FILE is a JSON file, or ``-`` (the default) for stdin.
    """
    payload = read_payload(payload_file)
    print_payload(converter.convert_request(source, target, payload))


@click.command("convert-response")
@click.option("--from", "source", type=_format_choice, required=True, help="Source format.")
@click.option("--to", "target", type=_format_choice, required=True, help="Target format.")
@click.argument("payload_file", type=click.File("r"), default="-")
@click.pass_obj
def convert_response_cmd(
    converter: FormatConverter, source: str, target: str, payload_file: IO[str]
) -> None:
    """Convert a response payload.

    PAYLOAD_FILE is a JSON file, or ``-`` (the default) for stdin.
    """
    payload = read_payload(payload_file)
    print_payload(converter.convert_response(source, target, payload))
