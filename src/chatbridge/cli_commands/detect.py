"""``chatbridge detect`` — guess the wire format of a JSON payload."""

from __future__ import annotations

from typing import IO, TYPE_CHECKING

import click

from chatbridge.cli_commands._output import console, read_payload

if TYPE_CHECKING:
    from chatbridge.core.interface.engine import FormatConverter


@click.command("detect")
@click.argument("payload_file", type=click.File("r"), default="-")
@click.option("--response", "is_response", is_flag=True, help="Treat the payload as a response.")
@click.pass_obj
def detect_cmd(converter: FormatConverter, payload_file: IO[str], is_response: bool) -> None:
    """Print the detected format of PAYLOAD_FILE."""
    payload = read_payload(payload_file)
    if is_response:
        console.print(converter.detect_response_format(payload))
    else:
        console.print(converter.detect_request_format(payload))
