"""Transpiler protocol — converts between the canonical model and a wire format.

Each wire format (Claude, OpenAI, Gemini, Ollama) has a concrete transpiler
that parses provider payloads into canonical requests/responses and renders
canonical values back into provider payloads. Registered format pairs are
compositions of a source parser and a target builder.
"""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from chatbridge.core.interface.models import CanonicalRequest, CanonicalResponse, as_list, as_object

Payload = dict[str, Any]
ConvertFn = Callable[[Any], Any]

logger = logging.getLogger(__name__)


@runtime_checkable
class SourceTranspiler(Protocol):
    """Protocol every wire-format transpiler satisfies.

    Ollama stops here: it is a request source and a response format, never
    a request target. Formats that can be a request target satisfy
    :class:`FormatTranspiler`.
    """

    format_id: str

    def parse_request(self, payload: Payload) -> CanonicalRequest:
        """Read a provider request into a CanonicalRequest."""
        ...

    def parse_response(self, payload: Any) -> CanonicalResponse:
        """Read a provider response into a CanonicalResponse.

        Must never raise on missing or malformed fields; documented defaults
        apply instead.
        """
        ...

    def build_response(self, response: CanonicalResponse) -> Payload:
        """Render a CanonicalResponse as a provider response payload."""
        ...


@runtime_checkable
class FormatTranspiler(SourceTranspiler, Protocol):
    """A transpiler that can also render requests for its format."""

    def build_request(self, request: CanonicalRequest) -> Payload:
        """Render a CanonicalRequest as a provider request payload."""
        ...


@dataclass(frozen=True)
class ConverterPair:
    """The request and response converters for one ordered format pair."""

    request: ConvertFn
    response: ConvertFn


def compose(parse: Callable[[Any], Any], build: Callable[[Any], Any]) -> ConvertFn:
    """Chain a source parser into a target builder."""

    def convert(payload: Any) -> Any:
        return build(parse(payload))

    convert.__qualname__ = f"{_name(parse)}->{_name(build)}"
    return convert


def _name(fn: Callable[..., Any]) -> str:
    owner = getattr(fn, "__self__", None)
    method = getattr(fn, "__name__", repr(fn))
    if owner is not None:
        return f"{type(owner).__name__}.{method}"
    return method


def omit_none(payload: Payload) -> Payload:
    """Drop keys whose value is ``None`` (absent optional fields)."""
    return {k: v for k, v in payload.items() if v is not None}


def load_payload(payload: Any) -> Payload:
    """Coerce a response payload into a dict.

    JSON strings are decoded; anything that is not (or does not decode to)
    an object becomes ``{}``.
    """
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError:
            logger.debug("Response payload is not valid JSON; using empty object")
            return {}
    return as_object(payload)


def get_path(payload: Any, *path: str | int) -> Any:
    """Walk nested dicts/lists, returning ``None`` at the first missing step."""
    current: Any = payload
    for step in path:
        if isinstance(step, int):
            items = as_list(current)
            if len(items) <= step:
                return None
            current = items[step]
        else:
            obj = as_object(current)
            if step not in obj:
                return None
            current = obj[step]
    return current
