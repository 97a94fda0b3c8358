"""FormatConverter — the public entry point of the conversion engine.

Callers hand in ``(source, target, payload)``; identity pairs pass straight
through, registered pairs use their explicit converters, and everything
else goes through the generic fallback. Conversion never raises: a failure
inside a converter is logged and degraded to a well-formed default.

A response converter for ``(source, target)`` reads a *source*-format
response and renders it in *target* format. It is not keyed on the request
pair it answers: relaying an OpenAI backend reply to an Ollama client is
``convert_response("openai", "ollama", reply)``, not ``("ollama", "openai")``.
The same holds for Gemini clients served by an OpenAI backend.
"""

import logging
from typing import Any

from chatbridge.core.interface.config import EngineConfig
from chatbridge.core.interface.detector import detect_request_format, detect_response_format
from chatbridge.core.interface.fallback import GenericConverter
from chatbridge.core.interface.registry import ConverterRegistry, pair_key
from chatbridge.core.interface.registry_data import build_default_registry, build_transpilers
from chatbridge.utils.telemetry import (
    ATTR_DEGRADED,
    ATTR_FALLBACK,
    ATTR_SOURCE_FORMAT,
    ATTR_TARGET_FORMAT,
    get_tracer,
)

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


class FormatConverter:
    """Converts chat requests and responses between wire formats.

    Usage::

        converter = FormatConverter()
        claude_response = converter.convert_response("openai", "claude", payload)

    The registry is injected (or built once from *config*) and is expected
    to be frozen; the converter never writes to it.
    """

    def __init__(
        self,
        registry: ConverterRegistry | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.registry = registry if registry is not None else build_default_registry(self.config)
        transpilers = build_transpilers(self.config)
        self.fallback = GenericConverter(
            self.config,
            renderers={fmt: t.build_response for fmt, t in transpilers.items()},
            parsers={fmt: t.parse_response for fmt, t in transpilers.items()},
        )

    def convert_request(self, source: str, target: str, request: Any) -> Any:
        """Convert a request payload from *source* format to *target* format."""
        if source == target:
            return request

        with _tracer.start_as_current_span("chatbridge.convert_request") as span:
            span.set_attribute(ATTR_SOURCE_FORMAT, source)
            span.set_attribute(ATTR_TARGET_FORMAT, target)

            pair = self.registry.lookup(source, target)
            span.set_attribute(ATTR_FALLBACK, pair is None)
            if pair is None:
                logger.warning("No converter for %s, using generic conversion", pair_key(source, target))
                return self.fallback.convert_request(source, target, request)

            try:
                return pair.request(request)
            except Exception:
                logger.exception("Request conversion %s failed", pair_key(source, target))
                span.set_attribute(ATTR_DEGRADED, True)
                return self.fallback.convert_request(source, target, request)

    def convert_response(self, source: str, target: str, response: Any) -> Any:
        """Convert a response payload from *source* format to *target* format."""
        if source == target:
            return response

        with _tracer.start_as_current_span("chatbridge.convert_response") as span:
            span.set_attribute(ATTR_SOURCE_FORMAT, source)
            span.set_attribute(ATTR_TARGET_FORMAT, target)

            pair = self.registry.lookup(source, target)
            span.set_attribute(ATTR_FALLBACK, pair is None)
            if pair is None:
                logger.warning("No converter for %s, using generic conversion", pair_key(source, target))

            try:
                if pair is None:
                    return self.fallback.convert_response(source, target, response)
                return pair.response(response)
            except Exception:
                logger.exception("Response conversion %s failed", pair_key(source, target))
                span.set_attribute(ATTR_DEGRADED, True)
                return self.fallback.empty_response(target)

    def detect_request_format(self, payload: Any) -> str:
        return detect_request_format(payload)

    def detect_response_format(self, payload: Any) -> str:
        return detect_response_format(payload)


# ---------------------------------------------------------------------------
# Module-level API backed by a lazily built default converter
# ---------------------------------------------------------------------------

_default_converter: FormatConverter | None = None


def get_default_converter() -> FormatConverter:
    """Return (and cache) the process-wide default converter."""
    global _default_converter
    if _default_converter is None:
        _default_converter = FormatConverter()
    return _default_converter


def convert_request(source: str, target: str, request: Any) -> Any:
    """Convert *request* using the default converter."""
    return get_default_converter().convert_request(source, target, request)


def convert_response(source: str, target: str, response: Any) -> Any:
    """Convert *response* using the default converter."""
    return get_default_converter().convert_response(source, target, response)
