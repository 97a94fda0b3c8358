"""OpenTelemetry tracing helpers for the conversion engine.

The engine only depends on the OpenTelemetry API. Until
:func:`configure_telemetry` installs an SDK tracer provider, every span is a
no-op. The CLI installs one for ``--otel`` and ``--otlp-endpoint``.

Usage::

    from chatbridge.utils.telemetry import get_tracer

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span("chatbridge.convert_request") as span:
        span.set_attribute(ATTR_SOURCE_FORMAT, "openai")
"""

from __future__ import annotations

import sys
from typing import Any

from opentelemetry import trace

# ---------------------------------------------------------------------------
# Semantic attribute keys
# ---------------------------------------------------------------------------

ATTR_SOURCE_FORMAT = "chatbridge.format.source"
ATTR_TARGET_FORMAT = "chatbridge.format.target"
ATTR_FALLBACK = "chatbridge.fallback"
ATTR_DEGRADED = "chatbridge.degraded"

_INSTRUMENTATION_NAME = "chatbridge"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a :class:`~opentelemetry.trace.Tracer` for *name*."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(
    *,
    service_name: str = "chatbridge",
    console: bool = True,
    otlp_endpoint: str | None = None,
) -> None:
    """Install an SDK tracer provider so conversion spans are exported.

    With *console*, finished spans are written as JSON to stderr; stdout is
    left to the converted payloads. With *otlp_endpoint*, spans are also
    batched to that OTLP/gRPC collector.

    Raises ``ImportError`` naming the missing package when the ``otel``
    extra is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import (
            BatchSpanProcessor,
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )
    except ImportError as exc:
        raise ImportError(
            "opentelemetry-sdk is required to export spans; install chatbridge[otel]"
        ) from exc

    processors: list[Any] = []
    if console:
        processors.append(SimpleSpanProcessor(ConsoleSpanExporter(out=sys.stderr)))
    if otlp_endpoint:
        processors.append(BatchSpanProcessor(_otlp_exporter(otlp_endpoint)))

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    for processor in processors:
        provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)


def _otlp_exporter(endpoint: str) -> Any:
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    except ImportError as exc:
        raise ImportError(
            "opentelemetry-exporter-otlp is required for OTLP export; install chatbridge[otel]"
        ) from exc
    return OTLPSpanExporter(endpoint=endpoint)
