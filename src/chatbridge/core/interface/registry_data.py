"""The default converter pairs.

Exactly five ordered pairs are supported. Claude and Gemini are never
converted directly, and nothing converts into Ollama; those pairs go
through the generic fallback.
"""

from chatbridge.core.interface.config import EngineConfig
from chatbridge.core.interface.registry import ConverterRegistry
from chatbridge.core.interface.transpiler import FormatTranspiler, SourceTranspiler, compose
from chatbridge.core.interface.transpilers.claude import ClaudeTranspiler
from chatbridge.core.interface.transpilers.gemini import GeminiTranspiler
from chatbridge.core.interface.transpilers.ollama import OllamaTranspiler
from chatbridge.core.interface.transpilers.openai import OpenAITranspiler

KNOWN_FORMATS: tuple[str, ...] = ("claude", "openai", "gemini", "ollama")

DEFAULT_PAIRS: tuple[tuple[str, str], ...] = (
    ("claude", "openai"),
    ("openai", "claude"),
    ("gemini", "openai"),
    ("openai", "gemini"),
    ("ollama", "openai"),
)


def build_transpilers(config: EngineConfig | None = None) -> dict[str, SourceTranspiler]:
    """Return one transpiler per known format, sharing *config*."""
    config = config or EngineConfig()
    return {
        "claude": ClaudeTranspiler(config),
        "openai": OpenAITranspiler(config),
        "gemini": GeminiTranspiler(config),
        "ollama": OllamaTranspiler(config),
    }


def request_targets(transpilers: dict[str, SourceTranspiler]) -> dict[str, FormatTranspiler]:
    """Narrow *transpilers* to the formats that can build requests."""
    return {fmt: t for fmt, t in transpilers.items() if isinstance(t, FormatTranspiler)}


def build_default_registry(config: EngineConfig | None = None) -> ConverterRegistry:
    """Return a frozen ``ConverterRegistry`` holding the default pairs.

    Each pair's request converter parses a source request and builds a
    target request; its response converter parses a source-format response
    and builds a target-format response.
    """
    transpilers = build_transpilers(config)
    targets = request_targets(transpilers)

    registry = ConverterRegistry()
    for source, target in DEFAULT_PAIRS:
        src = transpilers[source]
        dst = targets[target]
        registry.register(
            source,
            target,
            request=compose(src.parse_request, dst.build_request),
            response=compose(src.parse_response, dst.build_response),
        )
    registry.freeze()
    return registry
