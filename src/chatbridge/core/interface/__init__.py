"""Canonical chat model, format transpilers and the conversion engine."""

from chatbridge.core.interface.config import EngineConfig, load_config
from chatbridge.core.interface.detector import detect_request_format, detect_response_format
from chatbridge.core.interface.engine import (
    FormatConverter,
    convert_request,
    convert_response,
    get_default_converter,
)
from chatbridge.core.interface.fallback import GenericConverter, extract_content
from chatbridge.core.interface.models import (
    CanonicalRequest,
    CanonicalResponse,
    ContentBlock,
    Message,
    TextBlock,
    ToolSpec,
    ToolUseBlock,
    Usage,
    normalize_content,
)
from chatbridge.core.interface.registry import ConverterRegistry
from chatbridge.core.interface.registry_data import build_default_registry
from chatbridge.core.interface.transpiler import ConverterPair, FormatTranspiler, SourceTranspiler

__all__ = [
    "CanonicalRequest",
    "CanonicalResponse",
    "ContentBlock",
    "ConverterPair",
    "ConverterRegistry",
    "EngineConfig",
    "FormatConverter",
    "FormatTranspiler",
    "GenericConverter",
    "Message",
    "SourceTranspiler",
    "TextBlock",
    "ToolSpec",
    "ToolUseBlock",
    "Usage",
    "build_default_registry",
    "convert_request",
    "convert_response",
    "detect_request_format",
    "detect_response_format",
    "extract_content",
    "get_default_converter",
    "load_config",
    "normalize_content",
]
