"""chatbridge — convert chat-completion payloads between provider wire formats."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from chatbridge.core.interface.engine import FormatConverter as FormatConverter
    from chatbridge.core.interface.engine import convert_request as convert_request
    from chatbridge.core.interface.engine import convert_response as convert_response

_ENGINE_EXPORTS = {
    "FormatConverter": "chatbridge.core.interface.engine",
    "convert_request": "chatbridge.core.interface.engine",
    "convert_response": "chatbridge.core.interface.engine",
    "detect_request_format": "chatbridge.core.interface.detector",
    "detect_response_format": "chatbridge.core.interface.detector",
}


def __getattr__(name: str) -> object:
    module_path = _ENGINE_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'chatbridge' has no attribute {name!r}")
