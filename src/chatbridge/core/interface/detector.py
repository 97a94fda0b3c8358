"""Structural format detection for payloads of unknown origin."""

from typing import Any

from chatbridge.core.interface.models import as_object
from chatbridge.core.interface.transpiler import get_path


def detect_request_format(payload: Any) -> str:
    """Classify a request payload as ``claude``, ``gemini``, ``ollama`` or ``openai``.

    Claude is checked first: its typed content blocks are the most
    distinctive signature. Anything unrecognized is treated as OpenAI.
    """
    if not isinstance(payload, dict):
        return "openai"
    data = as_object(payload)
    if "type" in as_object(get_path(data, "messages", 0, "content", 0)):
        return "claude"
    if "contents" in data:
        return "gemini"
    if data.get("prompt") and not data.get("messages"):
        return "ollama"
    return "openai"


def detect_response_format(payload: Any) -> str:
    """Classify a response payload, or return ``unknown``."""
    if not isinstance(payload, dict):
        return "unknown"
    data = as_object(payload)
    first_block = as_object(get_path(data, "content", 0))
    if data.get("type") == "message" and first_block.get("type"):
        return "claude"
    if data.get("choices") and data.get("object") == "chat.completion":
        return "openai"
    if data.get("candidates"):
        return "gemini"
    if "response" in data and data.get("model"):
        return "ollama"
    return "unknown"
