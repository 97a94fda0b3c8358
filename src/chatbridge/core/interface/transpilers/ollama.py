"""Ollama transpiler — local-model ``generate`` format.

Ollama is only ever a source of requests; no converter builds Ollama
requests. Responses are parsed from either the ``generate`` shape
(``response``) or the ``chat`` shape (``message.content``), and rendered in
the ``generate`` shape.
"""

from datetime import datetime, timezone
from typing import Any

from chatbridge.core.interface.config import EngineConfig
from chatbridge.core.interface.models import (
    CanonicalRequest,
    CanonicalResponse,
    Message,
    StopReason,
    TextBlock,
    Usage,
    hoist_system,
)
from chatbridge.core.interface.transpiler import Payload, get_path, load_payload

_DONE_TO_STOP: dict[str, StopReason] = {"stop": "end_turn", "length": "max_tokens"}
_STOP_TO_DONE: dict[str, str] = {"end_turn": "stop", "max_tokens": "length", "tool_use": "stop"}


class OllamaTranspiler:
    """Reads Ollama requests and responses; renders Ollama responses."""

    format_id = "ollama"

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()

    def parse_request(self, payload: Payload) -> CanonicalRequest:
        """A ``prompt`` becomes a single user turn; otherwise ``messages`` are used."""
        messages: list[Message] = []
        if payload.get("prompt"):
            messages.append(Message.from_raw("user", payload["prompt"]))
        elif payload.get("messages"):
            for raw in payload["messages"]:
                role = raw.get("role")
                if role not in ("system", "assistant"):
                    role = "user"
                messages.append(Message.from_raw(role, raw.get("content")))

        system = payload.get("system") if isinstance(payload.get("system"), str) else None
        system, messages = hoist_system(messages, system or None)

        options: Any = payload.get("options") or {}
        return CanonicalRequest(
            model=payload.get("model"),
            messages=messages,
            system=system,
            max_tokens=options.get("num_predict"),
            temperature=options.get("temperature"),
            stream=bool(payload.get("stream")),
        )

    def parse_response(self, payload: Any) -> CanonicalResponse:
        data = load_payload(payload)
        text = data.get("response")
        if text is None:
            text = get_path(data, "message", "content")

        return CanonicalResponse(
            model=data.get("model") or "unknown",
            content=[TextBlock(text=str(text))] if text else [],
            stop_reason=_DONE_TO_STOP.get(str(data.get("done_reason") or "stop"), "end_turn"),
            usage=Usage(
                input_tokens=data.get("prompt_eval_count") or 0,
                output_tokens=data.get("eval_count") or 0,
            ),
        )

    def build_response(self, response: CanonicalResponse) -> Payload:
        return {
            "model": response.model,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "response": response.text,
            "done": True,
            "done_reason": _STOP_TO_DONE[response.stop_reason],
            "context": [],
            "total_duration": 0,
            "load_duration": 0,
            "prompt_eval_count": response.usage.input_tokens,
            "eval_count": response.usage.output_tokens,
            "eval_duration": 0,
        }
