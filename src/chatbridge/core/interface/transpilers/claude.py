"""Claude transpiler — Anthropic-style Messages format.

Key differences from the canonical model:
- The system prompt is a separate top-level ``system`` field.
- Message content is always an array of typed blocks.
- Tools carry their schema under ``input_schema``.
- ``max_tokens`` is mandatory.
"""

from typing import Any, get_args

from chatbridge.core.interface.config import EngineConfig
from chatbridge.core.interface.models import (
    CanonicalRequest,
    CanonicalResponse,
    ContentBlock,
    Message,
    Role,
    StopReason,
    ToolSpec,
    Usage,
    as_object,
    blocks_text,
    hoist_system,
    normalize_content,
)
from chatbridge.core.interface.transpiler import Payload, get_path, load_payload, omit_none

_STOP_REASONS: frozenset[str] = frozenset(get_args(StopReason))


class ClaudeTranspiler:
    """Converts between the canonical model and Claude's Messages API."""

    format_id = "claude"

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()

    def parse_request(self, payload: Payload) -> CanonicalRequest:
        messages = [_parse_message(m) for m in payload.get("messages") or []]
        system = payload.get("system")
        if system is not None and not isinstance(system, str):
            # System may also be given as an array of text blocks
            system = blocks_text(normalize_content(system))
        system, messages = hoist_system(messages, system)

        tools: list[ToolSpec] | None = None
        if payload.get("tools"):
            tools = [
                ToolSpec(
                    name=tool.get("name", ""),
                    description=tool.get("description") or "",
                    schema=tool.get("input_schema") or {},
                )
                for tool in payload["tools"]
            ]

        return CanonicalRequest(
            model=payload.get("model"),
            messages=messages,
            system=system,
            max_tokens=payload.get("max_tokens"),
            temperature=payload.get("temperature"),
            stream=bool(payload.get("stream")),
            tools=tools,
        )

    def build_request(self, request: CanonicalRequest) -> Payload:
        """Render a Claude request.

        ``max_tokens`` falls back to the configured default.
        """
        result: Payload = omit_none(
            {
                "model": request.model or self.config.model_for(self.format_id),
                "messages": [
                    {
                        "role": "assistant" if msg.role == "assistant" else "user",
                        "content": _blocks_to_claude(msg.content),
                    }
                    for msg in request.messages
                ],
                "max_tokens": request.max_tokens or self.config.default_max_tokens,
                "temperature": request.temperature,
                "stream": request.stream,
                "system": request.system or None,
            }
        )
        if request.tools:
            result["tools"] = [
                {
                    "name": tool.name,
                    "description": tool.description,
                    "input_schema": tool.schema_,
                }
                for tool in request.tools
            ]
        return result

    def parse_response(self, payload: Any) -> CanonicalResponse:
        data = load_payload(payload)
        stop_reason = data.get("stop_reason")
        fields: dict[str, Any] = {
            "model": data.get("model") or "unknown",
            "content": normalize_content(data.get("content")),
            "stop_reason": stop_reason if stop_reason in _STOP_REASONS else "end_turn",
            "usage": Usage(
                input_tokens=get_path(data, "usage", "input_tokens") or 0,
                output_tokens=get_path(data, "usage", "output_tokens") or 0,
            ),
        }
        if data.get("id"):
            fields["id"] = data["id"]
        return CanonicalResponse(**fields)

    def build_response(self, response: CanonicalResponse) -> Payload:
        return {
            "id": response.id,
            "type": "message",
            "role": "assistant",
            "model": response.model,
            "content": _blocks_to_claude(response.content),
            "stop_reason": response.stop_reason,
            "stop_sequence": None,
            "usage": {
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            },
        }


def _parse_message(raw: Any) -> Message:
    if not isinstance(raw, dict):
        return Message(role="user", content=normalize_content(raw))
    entry = as_object(raw)
    role: Role = entry["role"] if entry.get("role") in ("system", "assistant") else "user"
    content: Any = entry.get("content")
    if content is None and isinstance(entry.get("text"), str):
        content = entry["text"]
    return Message(role=role, content=normalize_content(content))


def _blocks_to_claude(blocks: list[ContentBlock]) -> list[dict[str, Any]]:
    return [block.model_dump() for block in blocks]
