"""OpenAI transpiler — Chat Completions format.

Key differences from the canonical model:
- The system prompt is a ``{"role": "system"}`` message at index 0.
- Request content is sent as plain strings.
- Tools are sent as legacy ``functions`` with a ``parameters`` schema; both
  ``functions`` and ``tools[].function`` are accepted on input.
- Responses wrap the assistant message in ``choices``; tool-call arguments
  arrive as JSON strings.
"""

import json
import time
from typing import Any

from chatbridge.core.interface.config import EngineConfig
from chatbridge.core.interface.models import (
    CanonicalRequest,
    CanonicalResponse,
    ContentBlock,
    Message,
    StopReason,
    TextBlock,
    ToolSpec,
    ToolUseBlock,
    Usage,
    as_list,
    as_object,
    blocks_text,
    hoist_system,
    normalize_content,
    parse_tool_arguments,
)
from chatbridge.core.interface.transpiler import Payload, get_path, load_payload, omit_none

FINISH_TO_STOP: dict[str, StopReason] = {
    "stop": "end_turn",
    "length": "max_tokens",
    "tool_calls": "tool_use",
    "function_call": "tool_use",
}

# Reverse path uses the legacy single function_call shape
STOP_TO_FINISH: dict[str, str] = {
    "end_turn": "stop",
    "max_tokens": "length",
    "tool_use": "function_call",
}


class OpenAITranspiler:
    """Converts between the canonical model and OpenAI's chat completion format."""

    format_id = "openai"

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()

    def parse_request(self, payload: Payload) -> CanonicalRequest:
        messages = [_parse_message(m) for m in payload.get("messages") or []]
        system, messages = hoist_system(messages)

        return CanonicalRequest(
            model=payload.get("model"),
            messages=messages,
            system=system,
            max_tokens=payload.get("max_tokens"),
            temperature=payload.get("temperature"),
            stream=bool(payload.get("stream")),
            tools=_parse_tools(payload),
        )

    def build_request(self, request: CanonicalRequest) -> Payload:
        """Render an OpenAI request with content flattened to strings."""
        messages: list[dict[str, Any]] = []
        if request.system:
            messages.append({"role": "system", "content": request.system})
        messages.extend(_message_to_openai(msg) for msg in request.messages)

        result: Payload = omit_none(
            {
                "model": request.model or self.config.model_for(self.format_id),
                "messages": messages,
                "temperature": request.temperature,
                "max_tokens": request.max_tokens,
                "stream": request.stream,
            }
        )
        if request.tools:
            result["functions"] = [
                {
                    "name": tool.name,
                    "description": tool.description,
                    "parameters": tool.schema_,
                }
                for tool in request.tools
            ]
        return result

    def parse_response(self, payload: Any) -> CanonicalResponse:
        """Read a chat completion into a CanonicalResponse.

        Never raises on partial data: no choices yields an empty text block,
        malformed tool arguments are kept under ``raw_arguments``, missing
        usage counts as zero, and unknown finish reasons map to ``end_turn``.
        """
        data = load_payload(payload)
        fields: dict[str, Any] = {
            "model": data.get("model") or "unknown",
            "usage": Usage(
                input_tokens=get_path(data, "usage", "prompt_tokens") or 0,
                output_tokens=get_path(data, "usage", "completion_tokens") or 0,
            ),
        }
        if data.get("id"):
            fields["id"] = data["id"]

        choices = data.get("choices") or []
        if not choices:
            return CanonicalResponse(**fields)

        choice: Any = choices[0] if isinstance(choices[0], dict) else {}
        message: Any = choice.get("message") or {}

        content: list[ContentBlock] = []
        text = message.get("content")
        if isinstance(text, list):
            text = blocks_text(normalize_content(text))
        if text:
            content.append(TextBlock(text=str(text)))

        for tool_call in message.get("tool_calls") or []:
            if tool_call.get("type") != "function":
                continue
            function = tool_call.get("function") or {}
            block = ToolUseBlock(
                name=function.get("name") or "",
                input=parse_tool_arguments(function.get("arguments") or "{}"),
            )
            if tool_call.get("id"):
                block.id = tool_call["id"]
            content.append(block)

        legacy = message.get("function_call")
        if isinstance(legacy, dict):
            call = as_object(legacy)
            content.append(
                ToolUseBlock(
                    name=call.get("name") or "",
                    input=parse_tool_arguments(call.get("arguments") or "{}"),
                )
            )

        finish_reason = choice.get("finish_reason") or "stop"
        fields["content"] = content
        fields["stop_reason"] = FINISH_TO_STOP.get(finish_reason, "end_turn")
        return CanonicalResponse(**fields)

    def build_response(self, response: CanonicalResponse) -> Payload:
        """Render a chat completion.

        Text blocks are joined with newlines. Only the first tool use is
        kept, as a legacy ``function_call``; the legacy shape cannot carry
        more than one.
        """
        message: dict[str, Any] = {"role": "assistant", "content": response.text}
        tool_uses = response.tool_uses
        if tool_uses:
            first = tool_uses[0]
            message["function_call"] = {
                "name": first.name,
                "arguments": json.dumps(first.input),
            }

        usage = response.usage
        return {
            "id": response.id,
            "object": "chat.completion",
            "created": int(time.time()),
            "model": response.model,
            "choices": [
                {
                    "index": 0,
                    "message": message,
                    "finish_reason": STOP_TO_FINISH[response.stop_reason],
                }
            ],
            "usage": {
                "prompt_tokens": usage.input_tokens,
                "completion_tokens": usage.output_tokens,
                "total_tokens": usage.input_tokens + usage.output_tokens,
            },
        }


def _parse_message(raw: Any) -> Message:
    """Convert one OpenAI message to canonical form.

    Tool and function result messages are carried as user text.
    """
    if not isinstance(raw, dict):
        return Message(role="user", content=normalize_content(raw))
    entry = as_object(raw)
    role = entry.get("role")
    content = normalize_content(entry.get("content"))

    if role == "system":
        return Message(role="system", content=content)
    if role != "assistant":
        return Message(role="user", content=content)

    for item in as_list(entry.get("tool_calls")):
        tool_call = as_object(item)
        function = as_object(tool_call.get("function"))
        block = ToolUseBlock(
            name=function.get("name") or "",
            input=parse_tool_arguments(function.get("arguments")),
        )
        if tool_call.get("id"):
            block.id = tool_call["id"]
        content.append(block)
    legacy = entry.get("function_call")
    if isinstance(legacy, dict):
        call = as_object(legacy)
        content.append(
            ToolUseBlock(
                name=call.get("name") or "",
                input=parse_tool_arguments(call.get("arguments")),
            )
        )
    return Message(role="assistant", content=content)


def _parse_tools(payload: Payload) -> list[ToolSpec] | None:
    specs: list[dict[str, Any]] = list(payload.get("functions") or [])
    for tool in payload.get("tools") or []:
        if tool.get("type", "function") == "function" and isinstance(tool.get("function"), dict):
            specs.append(tool["function"])
    if not specs:
        return None
    return [
        ToolSpec(
            name=spec.get("name", ""),
            description=spec.get("description") or "",
            schema=spec.get("parameters") or {},
        )
        for spec in specs
    ]


def _message_to_openai(msg: Message) -> dict[str, Any]:
    role = msg.role if msg.role in ("assistant", "system") else "user"
    result: dict[str, Any] = {"role": role, "content": msg.text}
    tool_uses = msg.tool_uses
    if role == "assistant" and tool_uses:
        result["function_call"] = {
            "name": tool_uses[0].name,
            "arguments": json.dumps(tool_uses[0].input),
        }
    return result
