"""Gemini transpiler — Google-style generateContent format.

Key differences from the canonical model:
- Role "assistant" is "model"; there is no system role in ``contents``.
- System text is merged into the first user turn, ahead of its content.
- Sampling settings live under ``generationConfig``.
- Tool calls use ``functionCall`` parts and ``functionDeclarations``.
- ``finishReason`` values are upper-case.
"""

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
    hoist_system,
    parse_tool_arguments,
)
from chatbridge.core.interface.transpiler import Payload, get_path, load_payload, omit_none

_FINISH_TO_STOP: dict[str, StopReason] = {
    "stop": "end_turn",
    "max_tokens": "max_tokens",
}

_STOP_TO_FINISH: dict[str, str] = {
    "end_turn": "STOP",
    "max_tokens": "MAX_TOKENS",
    "tool_use": "STOP",
}


class GeminiTranspiler:
    """Converts between the canonical model and Gemini's generateContent format."""

    format_id = "gemini"

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()

    def parse_request(self, payload: Payload) -> CanonicalRequest:
        messages: list[Message] = []
        for entry in payload.get("contents") or []:
            role = "assistant" if entry.get("role") == "model" else "user"
            messages.append(Message(role=role, content=_parts_to_blocks(entry.get("parts"))))

        instruction = payload.get("systemInstruction") or payload.get("system_instruction")
        system: str | None = None
        if isinstance(instruction, str):
            system = instruction
        elif isinstance(instruction, dict):
            system = _join_text(as_object(instruction).get("parts"))
        system, messages = hoist_system(messages, system or None)

        generation: Any = payload.get("generationConfig") or {}
        return CanonicalRequest(
            model=payload.get("model"),
            messages=messages,
            system=system,
            max_tokens=generation.get("maxOutputTokens"),
            temperature=generation.get("temperature"),
            stream=bool(payload.get("stream")),
            tools=_parse_tools(payload.get("tools")),
        )

    def build_request(self, request: CanonicalRequest) -> Payload:
        """Render a generateContent request.

        A system instruction is prepended to the first user turn followed by
        a blank line. If the conversation does not start with a user turn, a
        new user turn holding only the system text is inserted first.
        """
        contents: list[dict[str, Any]] = [
            {
                "role": "model" if msg.role == "assistant" else "user",
                "parts": _blocks_to_parts(msg.content),
            }
            for msg in request.messages
        ]

        if request.system:
            if contents and contents[0]["role"] == "user":
                contents[0]["parts"].insert(0, {"text": request.system + "\n\n"})
            else:
                contents.insert(0, {"role": "user", "parts": [{"text": request.system}]})

        result: Payload = {
            "contents": contents,
            "generationConfig": omit_none(
                {
                    "temperature": request.temperature,
                    "maxOutputTokens": request.max_tokens,
                    "topP": self.config.gemini_top_p,
                    "topK": self.config.gemini_top_k,
                }
            ),
        }
        if request.tools:
            result["tools"] = [
                {
                    "functionDeclarations": [
                        {
                            "name": tool.name,
                            "description": tool.description,
                            "parameters": tool.schema_,
                        }
                        for tool in request.tools
                    ]
                }
            ]
        return result

    def parse_response(self, payload: Any) -> CanonicalResponse:
        """Read the first candidate of a generateContent response."""
        data = load_payload(payload)
        fields: dict[str, Any] = {
            "model": data.get("modelVersion") or data.get("model") or "unknown",
            "usage": Usage(
                input_tokens=get_path(data, "usageMetadata", "promptTokenCount") or 0,
                output_tokens=get_path(data, "usageMetadata", "candidatesTokenCount") or 0,
            ),
        }
        if data.get("responseId"):
            fields["id"] = data["responseId"]

        candidate = get_path(data, "candidates", 0)
        if not isinstance(candidate, dict):
            return CanonicalResponse(**fields)

        parts = get_path(candidate, "content", "parts") or []
        content: list[ContentBlock] = []
        text = _join_text(parts)
        if text:
            content.append(TextBlock(text=text))
        content.extend(b for b in _parts_to_blocks(parts) if isinstance(b, ToolUseBlock))

        finish_reason = str(as_object(candidate).get("finishReason") or "STOP").casefold()
        stop_reason = _FINISH_TO_STOP.get(finish_reason, "end_turn")
        if stop_reason == "end_turn" and any(isinstance(b, ToolUseBlock) for b in content):
            stop_reason = "tool_use"

        fields["content"] = content
        fields["stop_reason"] = stop_reason
        return CanonicalResponse(**fields)

    def build_response(self, response: CanonicalResponse) -> Payload:
        parts: list[dict[str, Any]] = []
        tool_uses = response.tool_uses
        if response.text or not tool_uses:
            parts.append({"text": response.text})
        parts.extend(
            {"functionCall": {"name": tool.name, "args": tool.input}} for tool in tool_uses
        )

        usage = response.usage
        return {
            "candidates": [
                {
                    "content": {"parts": parts, "role": "model"},
                    "finishReason": _STOP_TO_FINISH[response.stop_reason],
                    "index": 0,
                }
            ],
            "promptFeedback": {"safetyRatings": []},
            "usageMetadata": {
                "promptTokenCount": usage.input_tokens,
                "candidatesTokenCount": usage.output_tokens,
                "totalTokenCount": usage.input_tokens + usage.output_tokens,
            },
            "modelVersion": response.model,
        }


def _join_text(parts: Any) -> str:
    objects = [as_object(part) for part in as_list(parts)]
    return "\n".join(str(part["text"]) for part in objects if part.get("text") is not None)


def _parts_to_blocks(parts: Any) -> list[ContentBlock]:
    blocks: list[ContentBlock] = []
    for item in as_list(parts):
        part = as_object(item)
        if part.get("text") is not None:
            blocks.append(TextBlock(text=str(part["text"])))
        elif isinstance(part.get("functionCall"), dict):
            call = as_object(part["functionCall"])
            blocks.append(
                ToolUseBlock(
                    name=call.get("name") or "",
                    input=parse_tool_arguments(call.get("args")),
                )
            )
    return blocks


def _blocks_to_parts(blocks: list[ContentBlock]) -> list[dict[str, Any]]:
    parts: list[dict[str, Any]] = []
    for block in blocks:
        if isinstance(block, TextBlock):
            parts.append({"text": block.text})
        else:
            parts.append({"functionCall": {"name": block.name, "args": block.input}})
    return parts or [{"text": ""}]


def _parse_tools(tools: Any) -> list[ToolSpec] | None:
    if not isinstance(tools, list):
        return None
    specs: list[ToolSpec] = []
    for item in as_list(tools):
        tool = as_object(item)
        declarations: Any = tool.get("functionDeclarations") or tool.get("function_declarations") or []
        specs.extend(
            ToolSpec(
                name=decl.get("name", ""),
                description=decl.get("description") or "",
                schema=decl.get("parameters") or {},
            )
            for decl in declarations
        )
    return specs or None
