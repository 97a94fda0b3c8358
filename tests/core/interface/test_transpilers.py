"""Tests for the per-format transpilers using recorded payload fixtures."""

import json
from typing import Any

from chatbridge.core.interface.config import EngineConfig
from chatbridge.core.interface.models import (
    CanonicalRequest,
    CanonicalResponse,
    Message,
    TextBlock,
    ToolSpec,
    ToolUseBlock,
    Usage,
)
from chatbridge.core.interface.transpilers.claude import ClaudeTranspiler
from chatbridge.core.interface.transpilers.gemini import GeminiTranspiler
from chatbridge.core.interface.transpilers.ollama import OllamaTranspiler
from chatbridge.core.interface.transpilers.openai import OpenAITranspiler

# ---------------------------------------------------------------------------
# Fixtures: sample payloads
# ---------------------------------------------------------------------------


def _claude_request() -> dict[str, Any]:
    return {
        "model": "claude-3-opus",
        "system": "You are helpful.",
        "max_tokens": 1024,
        "temperature": 0.2,
        "messages": [
            {"role": "user", "content": [{"type": "text", "text": "What is 2+2?"}]},
            {
                "role": "assistant",
                "content": [
                    {"type": "text", "text": "Let me calculate."},
                    {"type": "tool_use", "id": "tu-1", "name": "calc", "input": {"e": "2+2"}},
                ],
            },
        ],
        "tools": [
            {
                "name": "calc",
                "description": "Evaluate an expression",
                "input_schema": {"type": "object", "properties": {"e": {"type": "string"}}},
            }
        ],
    }


def _openai_request() -> dict[str, Any]:
    return {
        "model": "gpt-4o",
        "messages": [
            {"role": "system", "content": "You are helpful."},
            {"role": "user", "content": "Hello"},
            {"role": "assistant", "content": "Hi there!"},
        ],
        "temperature": 0.7,
        "functions": [
            {"name": "search", "description": "Search", "parameters": {"type": "object"}}
        ],
    }


def _openai_response(**message: Any) -> dict[str, Any]:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "model": "gpt-4o",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", **message},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
    }


# ---------------------------------------------------------------------------
# Claude Transpiler Tests
# ---------------------------------------------------------------------------


class TestClaudeTranspiler:
    def setup_method(self) -> None:
        self.transpiler = ClaudeTranspiler()

    def test_parse_request(self) -> None:
        request = self.transpiler.parse_request(_claude_request())
        assert request.model == "claude-3-opus"
        assert request.system == "You are helpful."
        assert request.max_tokens == 1024
        assert request.temperature == 0.2
        assert request.messages[0].text == "What is 2+2?"
        assert request.messages[1].tool_uses[0].input == {"e": "2+2"}
        assert request.tools is not None
        assert request.tools[0].schema_["type"] == "object"

    def test_parse_request_system_blocks(self) -> None:
        payload = {"system": [{"type": "text", "text": "A"}, {"type": "text", "text": "B"}]}
        assert self.transpiler.parse_request(payload).system == "A\nB"

    def test_parse_request_text_field_fallback(self) -> None:
        payload = {"messages": [{"role": "user", "text": "loose"}]}
        assert self.transpiler.parse_request(payload).messages[0].text == "loose"

    def test_build_request_defaults(self) -> None:
        payload = self.transpiler.build_request(
            CanonicalRequest(messages=[Message.from_raw("user", "Hi")])
        )
        assert payload["max_tokens"] == 4096
        assert payload["model"] == "claude-3-sonnet-20240229"
        assert payload["stream"] is False
        assert "temperature" not in payload
        assert "system" not in payload
        assert payload["messages"] == [
            {"role": "user", "content": [{"type": "text", "text": "Hi"}]}
        ]

    def test_extra_system_messages_never_sent_as_user_turns(self) -> None:
        payload = {
            "system": "Top",
            "messages": [
                {"role": "system", "content": "extra"},
                {"role": "user", "content": "Hi"},
                {"role": "system", "content": "late"},
            ],
        }
        built = self.transpiler.build_request(self.transpiler.parse_request(payload))
        assert built["system"] == "Top"
        assert built["messages"] == [
            {"role": "user", "content": [{"type": "text", "text": "Hi"}]}
        ]

    def test_build_request_tools(self) -> None:
        payload = self.transpiler.build_request(
            CanonicalRequest(tools=[ToolSpec(name="f", description="d", schema={"type": "object"})])
        )
        assert payload["tools"] == [
            {"name": "f", "description": "d", "input_schema": {"type": "object"}}
        ]

    def test_build_request_configured_max_tokens(self) -> None:
        transpiler = ClaudeTranspiler(EngineConfig(default_max_tokens=512))
        assert transpiler.build_request(CanonicalRequest())["max_tokens"] == 512

    def test_parse_response(self) -> None:
        response = self.transpiler.parse_response(
            {
                "id": "msg_1",
                "type": "message",
                "model": "claude-3-opus",
                "content": [{"type": "text", "text": "Hello!"}],
                "stop_reason": "max_tokens",
                "usage": {"input_tokens": 3, "output_tokens": 4},
            }
        )
        assert response.id == "msg_1"
        assert response.text == "Hello!"
        assert response.stop_reason == "max_tokens"
        assert response.usage == Usage(input_tokens=3, output_tokens=4)

    def test_parse_response_unknown_stop_reason(self) -> None:
        response = self.transpiler.parse_response({"stop_reason": "stop_sequence"})
        assert response.stop_reason == "end_turn"
        assert response.content == [TextBlock(text="")]

    def test_build_response(self) -> None:
        payload = self.transpiler.build_response(
            CanonicalResponse(
                id="msg_x",
                model="m",
                content=[ToolUseBlock(id="tu", name="f", input={"a": 1})],
                stop_reason="tool_use",
            )
        )
        assert payload["type"] == "message"
        assert payload["stop_sequence"] is None
        assert payload["content"] == [
            {"type": "tool_use", "id": "tu", "name": "f", "input": {"a": 1}}
        ]
        assert payload["usage"] == {"input_tokens": 0, "output_tokens": 0}


# ---------------------------------------------------------------------------
# OpenAI Transpiler Tests
# ---------------------------------------------------------------------------


class TestOpenAITranspiler:
    def setup_method(self) -> None:
        self.transpiler = OpenAITranspiler()

    def test_parse_request(self) -> None:
        request = self.transpiler.parse_request(_openai_request())
        assert request.system == "You are helpful."
        assert [m.role for m in request.messages] == ["user", "assistant"]
        assert request.tools is not None
        assert request.tools[0].name == "search"

    def test_parse_request_extra_system_dropped(self) -> None:
        payload = {
            "messages": [
                {"role": "system", "content": "first"},
                {"role": "user", "content": "U"},
                {"role": "system", "content": "second"},
            ]
        }
        request = self.transpiler.parse_request(payload)
        assert request.system == "first"
        assert [m.text for m in request.messages] == ["U"]

    def test_parse_request_tool_calls(self) -> None:
        payload = {
            "messages": [
                {
                    "role": "assistant",
                    "content": None,
                    "tool_calls": [
                        {
                            "id": "call-1",
                            "type": "function",
                            "function": {"name": "search", "arguments": '{"q": "x"}'},
                        }
                    ],
                },
                {"role": "tool", "tool_call_id": "call-1", "content": "result"},
            ]
        }
        request = self.transpiler.parse_request(payload)
        tool = request.messages[0].tool_uses[0]
        assert tool.id == "call-1"
        assert tool.input == {"q": "x"}
        assert request.messages[1].role == "user"
        assert request.messages[1].text == "result"

    def test_parse_request_tools_array(self) -> None:
        payload = {
            "tools": [
                {"type": "function", "function": {"name": "f", "parameters": {"type": "object"}}}
            ]
        }
        tools = self.transpiler.parse_request(payload).tools
        assert tools is not None
        assert tools[0].name == "f"
        assert tools[0].schema_ == {"type": "object"}

    def test_build_request_flattens_content(self) -> None:
        payload = self.transpiler.build_request(
            CanonicalRequest(
                system="S",
                messages=[
                    Message(
                        role="user",
                        content=[TextBlock(text="line 1"), TextBlock(text="line 2")],
                    )
                ],
            )
        )
        assert payload["messages"] == [
            {"role": "system", "content": "S"},
            {"role": "user", "content": "line 1\nline 2"},
        ]
        assert payload["model"] == "gpt-3.5-turbo"
        assert "max_tokens" not in payload

    def test_build_request_functions(self) -> None:
        payload = self.transpiler.build_request(
            CanonicalRequest(tools=[ToolSpec(name="f", schema={"type": "object"})])
        )
        assert payload["functions"] == [
            {"name": "f", "description": "", "parameters": {"type": "object"}}
        ]

    def test_parse_response_text(self) -> None:
        response = self.transpiler.parse_response(_openai_response(content="Hello!"))
        assert response.id == "chatcmpl-1"
        assert response.text == "Hello!"
        assert response.usage == Usage(input_tokens=10, output_tokens=5)

    def test_parse_response_tool_calls(self) -> None:
        payload = _openai_response(
            content=None,
            tool_calls=[
                {
                    "id": "tc-1",
                    "type": "function",
                    "function": {"name": "search", "arguments": '{"query": "hello"}'},
                },
                {"id": "tc-2", "type": "other", "function": {"name": "skip"}},
            ],
        )
        response = self.transpiler.parse_response(payload)
        assert len(response.content) == 1
        block = response.content[0]
        assert isinstance(block, ToolUseBlock)
        assert block.id == "tc-1"
        assert block.input == {"query": "hello"}

    def test_parse_response_json_string(self) -> None:
        response = self.transpiler.parse_response(json.dumps(_openai_response(content="x")))
        assert response.text == "x"

    def test_parse_response_garbage_string(self) -> None:
        response = self.transpiler.parse_response("not json")
        assert response.content == [TextBlock(text="")]
        assert response.usage == Usage()

    def test_build_response_single_function_call(self) -> None:
        payload = self.transpiler.build_response(
            CanonicalResponse(
                model="m",
                content=[
                    TextBlock(text="a"),
                    TextBlock(text="b"),
                    ToolUseBlock(name="first", input={"x": 1}),
                    ToolUseBlock(name="second", input={}),
                ],
                stop_reason="tool_use",
                usage=Usage(input_tokens=2, output_tokens=3),
            )
        )
        message = payload["choices"][0]["message"]
        assert message["content"] == "a\nb"
        assert message["function_call"] == {"name": "first", "arguments": '{"x": 1}'}
        assert payload["choices"][0]["finish_reason"] == "function_call"
        assert payload["object"] == "chat.completion"
        assert payload["usage"] == {
            "prompt_tokens": 2,
            "completion_tokens": 3,
            "total_tokens": 5,
        }


# ---------------------------------------------------------------------------
# Gemini Transpiler Tests
# ---------------------------------------------------------------------------


class TestGeminiTranspiler:
    def setup_method(self) -> None:
        self.transpiler = GeminiTranspiler()

    def test_parse_request(self) -> None:
        request = self.transpiler.parse_request(
            {
                "contents": [
                    {"role": "user", "parts": [{"text": "a"}, {"text": "b"}]},
                    {"role": "model", "parts": [{"text": "c"}]},
                ],
                "systemInstruction": {"parts": [{"text": "S"}]},
                "generationConfig": {"temperature": 0.3, "maxOutputTokens": 100},
                "tools": [{"functionDeclarations": [{"name": "f", "parameters": {}}]}],
            }
        )
        assert request.messages[0].text == "a\nb"
        assert request.messages[1].role == "assistant"
        assert request.system == "S"
        assert request.temperature == 0.3
        assert request.max_tokens == 100
        assert request.tools is not None
        assert request.tools[0].name == "f"

    def test_build_request_system_prepended_to_user(self) -> None:
        payload = self.transpiler.build_request(
            CanonicalRequest(system="S", messages=[Message.from_raw("user", "U")])
        )
        assert payload["contents"] == [
            {"role": "user", "parts": [{"text": "S\n\n"}, {"text": "U"}]}
        ]

    def test_build_request_system_without_leading_user(self) -> None:
        payload = self.transpiler.build_request(
            CanonicalRequest(system="S", messages=[Message.from_raw("assistant", "A")])
        )
        assert payload["contents"] == [
            {"role": "user", "parts": [{"text": "S"}]},
            {"role": "model", "parts": [{"text": "A"}]},
        ]

    def test_build_request_generation_config(self) -> None:
        payload = self.transpiler.build_request(CanonicalRequest(max_tokens=50))
        assert payload["generationConfig"] == {"maxOutputTokens": 50, "topP": 0.95, "topK": 64}

    def test_parse_response(self) -> None:
        response = self.transpiler.parse_response(
            {
                "candidates": [
                    {
                        "content": {"parts": [{"text": "a"}, {"text": "b"}], "role": "model"},
                        "finishReason": "MAX_TOKENS",
                    }
                ],
                "usageMetadata": {"promptTokenCount": 7, "candidatesTokenCount": 9},
            }
        )
        assert response.text == "a\nb"
        assert response.stop_reason == "max_tokens"
        assert response.usage == Usage(input_tokens=7, output_tokens=9)

    def test_parse_response_function_call(self) -> None:
        response = self.transpiler.parse_response(
            {
                "candidates": [
                    {
                        "content": {"parts": [{"functionCall": {"name": "f", "args": {"x": 1}}}]},
                        "finishReason": "STOP",
                    }
                ]
            }
        )
        assert response.stop_reason == "tool_use"
        assert response.tool_uses[0].input == {"x": 1}

    def test_parse_response_skips_non_object_parts(self) -> None:
        payload = {"candidates": [{"content": {"parts": ["junk", {"text": "a"}, 3]}}]}
        response = self.transpiler.parse_response(payload)
        assert response.content == [TextBlock(text="a")]

    def test_parse_response_no_candidates(self) -> None:
        response = self.transpiler.parse_response({})
        assert response.content == [TextBlock(text="")]

    def test_build_response(self) -> None:
        payload = self.transpiler.build_response(
            CanonicalResponse(content=[TextBlock(text="hi")], stop_reason="max_tokens")
        )
        candidate = payload["candidates"][0]
        assert candidate["content"] == {"parts": [{"text": "hi"}], "role": "model"}
        assert candidate["finishReason"] == "MAX_TOKENS"
        assert payload["promptFeedback"] == {"safetyRatings": []}


# ---------------------------------------------------------------------------
# Ollama Transpiler Tests
# ---------------------------------------------------------------------------


class TestOllamaTranspiler:
    def setup_method(self) -> None:
        self.transpiler = OllamaTranspiler()

    def test_parse_prompt_request(self) -> None:
        request = self.transpiler.parse_request(
            {
                "model": "llama3",
                "prompt": "Why is the sky blue?",
                "system": "Be brief.",
                "options": {"temperature": 0.1, "num_predict": 64},
            }
        )
        assert request.model == "llama3"
        assert request.messages == [Message.from_raw("user", "Why is the sky blue?")]
        assert request.system == "Be brief."
        assert request.temperature == 0.1
        assert request.max_tokens == 64
        assert request.stream is False

    def test_parse_messages_request(self) -> None:
        request = self.transpiler.parse_request(
            {"messages": [{"role": "system", "content": "S"}, {"role": "user", "content": "U"}]}
        )
        assert request.system == "S"
        assert request.messages[0].text == "U"

    def test_parse_response(self) -> None:
        response = self.transpiler.parse_response(
            {
                "model": "llama3",
                "response": "Rayleigh scattering.",
                "done": True,
                "done_reason": "length",
                "prompt_eval_count": 12,
                "eval_count": 30,
            }
        )
        assert response.text == "Rayleigh scattering."
        assert response.stop_reason == "max_tokens"
        assert response.usage == Usage(input_tokens=12, output_tokens=30)

    def test_parse_chat_response(self) -> None:
        response = self.transpiler.parse_response(
            {"model": "llama3", "message": {"role": "assistant", "content": "hi"}}
        )
        assert response.text == "hi"

    def test_build_response(self) -> None:
        payload = self.transpiler.build_response(
            CanonicalResponse(model="llama3", content=[TextBlock(text="ok")])
        )
        assert payload["response"] == "ok"
        assert payload["done"] is True
        assert payload["eval_count"] == 0
