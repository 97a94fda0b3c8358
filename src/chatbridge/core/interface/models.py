"""Canonical chat model — the hub every wire-format transpiler reads and writes.

Requests and responses from any provider are parsed into these shapes, and
target payloads are rendered from them. Provider quirks (the ``model`` role
name, tool schema field names, system placement) are handled at the
transpiler boundary and never leak into this module.
"""

import json
import logging
from typing import Any, Literal, cast
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger(__name__)

Role = Literal["system", "user", "assistant"]
StopReason = Literal["end_turn", "max_tokens", "tool_use"]

# ---------------------------------------------------------------------------
# Content blocks
# ---------------------------------------------------------------------------


class TextBlock(BaseModel):
    """Plain text content block."""

    type: Literal["text"] = "text"
    text: str = ""


class ToolUseBlock(BaseModel):
    """A tool invocation. ``input`` is always a JSON object."""

    type: Literal["tool_use"] = "tool_use"
    id: str = Field(default_factory=lambda: f"toolu_{uuid4().hex[:24]}")
    name: str = ""
    input: dict[str, Any] = Field(default_factory=lambda: dict[str, Any]())


ContentBlock = TextBlock | ToolUseBlock


def as_object(value: Any) -> dict[str, Any]:
    """Return *value* as a JSON object, or ``{}`` when it is not one."""
    return cast(dict[str, Any], value) if isinstance(value, dict) else {}


def as_list(value: Any) -> list[Any]:
    return cast(list[Any], value) if isinstance(value, list) else []


def parse_tool_arguments(raw: Any) -> dict[str, Any]:
    """Turn a tool-call argument payload into a JSON object.

    Unparseable strings are kept as ``{"raw_arguments": raw}`` so nothing
    the upstream sent is lost.
    """
    if raw is None or raw == "":
        return {}
    if isinstance(raw, dict):
        return dict(as_object(raw))
    try:
        parsed: Any = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        logger.debug("Unparseable tool arguments kept as raw_arguments: %r", raw)
        return {"raw_arguments": raw}
    if isinstance(parsed, dict):
        return as_object(parsed)
    return {"raw_arguments": raw}


def normalize_content(value: Any) -> list[ContentBlock]:
    """Normalize any accepted ContentValue shape into canonical blocks.

    Accepts a plain string, a list of provider blocks (``text`` and
    ``tool_use`` dicts, bare strings, or already-built blocks), an object
    carrying a ``text`` field, or ``None``. Block types the canonical model
    cannot carry are dropped.
    """
    if value is None:
        return []
    if isinstance(value, str):
        return [TextBlock(text=value)]
    if isinstance(value, TextBlock | ToolUseBlock):
        return [value]
    if isinstance(value, dict):
        return _normalize_item(value) or [TextBlock(text=str(as_object(value).get("text") or ""))]
    if isinstance(value, list):
        blocks: list[ContentBlock] = []
        for item in as_list(value):
            blocks.extend(_normalize_item(item))
        return blocks
    return [TextBlock(text=str(value))]


def _normalize_item(item: Any) -> list[ContentBlock]:
    if isinstance(item, str):
        return [TextBlock(text=item)]
    if isinstance(item, TextBlock | ToolUseBlock):
        return [item]
    if not isinstance(item, dict):
        return []
    raw = as_object(item)
    block_type = raw.get("type")
    if block_type == "tool_use":
        kwargs: dict[str, Any] = {
            "name": raw.get("name") or "",
            "input": parse_tool_arguments(raw.get("input")),
        }
        if raw.get("id"):
            kwargs["id"] = raw["id"]
        return [ToolUseBlock(**kwargs)]
    if block_type in (None, "text") and "text" in raw:
        return [TextBlock(text=str(raw.get("text") or ""))]
    if block_type == "tool_result":
        # Carried as text; the canonical model has no tool-result block.
        inner = blocks_text(normalize_content(raw.get("content")))
        return [TextBlock(text=inner)]
    return []


def blocks_text(blocks: list[ContentBlock], separator: str = "\n") -> str:
    """Join the text of all TextBlocks."""
    return separator.join(b.text for b in blocks if isinstance(b, TextBlock))


# ---------------------------------------------------------------------------
# Messages and tools
# ---------------------------------------------------------------------------


class Message(BaseModel):
    """A single conversation turn."""

    role: Role
    content: list[ContentBlock] = []

    @property
    def text(self) -> str:
        """Newline-joined text of all text blocks."""
        return blocks_text(self.content)

    @property
    def tool_uses(self) -> list[ToolUseBlock]:
        return [b for b in self.content if isinstance(b, ToolUseBlock)]

    @classmethod
    def from_raw(cls, role: Role, content: Any) -> "Message":
        """Build a message from any accepted ContentValue."""
        return cls(role=role, content=normalize_content(content))


def hoist_system(
    messages: list[Message], system: str | None = None
) -> tuple[str | None, list[Message]]:
    """Split system-role messages out of *messages*.

    The first system message becomes the system instruction unless *system*
    is already set; every other system message is dropped.
    """
    rest: list[Message] = []
    for msg in messages:
        if msg.role != "system":
            rest.append(msg)
        elif system is None:
            system = msg.text
        else:
            logger.debug("Dropping extra system message: %.60r", msg.text)
    return system, rest


class ToolSpec(BaseModel):
    """A tool the model may call. ``schema`` is the JSON schema of its input."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str = ""
    schema_: dict[str, Any] = Field(default_factory=lambda: dict[str, Any](), alias="schema")


class Usage(BaseModel):
    """Token accounting."""

    input_tokens: int = 0
    output_tokens: int = 0


# ---------------------------------------------------------------------------
# Request / Response
# ---------------------------------------------------------------------------


class CanonicalRequest(BaseModel):
    """A chat request in canonical form.

    ``system`` holds at most one system instruction; transpilers hoist the
    first system message of the source into it and drop any others.
    """

    model: str | None = None
    messages: list[Message] = []
    system: str | None = None
    max_tokens: int | None = None
    temperature: float | None = None
    stream: bool = False
    tools: list[ToolSpec] | None = None


class CanonicalResponse(BaseModel):
    """An assistant response in canonical form. ``content`` is never empty."""

    id: str = Field(default_factory=lambda: f"msg_{uuid4().hex[:24]}")
    model: str = "unknown"
    role: Literal["assistant"] = "assistant"
    content: list[ContentBlock] = []
    stop_reason: StopReason = "end_turn"
    usage: Usage = Field(default_factory=Usage)

    @model_validator(mode="after")
    def _ensure_content(self) -> "CanonicalResponse":
        if not self.content:
            self.content = [TextBlock(text="")]
        return self

    @property
    def text(self) -> str:
        return blocks_text(self.content)

    @property
    def tool_uses(self) -> list[ToolUseBlock]:
        return [b for b in self.content if isinstance(b, ToolUseBlock)]

    @classmethod
    def empty(cls, **fields: Any) -> "CanonicalResponse":
        """The minimal well-formed response: empty text, zero usage, end_turn."""
        return cls(**fields)
