"""Generic fallback conversion for format pairs with no registered converters.

Requests keep only the fields every chat format shares. A response from a
known format is parsed by that format's transpiler, so usage and stop
reason survive; a response of unknown shape is reduced to its text, found
by probing a fixed list of locations from the most specific shape to the
least specific.
"""

import copy
import json
import logging
from collections.abc import Callable, Mapping
from typing import Any

from chatbridge.core.interface.config import EngineConfig
from chatbridge.core.interface.models import CanonicalResponse, TextBlock, as_object
from chatbridge.core.interface.transpiler import Payload, get_path, omit_none

logger = logging.getLogger(__name__)

ResponseParser = Callable[[Any], CanonicalResponse]
ResponseRenderer = Callable[[CanonicalResponse], Payload]


def extract_content(payload: Any) -> str:
    """Best-effort text extraction from a response of unknown shape.

    Tried in order: the payload itself as a string, a string ``content``,
    ``choices[0].message.content``, ``content[0].text``, ``response``.
    Falls back to the JSON dump of the whole payload.
    """
    if isinstance(payload, str):
        return payload
    content = get_path(payload, "content")
    if isinstance(content, str) and content:
        return content
    for path in (("choices", 0, "message", "content"), ("content", 0, "text"), ("response",)):
        value = get_path(payload, *path)
        if isinstance(value, str) and value:
            return value
    return json.dumps(payload, default=str)


class GenericConverter:
    """Best-effort converter used when no explicit pair is registered.

    *renderers* maps a target format id to a function that renders a
    CanonicalResponse in that format. Responses for targets without a
    renderer are returned unchanged. *parsers* maps a source format id to
    the function that reads its responses into a CanonicalResponse.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        renderers: Mapping[str, ResponseRenderer] | None = None,
        parsers: Mapping[str, ResponseParser] | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.renderers: dict[str, ResponseRenderer] = dict(renderers or {})
        self.parsers: dict[str, ResponseParser] = dict(parsers or {})

    def convert_request(self, source: str, target: str, request: Any) -> Payload:
        logger.info("Generic request conversion: %s -> %s", source, target)
        data = as_object(request)
        return omit_none(
            {
                "model": data.get("model") or self.config.model_for(target),
                "messages": copy.deepcopy(data.get("messages") or []),
                "temperature": data.get("temperature"),
                "max_tokens": (
                    data.get("max_tokens")
                    or data.get("maxTokens")
                    or self.config.default_max_tokens
                ),
                "stream": bool(data.get("stream")),
            }
        )

    def convert_response(self, source: str, target: str, response: Any) -> Any:
        logger.info("Generic response conversion: %s -> %s", source, target)
        renderer = self.renderers.get(target)
        if renderer is None:
            logger.warning("No response renderer for format %r; returning payload as-is", target)
            return response

        parser = self.parsers.get(source)
        if parser is not None:
            return renderer(parser(response))

        model = get_path(response, "model")
        return renderer(
            CanonicalResponse(
                model=model if isinstance(model, str) and model else "unknown",
                content=[TextBlock(text=extract_content(response))],
            )
        )

    def empty_response(self, target: str) -> Any:
        """Render the minimal default response in *target* format, if known."""
        renderer = self.renderers.get(target)
        if renderer is None:
            return CanonicalResponse.empty().model_dump()
        return renderer(CanonicalResponse.empty())
