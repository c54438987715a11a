"""
Drains a one-shot agent event stream into a single text buffer.
"""

import logging
from typing import Any, AsyncIterable, Dict, Union

import core.metrics as metrics
from agents.events import (
    MessageEvent,
    ResponseEvent,
    TextEvent,
    ToolUseEvent,
    UnknownEvent,
    content_item_text,
    parse_event,
)

logger = logging.getLogger(__name__)


class StreamConsumer:
    """
    Accumulates the textual content of a response stream.

    The buffer is append-only and follows arrival order. `text` can be read
    at any point, which lets a caller that cancels consumption keep whatever
    arrived before the cut-off.
    """

    def __init__(self):
        self._parts: list[str] = []
        self.event_count = 0

    @property
    def text(self) -> str:
        return "".join(self._parts)

    def feed(self, raw: Union[ResponseEvent, Dict[str, Any]]) -> None:
        """Apply one event to the buffer."""
        event = parse_event(raw)
        self.event_count += 1
        metrics.record_stream_event(event.type if not isinstance(event, UnknownEvent) else "other")

        if isinstance(event, TextEvent):
            if isinstance(event.content, str):
                self._parts.append(event.content)

        elif isinstance(event, MessageEvent):
            if isinstance(event.content, str):
                self._parts.append(event.content)
            elif isinstance(event.content, list):
                for item in event.content:
                    text = content_item_text(item)
                    if text is not None:
                        self._parts.append(text)

        elif isinstance(event, ToolUseEvent):
            logger.info("Tool use", extra={"tool": event.name, "tool_input": event.input})

        else:
            logger.debug("Other event", extra={"event_type": event.type, "raw": event.raw})

    async def consume(self, events: AsyncIterable[Union[ResponseEvent, Dict[str, Any]]]) -> str:
        """Drain `events` to exhaustion and return the accumulated text."""
        async for raw in events:
            self.feed(raw)
        return self.text
