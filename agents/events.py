"""
Response events produced by the travel agent.

The agent emits a closed set of event kinds. Anything with an unrecognized
`type` tag lands in UnknownEvent with its raw payload, so consumers can match
exhaustively instead of probing attributes.
"""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class ContentItem(BaseModel):
    """One block of a message; only `text` items carry text."""
    model_config = ConfigDict(frozen=True, extra="allow")

    type: str
    text: Optional[str] = None


class TextEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    content: Any = None  # incremental fragment; only str contributes


class MessageEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["message"] = "message"
    role: Optional[str] = None
    content: Union[str, List[Any], None] = None  # items checked one by one, see content_item_text


class ToolUseEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["tool_use"] = "tool_use"
    id: Optional[str] = None
    name: str
    input: Dict[str, Any] = Field(default_factory=dict)


class UnknownEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    raw: Dict[str, Any] = Field(default_factory=dict)


ResponseEvent = Union[TextEvent, MessageEvent, ToolUseEvent, UnknownEvent]

_KNOWN_EVENTS = {
    "text": TextEvent,
    "message": MessageEvent,
    "tool_use": ToolUseEvent,
}


def content_item_text(item: Any) -> Optional[str]:
    """Text of one message content item; None for non-text or malformed items."""
    if not isinstance(item, ContentItem):
        try:
            item = ContentItem.model_validate(item)
        except ValidationError:
            return None
    return item.text if item.type == "text" else None


def parse_event(raw: Union[ResponseEvent, Dict[str, Any]]) -> ResponseEvent:
    """
    Turn a raw event dict into a ResponseEvent.

    Unknown tags, and known tags whose payload does not validate, become
    UnknownEvent carrying the original dict.
    """
    if isinstance(raw, (TextEvent, MessageEvent, ToolUseEvent, UnknownEvent)):
        return raw

    event_type = str(raw.get("type", "unknown"))
    model = _KNOWN_EVENTS.get(event_type)
    if model is not None:
        try:
            return model.model_validate(raw)
        except ValidationError:
            pass
    return UnknownEvent(type=event_type, raw=dict(raw))
