"""Infrastructure: render event channel and file access."""

from .event_bus import DEFAULT_EVENT_SCHEMAS, EventBus, GraphSubscription, RenderEvent
from .files import format_from_path, read_text, write_text

__all__ = [
    "DEFAULT_EVENT_SCHEMAS",
    "EventBus",
    "GraphSubscription",
    "RenderEvent",
    "format_from_path",
    "read_text",
    "write_text",
]
