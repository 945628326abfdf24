"""
Event bus for render events exchanged with rendering backends.

This module implements the push channel between the graph engine and its
rendering backends and UI listeners. Key features include:
- Per-type listeners and multi-type subscriptions
- JSON schema validation of event data before delivery
- Isolation of failing listeners (errors are logged, delivery continues)

Delivery is synchronous, in registration order. A listener that returns an
awaitable has it scheduled on the running event loop.
"""

import asyncio
import inspect
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Set, Union

from ..core.enums import LayoutName, RenderEventType
from ..core.exceptions import EventError, ValidationError
from ..utils.validation import SchemaValidator

logger = logging.getLogger(__name__)

_ID_LIST = {"type": "array", "items": {"type": "string"}}

DEFAULT_EVENT_SCHEMAS: Dict[RenderEventType, Dict[str, Any]] = {
    RenderEventType.NODE_CLICK: {
        "type": "object",
        "required": ["nodeId"],
        "properties": {"nodeId": {"type": "string", "minLength": 1}},
    },
    RenderEventType.NODE_HOVER: {
        "type": "object",
        "required": ["nodeId"],
        "properties": {"nodeId": {"type": "string", "minLength": 1}},
    },
    RenderEventType.EDGE_CLICK: {
        "type": "object",
        "required": ["edgeId"],
        "properties": {"edgeId": {"type": "string", "minLength": 1}},
    },
    RenderEventType.EDGE_HOVER: {
        "type": "object",
        "required": ["edgeId"],
        "properties": {"edgeId": {"type": "string", "minLength": 1}},
    },
    RenderEventType.SELECTION_CHANGE: {
        "type": "object",
        "properties": {"nodes": _ID_LIST, "edges": _ID_LIST},
    },
    RenderEventType.LAYOUT_CHANGE: {
        "type": "object",
        "required": ["layout"],
        "properties": {"layout": {"enum": [layout.value for layout in LayoutName]}},
    },
    RenderEventType.DATA_UPDATE: {
        "type": "object",
        "required": ["version", "revision"],
        "properties": {
            "version": {"type": "string"},
            "revision": {"type": "integer", "minimum": 0},
            "changes": {"type": "object"},
        },
    },
}

EventCallback = Callable[["RenderEvent"], Any]


def to_event_type(value: Union[RenderEventType, str]) -> RenderEventType:
    """Convert a raw event type name, raising EventError for unknown names."""
    try:
        return RenderEventType(value)
    except ValueError:
        raise EventError(f"Unknown render event type: {value!r}") from None


@dataclass(frozen=True)
class RenderEvent:
    """
    One event on the render channel.

    Attributes:
        type (RenderEventType): Event kind
        data (Dict[str, Any]): Event payload, validated against the type's schema
        timestamp (datetime): When the event was created
    """

    type: RenderEventType
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "data": self.data, "timestamp": self.timestamp.isoformat()}


@dataclass
class GraphSubscription:
    """
    Subscription receiving events of several types.

    Attributes:
        callback (EventCallback): Called with each matching event
        event_types (Optional[FrozenSet[RenderEventType]]): Types delivered;
            None delivers every type
        active (bool): Inactive subscriptions are skipped
        id (str): Subscription id
    """

    callback: EventCallback
    event_types: Optional[FrozenSet[RenderEventType]] = None
    active: bool = True
    id: str = field(default_factory=lambda: f"subscription-{uuid.uuid4().hex[:12]}")

    def __post_init__(self):
        if self.event_types is not None:
            self.event_types = frozenset(to_event_type(t) for t in self.event_types)

    def accepts(self, event_type: RenderEventType) -> bool:
        return self.active and (self.event_types is None or event_type in self.event_types)


class EventBus:
    """
    Synchronous render event bus with schema validation.

    Attributes:
        subscribers (Dict[RenderEventType, List[EventCallback]]): Per-type listeners
        subscriptions (Dict[str, GraphSubscription]): Multi-type subscriptions by id
    """

    def __init__(self, schemas: Optional[Dict[RenderEventType, Dict[str, Any]]] = None):
        """
        Initialize the event bus.

        Args:
            schemas: Event data schemas per type; the default schemas are used
                when omitted
        """
        self.subscribers: Dict[RenderEventType, List[EventCallback]] = {
            event_type: [] for event_type in RenderEventType
        }
        self.subscriptions: Dict[str, GraphSubscription] = {}
        self._pending: Set[asyncio.Task] = set()
        self._schemas = SchemaValidator(
            DEFAULT_EVENT_SCHEMAS if schemas is None else schemas
        )

    def register_event_schema(self, event_type: RenderEventType, schema: Dict[str, Any]) -> None:
        """Register a JSON schema for validating the data of ``event_type``."""
        self._schemas.register_schema(to_event_type(event_type), schema)

    def subscribe(self, event_type: Union[RenderEventType, str], callback: EventCallback) -> None:
        """Register a listener for one event type."""
        event_type = to_event_type(event_type)
        logger.debug("Adding subscriber for: %s", event_type.value)
        self.subscribers[event_type].append(callback)

    def unsubscribe(self, event_type: Union[RenderEventType, str], callback: EventCallback) -> bool:
        """
        Remove a listener.

        Returns:
            True if the listener was removed, False if it was not registered
        """
        event_type = to_event_type(event_type)
        if callback in self.subscribers[event_type]:
            self.subscribers[event_type].remove(callback)
            return True
        return False

    def add_subscription(self, subscription: GraphSubscription) -> GraphSubscription:
        self.subscriptions[subscription.id] = subscription
        return subscription

    def remove_subscription(self, subscription_id: str) -> bool:
        return self.subscriptions.pop(subscription_id, None) is not None

    def validate(self, event: RenderEvent) -> None:
        """
        Validate event data against its type's schema.

        Raises:
            ValidationError: If the data does not match
        """
        result = self._schemas.validate(event.type, event.data)
        if not result.is_valid:
            raise ValidationError(
                f"Invalid {event.type.value} event data: " + "; ".join(result.errors)
            )

    def publish(self, event: RenderEvent) -> int:
        """
        Validate and deliver an event.

        Listener errors are logged and do not stop delivery to the others.

        Returns:
            Number of callbacks the event was delivered to

        Raises:
            ValidationError: If the event data fails schema validation
        """
        if not isinstance(event, RenderEvent):
            raise EventError(f"expected RenderEvent, got {type(event).__name__}")
        self.validate(event)
        logger.debug("Publishing event: %s", event.type.value)

        callbacks = list(self.subscribers[event.type])
        callbacks.extend(
            s.callback for s in list(self.subscriptions.values()) if s.accepts(event.type)
        )
        for callback in callbacks:
            self._deliver(callback, event)
        return len(callbacks)

    def emit(
        self, event_type: Union[RenderEventType, str], data: Optional[Dict[str, Any]] = None
    ) -> RenderEvent:
        """Create, publish and return an event."""
        event = RenderEvent(type=to_event_type(event_type), data=dict(data or {}))
        self.publish(event)
        return event

    def _deliver(self, callback: EventCallback, event: RenderEvent) -> None:
        try:
            result = callback(event)
        except Exception:
            logger.exception("Error calling subscriber for %s", event.type.value)
            return
        if inspect.isawaitable(result):
            try:
                loop = asyncio.get_running_loop()
                task = loop.create_task(self._await_callback(result, event))
                self._pending.add(task)
                task.add_done_callback(self._pending.discard)
            except RuntimeError:
                logger.warning(
                    "Async subscriber for %s called outside an event loop", event.type.value
                )
                if inspect.iscoroutine(result):
                    result.close()

    @staticmethod
    async def _await_callback(awaitable: Any, event: RenderEvent) -> None:
        try:
            await awaitable
        except Exception:
            logger.exception("Error in async subscriber for %s", event.type.value)

    def get_subscriber_count(self, event_type: Union[RenderEventType, str]) -> int:
        """Number of listeners and active subscriptions receiving ``event_type``."""
        event_type = to_event_type(event_type)
        return len(self.subscribers[event_type]) + sum(
            1 for s in self.subscriptions.values() if s.accepts(event_type)
        )

    def clear_subscribers(self, event_type: Optional[RenderEventType] = None) -> None:
        """
        Clear listeners for one event type, or every listener and subscription.
        """
        if event_type is not None:
            self.subscribers[to_event_type(event_type)] = []
        else:
            self.subscribers = {t: [] for t in RenderEventType}
            self.subscriptions.clear()

