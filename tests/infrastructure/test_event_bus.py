"""Tests for the render event bus."""

import asyncio

import pytest

from projgraph.core.enums import RenderEventType
from projgraph.core.exceptions import ConfigurationError, EventError, ValidationError
from projgraph.infrastructure.event_bus import EventBus, GraphSubscription, RenderEvent


@pytest.fixture
def bus():
    return EventBus()


def test_subscribe_and_emit(bus):
    received = []
    bus.subscribe("node-click", received.append)
    event = bus.emit(RenderEventType.NODE_CLICK, {"nodeId": "a"})

    assert received == [event]
    assert event.to_dict()["type"] == "node-click"
    assert event.to_dict()["data"] == {"nodeId": "a"}


def test_unsubscribe(bus):
    received = []
    bus.subscribe(RenderEventType.NODE_HOVER, received.append)
    assert bus.unsubscribe(RenderEventType.NODE_HOVER, received.append)
    assert not bus.unsubscribe(RenderEventType.NODE_HOVER, received.append)
    bus.emit(RenderEventType.NODE_HOVER, {"nodeId": "a"})
    assert received == []


def test_invalid_event_data_is_rejected(bus):
    received = []
    bus.subscribe(RenderEventType.NODE_CLICK, received.append)
    with pytest.raises(ValidationError):
        bus.emit(RenderEventType.NODE_CLICK, {"node": "a"})
    with pytest.raises(ValidationError):
        bus.emit(RenderEventType.LAYOUT_CHANGE, {"layout": "spiral"})
    with pytest.raises(ValidationError):
        bus.emit(RenderEventType.DATA_UPDATE, {"version": "1.0.1", "revision": -1})
    assert received == []


def test_unknown_event_type(bus):
    with pytest.raises(EventError):
        bus.subscribe("double-click", print)
    with pytest.raises(EventError):
        bus.publish({"type": "node-click"})


def test_failing_subscriber_does_not_block_others(bus):
    received = []

    def broken(event):
        raise RuntimeError("subscriber failure")

    bus.subscribe(RenderEventType.EDGE_CLICK, broken)
    bus.subscribe(RenderEventType.EDGE_CLICK, received.append)
    count = bus.publish(RenderEvent(type=RenderEventType.EDGE_CLICK, data={"edgeId": "e"}))
    assert count == 2
    assert len(received) == 1


def test_multi_type_subscriptions(bus):
    received = []
    subscription = bus.add_subscription(
        GraphSubscription(
            callback=received.append,
            event_types=["node-click", RenderEventType.EDGE_CLICK],
        )
    )
    everything = bus.add_subscription(GraphSubscription(callback=received.append))

    bus.emit(RenderEventType.NODE_CLICK, {"nodeId": "a"})
    bus.emit(RenderEventType.SELECTION_CHANGE, {"nodes": ["a"]})
    assert len(received) == 3
    assert bus.get_subscriber_count(RenderEventType.NODE_CLICK) == 2

    subscription.active = False
    bus.emit(RenderEventType.NODE_CLICK, {"nodeId": "a"})
    assert len(received) == 4

    assert bus.remove_subscription(everything.id)
    assert not bus.remove_subscription(everything.id)


def test_custom_schema(bus):
    bus.register_event_schema(
        RenderEventType.SELECTION_CHANGE,
        {"type": "object", "required": ["nodes"]},
    )
    with pytest.raises(ValidationError):
        bus.emit(RenderEventType.SELECTION_CHANGE, {})
    with pytest.raises(ConfigurationError):
        bus.register_event_schema(RenderEventType.SELECTION_CHANGE, {"type": 5})


def test_async_subscribers_run_on_the_loop(bus):
    received = []

    async def handler(event):
        received.append(event.type)

    async def scenario():
        bus.subscribe(RenderEventType.LAYOUT_CHANGE, handler)
        bus.emit(RenderEventType.LAYOUT_CHANGE, {"layout": "force"})
        await asyncio.sleep(0)

    asyncio.run(scenario())
    assert received == [RenderEventType.LAYOUT_CHANGE]


def test_clear_subscribers(bus):
    bus.subscribe(RenderEventType.NODE_CLICK, print)
    bus.subscribe(RenderEventType.EDGE_CLICK, print)
    bus.clear_subscribers(RenderEventType.NODE_CLICK)
    assert bus.get_subscriber_count(RenderEventType.NODE_CLICK) == 0
    assert bus.get_subscriber_count(RenderEventType.EDGE_CLICK) == 1
    bus.clear_subscribers()
    assert bus.get_subscriber_count(RenderEventType.EDGE_CLICK) == 0
