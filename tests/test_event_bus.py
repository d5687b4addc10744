"""
Tests for the event bus

Publishing, subscription, priority, middleware, filtering and fault tolerance.
"""

import pytest

from huebeat.models.events import (
    AnimationStoppedEvent,
    EventType,
    MappingTriggeredEvent,
    TempoChangedEvent,
)
from huebeat.models.enums import TempoSource
from huebeat.models.midi import MidiEvent
from huebeat.services.event_bus import EventBus
from huebeat.services.middleware import log_middleware


def triggered(target_id="desk", rule_id="r1"):
    return MappingTriggeredEvent(rule_id, target_id, 100, MidiEvent.note_on(0, 36, 100), [target_id])


class TestPubSub:

    @pytest.mark.asyncio
    async def test_basic_pub_sub(self):
        bus = EventBus()
        received = []

        async def handler(event):
            received.append(event)

        bus.subscribe(EventType.MAPPING_TRIGGERED, handler)
        await bus.publish(triggered())

        assert len(received) == 1
        assert received[0].rule_id == "r1"

    @pytest.mark.asyncio
    async def test_sync_handler(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventType.TEMPO_CHANGED, received.append)

        await bus.publish(TempoChangedEvent(128.0, TempoSource.MIDI, False))

        assert received[0].bpm == 128.0

    @pytest.mark.asyncio
    async def test_other_types_not_delivered(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventType.TEMPO_CHANGED, received.append)

        await bus.publish(triggered())

        assert received == []

    @pytest.mark.asyncio
    async def test_filtering(self):
        bus = EventBus()
        desk, stage = [], []
        bus.subscribe(EventType.MAPPING_TRIGGERED, desk.append, filter_fn=lambda e: e.target_id == "desk")
        bus.subscribe(EventType.MAPPING_TRIGGERED, stage.append, filter_fn=lambda e: e.target_id == "stage")

        await bus.publish(triggered("desk"))
        await bus.publish(triggered("stage"))
        await bus.publish(triggered("desk"))

        assert len(desk) == 2
        assert len(stage) == 1

    @pytest.mark.asyncio
    async def test_priority_order(self):
        bus = EventBus()
        order = []
        bus.subscribe(EventType.ANIMATION_STOPPED, lambda e: order.append("low"), priority=1)
        bus.subscribe(EventType.ANIMATION_STOPPED, lambda e: order.append("high"), priority=10)
        bus.subscribe(EventType.ANIMATION_STOPPED, lambda e: order.append("mid"), priority=5)

        await bus.publish(AnimationStoppedEvent("desk", "stopped"))

        assert order == ["high", "mid", "low"]

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventType.ANIMATION_STOPPED, received.append)

        assert bus.unsubscribe(EventType.ANIMATION_STOPPED, received.append) is True
        assert bus.unsubscribe(EventType.ANIMATION_STOPPED, received.append) is False

        await bus.publish(AnimationStoppedEvent("desk", "stopped"))
        assert received == []


class TestMiddleware:

    @pytest.mark.asyncio
    async def test_middleware_blocks(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventType.MAPPING_TRIGGERED, received.append)
        bus.add_middleware(lambda e: None if e.target_id == "blocked" else e)

        await bus.publish(triggered("blocked"))
        await bus.publish(triggered("desk"))

        assert [e.target_id for e in received] == ["desk"]
        assert len(bus.get_event_history()) == 1

    @pytest.mark.asyncio
    async def test_log_middleware_passes_event_through(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventType.MAPPING_TRIGGERED, received.append)
        bus.add_middleware(log_middleware)

        event = triggered()
        await bus.publish(event)

        assert received == [event]


class TestFaultTolerance:

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_stop_others(self):
        bus = EventBus()
        received = []

        def broken(event):
            raise RuntimeError("handler crashed")

        bus.subscribe(EventType.MAPPING_TRIGGERED, broken, priority=10)
        bus.subscribe(EventType.MAPPING_TRIGGERED, received.append)

        await bus.publish(triggered())

        assert len(received) == 1
        assert bus.handler_errors == 1


class TestHistory:

    @pytest.mark.asyncio
    async def test_history_bounded(self):
        bus = EventBus(history_limit=3)
        for i in range(5):
            await bus.publish(triggered(rule_id=f"r{i}"))

        history = bus.get_event_history(limit=10)
        assert [e.rule_id for e in history] == ["r2", "r3", "r4"]
        assert [e.rule_id for e in bus.get_event_history(limit=1)] == ["r4"]
        assert bus.get_event_history(limit=0) == []

        bus.clear_history()
        assert bus.get_event_history() == []

    def test_event_payload(self):
        event = AnimationStoppedEvent("desk", "finished")
        data = event.to_data()

        assert event.type is EventType.ANIMATION_STOPPED
        assert data["target_id"] == "desk"
        assert data["reason"] == "finished"
