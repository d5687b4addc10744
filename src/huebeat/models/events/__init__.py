"""
Event system for the performance engine

Advisory notifications published on the EventBus.
"""

# Event type, base class, and sources
from huebeat.models.events.types import EventType
from huebeat.models.events.base import Event
from huebeat.models.events.sources import EventSource

# Performance notifications
from huebeat.models.events.performance_events import (
    MappingTriggeredEvent,
    NoteReleasedEvent,
    InputDroppedEvent,
    PresetChangedEvent,
    SnapshotChangedEvent,
    TempoChangedEvent,
    AnimationStartedEvent,
    AnimationStoppedEvent,
)

__all__ = [
    # Type, base, and sources
    "EventType",
    "Event",
    "EventSource",

    # Performance
    "MappingTriggeredEvent",
    "NoteReleasedEvent",
    "InputDroppedEvent",
    "PresetChangedEvent",
    "SnapshotChangedEvent",
    "TempoChangedEvent",
    "AnimationStartedEvent",
    "AnimationStoppedEvent",
]
