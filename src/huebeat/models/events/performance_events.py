"""
Advisory notifications emitted by the performance engine

Nothing in the core waits for or depends on these; they exist for logging
and UI activity monitors.
"""

from dataclasses import dataclass
from typing import List, Optional

from huebeat.models.enums import TempoSource
from huebeat.models.events.base import Event
from huebeat.models.events.sources import EventSource
from huebeat.models.events.types import EventType
from huebeat.models.midi import MidiEvent


@dataclass(init=False)
class MappingTriggeredEvent(Event):
    rule_id: str
    target_id: str
    velocity: int
    midi: MidiEvent
    affected_targets: List[str]

    def __init__(self, rule_id: str, target_id: str, velocity: int, midi: MidiEvent, affected_targets: List[str]):
        super().__init__(
            type=EventType.MAPPING_TRIGGERED,
            source=EventSource.PERFORMANCE_SERVICE,
        )
        self.rule_id = rule_id
        self.target_id = target_id
        self.velocity = velocity
        self.midi = midi
        self.affected_targets = affected_targets


@dataclass(init=False)
class NoteReleasedEvent(Event):
    midi: MidiEvent

    def __init__(self, midi: MidiEvent):
        super().__init__(
            type=EventType.NOTE_RELEASED,
            source=EventSource.PERFORMANCE_SERVICE,
        )
        self.midi = midi


@dataclass(init=False)
class InputDroppedEvent(Event):
    reason: str
    midi: Optional[MidiEvent]
    rule_id: Optional[str]

    def __init__(self, reason: str, midi: Optional[MidiEvent] = None, rule_id: Optional[str] = None):
        super().__init__(
            type=EventType.INPUT_DROPPED,
            source=EventSource.PERFORMANCE_SERVICE,
        )
        self.reason = reason
        self.midi = midi
        self.rule_id = rule_id


@dataclass(init=False)
class PresetChangedEvent(Event):
    old: Optional[int]
    new: int
    encountered: List[int]

    def __init__(self, old: Optional[int], new: int, encountered: List[int]):
        super().__init__(
            type=EventType.PRESET_CHANGED,
            source=EventSource.PERFORMANCE_SERVICE,
        )
        self.old = old
        self.new = new
        self.encountered = encountered


@dataclass(init=False)
class SnapshotChangedEvent(Event):
    old: Optional[int]
    new: int

    def __init__(self, old: Optional[int], new: int):
        super().__init__(
            type=EventType.SNAPSHOT_CHANGED,
            source=EventSource.PERFORMANCE_SERVICE,
        )
        self.old = old
        self.new = new


@dataclass(init=False)
class TempoChangedEvent(Event):
    bpm: float
    tempo_source: TempoSource
    stale: bool

    def __init__(self, bpm: float, tempo_source: TempoSource, stale: bool, source: EventSource = EventSource.TEMPO_TRACKER):
        super().__init__(
            type=EventType.TEMPO_CHANGED,
            source=source,
        )
        self.bpm = bpm
        self.tempo_source = tempo_source
        self.stale = stale


@dataclass(init=False)
class AnimationStartedEvent(Event):
    target_id: str
    rule_id: Optional[str]
    step_count: int

    def __init__(self, target_id: str, rule_id: Optional[str], step_count: int):
        super().__init__(
            type=EventType.ANIMATION_STARTED,
            source=EventSource.PERFORMANCE_SERVICE,
        )
        self.target_id = target_id
        self.rule_id = rule_id
        self.step_count = step_count


@dataclass(init=False)
class AnimationStoppedEvent(Event):
    target_id: str
    reason: str

    def __init__(self, target_id: str, reason: str, source: EventSource = EventSource.PERFORMANCE_SERVICE):
        super().__init__(
            type=EventType.ANIMATION_STOPPED,
            source=source,
        )
        self.target_id = target_id
        self.reason = reason
