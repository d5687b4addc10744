"""
MidiEvent - one parsed MIDI message

Produced by the transport adapter (hardware.midi_input) or by tests;
consumed once by the performance service.
"""

from __future__ import annotations

from dataclasses import dataclass

from huebeat.models.enums import MidiEventKind

CHANNEL_KINDS = (
    MidiEventKind.NOTE_ON,
    MidiEventKind.NOTE_OFF,
    MidiEventKind.CONTROL_CHANGE,
    MidiEventKind.PROGRAM_CHANGE,
)


@dataclass(frozen=True)
class MidiEvent:
    """
    Immutable MIDI event

    Attributes:
        kind: Message kind
        channel: MIDI channel 0-15 (0 for system messages)
        number: Note number, controller number or program number
        value: Velocity or controller value (0 for program change / system)
        timestamp: Arrival time in milliseconds (monotonic clock)
    """

    kind: MidiEventKind
    channel: int = 0
    number: int = 0
    value: int = 0
    timestamp: float = 0.0

    # === CONSTRUCTORS ===

    @classmethod
    def note_on(cls, channel: int, note: int, velocity: int, timestamp: float = 0.0) -> 'MidiEvent':
        return cls(MidiEventKind.NOTE_ON, channel, note, velocity, timestamp)

    @classmethod
    def note_off(cls, channel: int, note: int, timestamp: float = 0.0) -> 'MidiEvent':
        return cls(MidiEventKind.NOTE_OFF, channel, note, 0, timestamp)

    @classmethod
    def control_change(cls, channel: int, controller: int, value: int, timestamp: float = 0.0) -> 'MidiEvent':
        return cls(MidiEventKind.CONTROL_CHANGE, channel, controller, value, timestamp)

    @classmethod
    def program_change(cls, channel: int, program: int, timestamp: float = 0.0) -> 'MidiEvent':
        return cls(MidiEventKind.PROGRAM_CHANGE, channel, program, 0, timestamp)

    @classmethod
    def clock(cls, timestamp: float) -> 'MidiEvent':
        return cls(MidiEventKind.CLOCK, timestamp=timestamp)

    # === PROPERTIES ===

    @property
    def is_note_off(self) -> bool:
        """Note-off, including the running-status form note-on velocity 0"""
        return self.kind is MidiEventKind.NOTE_OFF or (
            self.kind is MidiEventKind.NOTE_ON and self.value == 0
        )

    def is_well_formed(self) -> bool:
        """Range check for channel messages; system messages are always fine"""
        if self.kind not in CHANNEL_KINDS:
            return True
        return 0 <= self.channel <= 15 and 0 <= self.number <= 127 and 0 <= self.value <= 127

    def __repr__(self) -> str:
        return f"MidiEvent({self.kind.name}, ch={self.channel}, num={self.number}, val={self.value})"
