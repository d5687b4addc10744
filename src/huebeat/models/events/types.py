from enum import Enum, auto


class EventType(Enum):
    # Trigger resolution
    MAPPING_TRIGGERED = auto()
    NOTE_RELEASED = auto()
    INPUT_DROPPED = auto()

    # Context
    PRESET_CHANGED = auto()
    SNAPSHOT_CHANGED = auto()

    # Tempo
    TEMPO_CHANGED = auto()

    # Animation
    ANIMATION_STARTED = auto()
    ANIMATION_STOPPED = auto()
