from enum import Enum, auto


class EventSource(Enum):
    """Event source identifiers for application events"""
    PERFORMANCE_SERVICE = auto()   # MIDI handling, trigger resolution
    TEMPO_TRACKER = auto()         # Clock-derived tempo
    FRAME_SCHEDULER = auto()       # Tick loop (staleness, animation lifecycle)
