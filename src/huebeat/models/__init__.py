"""
Models package - Data models for the MIDI light engine
"""

from .enums import MidiEventKind, TempoSource, SpringPreset, AnimationPresetID, LogLevel, LogCategory
from .color import XYPoint
from .light_state import LightState, LightStateOverride
from .midi import MidiEvent
from .transition import SpringConfig, SPRING_PRESETS

__all__ = [
    'MidiEventKind',
    'TempoSource',
    'SpringPreset',
    'AnimationPresetID',
    'LogLevel',
    'LogCategory',
    'XYPoint',
    'LightState',
    'LightStateOverride',
    'MidiEvent',
    'SpringConfig',
    'SPRING_PRESETS',
]
