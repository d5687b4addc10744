"""
Animation generation - manual step lists and procedural presets
"""

from .generator import AnimationGenerator, clip_override_for_light
from .registry import PRESET_GENERATORS, generate_preset_steps

__all__ = [
    "AnimationGenerator",
    "clip_override_for_light",
    "PRESET_GENERATORS",
    "generate_preset_steps",
]
