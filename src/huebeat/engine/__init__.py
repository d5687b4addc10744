"""
Engine package - tempo, matching, smoothing and the frame tick
"""

from .tempo_tracker import TempoTracker
from .trigger_resolver import TriggerResolver
from .spring import TransitionSmoother
from .animation_instance import AnimationInstance
from .frame_scheduler import FrameScheduler

__all__ = [
    "TempoTracker",
    "TriggerResolver",
    "TransitionSmoother",
    "AnimationInstance",
    "FrameScheduler",
]
