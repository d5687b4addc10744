"""
Scene models

A scene drives several lights at once, each with its own state and
optional animation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from huebeat.models.animation import AnimationSpec
from huebeat.models.enums import EasingCurve, TargetType
from huebeat.models.light_state import LightStateOverride


@dataclass(frozen=True)
class SceneTransition:
    duration_ms: Optional[int] = None
    easing: EasingCurve = EasingCurve.LINEAR
    stagger_ms: int = 0

    @property
    def transition_time(self) -> Optional[int]:
        """Device transition time in 100 ms units"""
        if self.duration_ms is None:
            return None
        return round(self.duration_ms / 100)


@dataclass(frozen=True)
class SceneLight:
    target_id: str
    state: LightStateOverride = field(default_factory=LightStateOverride)
    target_type: TargetType = TargetType.LIGHT
    animation: Optional[AnimationSpec] = None


@dataclass(frozen=True)
class Scene:
    id: str
    name: str = ""
    lights: Tuple[SceneLight, ...] = ()
    transition: SceneTransition = field(default_factory=SceneTransition)

    def target_ids(self) -> Tuple[str, ...]:
        return tuple(light.target_id for light in self.lights)
