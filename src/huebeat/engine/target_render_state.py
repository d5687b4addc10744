"""
TargetRenderState — runtime render buffer per light target (not persisted).

Tracks what the FrameScheduler has committed for a target and what it last
emitted, allowing it to:
- Start spring transitions from the value actually on the light
- Freeze a target at its last emitted frame when an animation is stopped

Committed state is the intent (full LightState, numeric channels at their
destination). The emitted state is the last composed frame (numeric channels
mid-spring).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from huebeat.models.enums import SpringChannelID, SpringPreset
from huebeat.models.light_state import LightState

CHANNEL_FIELDS = {
    SpringChannelID.BRIGHTNESS: "brightness",
    SpringChannelID.HUE: "hue",
    SpringChannelID.SATURATION: "saturation",
}


@dataclass
class TargetRenderState:
    """
    Runtime state for one target's output.

    Attributes:
        target_id: Light id
        committed: Destination state (non-numeric fields already live)
        emitted: State carried by the last emitted frame (None before first tick)
        spring: Spring preset of the most recent commit
    """

    target_id: str
    committed: LightState = field(default_factory=LightState)
    emitted: Optional[LightState] = None
    spring: SpringPreset = SpringPreset.NONE

    def commit(self, state: LightState, spring: SpringPreset = SpringPreset.NONE) -> None:
        """Set a new destination state"""
        self.committed = state
        self.spring = spring

    def record_emitted(self, state: LightState) -> None:
        """Remember the state of the frame just composed"""
        self.emitted = state

    @property
    def visible(self) -> LightState:
        """What the light currently shows (emitted, else committed)"""
        return self.emitted if self.emitted is not None else self.committed

    def __repr__(self) -> str:
        state = self.visible
        return (
            f"TargetRenderState({self.target_id}, on={state.on}, "
            f"bri={state.brightness}, hue={state.hue}, sat={state.saturation}, "
            f"spring={self.spring.value})"
        )
