"""
LightStateFrame - fully resolved output for one target at one tick

Frames are never retained by the core: only the latest frame per target
matters, and a frame the sink cannot take is dropped.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from huebeat.models.color import XYPoint
from huebeat.models.light_state import LightState
from huebeat.utils.colors import hsv_to_xy


@dataclass(frozen=True)
class LightStateFrame:
    """
    Attributes:
        target_id: Light id
        state: Resolved state (numeric channels already spring-interpolated)
        tick: Scheduler tick index that produced the frame
        timestamp: Scheduler clock (ms) at composition time
    """

    target_id: str
    state: LightState
    tick: int = 0
    timestamp: float = 0.0

    # === Convenience accessors ===

    @property
    def on(self) -> bool:
        return self.state.on

    @property
    def brightness(self) -> int:
        return self.state.brightness

    @property
    def hue(self) -> int:
        return self.state.hue

    @property
    def saturation(self) -> int:
        return self.state.saturation

    @property
    def effect(self) -> Optional[str]:
        return self.state.effect

    @property
    def xy(self) -> XYPoint:
        """Chromaticity derived from hue/sat for xy-native sinks"""
        x, y = hsv_to_xy(self.state.hue, self.state.saturation)
        return XYPoint(x, y)

    def to_dict(self) -> Dict[str, Any]:
        data = self.state.to_dict()
        data["target_id"] = self.target_id
        data["xy"] = self.xy.to_dict()
        data["tick"] = self.tick
        return data

    def __repr__(self) -> str:
        return (
            f"LightStateFrame({self.target_id}, tick={self.tick}, on={self.on}, "
            f"bri={self.brightness}, hue={self.hue}, sat={self.saturation})"
        )
