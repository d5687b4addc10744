"""
Light state models

LightState is the fully resolved state of one target; LightStateOverride is
a partial state where None means "keep the previous value". Merging follows
one rule everywhere: override wins, omitted fields retain their value.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional, Tuple

from huebeat.models.color import XYPoint
from huebeat.models.enums import GradientMode

BRIGHTNESS_RANGE = (0, 254)
HUE_RANGE = (0, 65535)
SATURATION_RANGE = (0, 254)


def _clamp_int(value: Optional[float], lo: int, hi: int) -> Optional[int]:
    if value is None:
        return None
    return max(lo, min(hi, int(round(value))))


@dataclass(frozen=True)
class LightStateOverride:
    """
    Partial light state (every field optional)

    Attributes mirror LightState. Gradient points are stored as a tuple so
    overrides can be shared between steps without copying.
    """

    on: Optional[bool] = None
    brightness: Optional[int] = None
    hue: Optional[int] = None
    saturation: Optional[int] = None
    color_temp: Optional[int] = None
    effect: Optional[str] = None
    effect_color: Optional[XYPoint] = None
    effect_color2: Optional[XYPoint] = None
    effect_speed: Optional[float] = None
    effect_bpm: Optional[float] = None
    effect_duration: Optional[int] = None
    effect_intensity: Optional[float] = None
    effect_temperature: Optional[int] = None
    transition_time: Optional[int] = None
    gradient: Optional[Tuple[XYPoint, ...]] = None
    gradient_mode: Optional[GradientMode] = None

    def __post_init__(self):
        # Normalize numeric channels into device ranges
        object.__setattr__(self, "brightness", _clamp_int(self.brightness, *BRIGHTNESS_RANGE))
        object.__setattr__(self, "saturation", _clamp_int(self.saturation, *SATURATION_RANGE))
        if self.hue is not None:
            object.__setattr__(self, "hue", int(round(self.hue)) % (HUE_RANGE[1] + 1))
        if self.gradient is not None:
            object.__setattr__(self, "gradient", tuple(self.gradient))

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def with_changes(self, **changes) -> 'LightStateOverride':
        return replace(self, **changes)

    def merged_with(self, other: 'LightStateOverride') -> 'LightStateOverride':
        """Combine two overrides; fields set on other win"""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        for f in fields(other):
            v = getattr(other, f.name)
            if v is not None:
                values[f.name] = v
        return LightStateOverride(**values)


@dataclass(frozen=True)
class LightState:
    """
    Fully resolved light state for one target

    A fresh target starts dark (on=False, brightness 0, white hue/sat).
    """

    on: bool = False
    brightness: int = 0
    hue: int = 0
    saturation: int = 0
    color_temp: Optional[int] = None
    effect: Optional[str] = None
    effect_color: Optional[XYPoint] = None
    effect_color2: Optional[XYPoint] = None
    effect_speed: Optional[float] = None
    effect_bpm: Optional[float] = None
    effect_duration: Optional[int] = None
    effect_intensity: Optional[float] = None
    effect_temperature: Optional[int] = None
    transition_time: Optional[int] = None
    gradient: Optional[Tuple[XYPoint, ...]] = None
    gradient_mode: Optional[GradientMode] = None

    def merge(self, override: Optional[LightStateOverride]) -> 'LightState':
        """
        Apply an override: override wins, omitted fields retain their value.

        Args:
            override: Partial state (None or empty returns self)

        Returns:
            New LightState
        """
        if override is None:
            return self
        changes = {
            f.name: getattr(override, f.name)
            for f in fields(override)
            if getattr(override, f.name) is not None
        }
        if not changes:
            return self
        return replace(self, **changes)

    def with_channels(self, brightness: float, hue: float, saturation: float) -> 'LightState':
        """Replace the three spring-smoothed channels (values rounded into range)"""
        return replace(
            self,
            brightness=_clamp_int(brightness, *BRIGHTNESS_RANGE),
            hue=int(round(hue)) % (HUE_RANGE[1] + 1),
            saturation=_clamp_int(saturation, *SATURATION_RANGE),
        )

    def to_override(self) -> LightStateOverride:
        return LightStateOverride(**{f.name: getattr(self, f.name) for f in fields(self)})

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict for sinks and logging (None fields omitted)"""
        data: Dict[str, Any] = {}
        for f in fields(self):
            v = getattr(self, f.name)
            if v is None:
                continue
            if isinstance(v, XYPoint):
                v = v.to_dict()
            elif isinstance(v, tuple):
                v = [p.to_dict() for p in v]
            elif isinstance(v, GradientMode):
                v = v.value
            data[f.name] = v
        return data


OFF = LightStateOverride(on=False)
