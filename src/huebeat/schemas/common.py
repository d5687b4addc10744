"""
Common schema types - colors and light state
"""

from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from huebeat.models.color import XYPoint
from huebeat.models.enums import GradientMode
from huebeat.models.light_state import LightStateOverride
from huebeat.utils.colors import hex_to_hsv


def coerce_xy(value: Any) -> XYPoint:
    """
    Accept "#rrggbb", [x, y] or {x: .., y: ..} and return an XYPoint.

    Raises:
        ValueError: unsupported or out-of-range value
    """
    if isinstance(value, XYPoint):
        return value
    if isinstance(value, str):
        return XYPoint.from_hex(value)
    try:
        if isinstance(value, dict):
            return XYPoint(float(value["x"]), float(value["y"]))
        if isinstance(value, (list, tuple)) and len(value) == 2:
            return XYPoint.from_tuple(value)
    except (KeyError, TypeError) as e:
        raise ValueError(f"Invalid xy color {value!r}: {e}") from e
    raise ValueError(f"Unsupported color value: {value!r}")


XYColor = Annotated[XYPoint, BeforeValidator(coerce_xy)]


class LightStateSchema(BaseModel):
    """Partial light state as written in YAML"""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    on: Optional[bool] = None
    brightness: Optional[int] = Field(None, ge=0, le=254)
    hue: Optional[int] = Field(None, ge=0, le=65535)
    saturation: Optional[int] = Field(None, ge=0, le=254)
    color: Optional[str] = Field(None, description="Hex shortcut setting hue and saturation (e.g. '#ff0000')")
    color_temp: Optional[int] = Field(None, ge=153, le=500)
    effect: Optional[str] = None
    effect_color: Optional[XYColor] = None
    effect_color2: Optional[XYColor] = None
    effect_speed: Optional[float] = Field(None, ge=0, le=1)
    effect_bpm: Optional[float] = Field(None, gt=0)
    effect_duration: Optional[int] = Field(None, ge=0)
    effect_intensity: Optional[float] = Field(None, ge=0, le=1)
    effect_temperature: Optional[int] = Field(None, ge=153, le=500)
    transition_time: Optional[int] = Field(None, ge=0)
    gradient: Optional[List[XYColor]] = Field(None, max_length=5)
    gradient_mode: Optional[GradientMode] = None

    @field_validator("color")
    @classmethod
    def _valid_hex(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            hex_to_hsv(v)
        return v

    def to_domain(self) -> LightStateOverride:
        hue, saturation = self.hue, self.saturation
        if self.color is not None:
            h, s, _ = hex_to_hsv(self.color)
            hue = h if hue is None else hue
            saturation = s if saturation is None else saturation

        return LightStateOverride(
            on=self.on,
            brightness=self.brightness,
            hue=hue,
            saturation=saturation,
            color_temp=self.color_temp,
            effect=self.effect,
            effect_color=self.effect_color,
            effect_color2=self.effect_color2,
            effect_speed=self.effect_speed,
            effect_bpm=self.effect_bpm,
            effect_duration=self.effect_duration,
            effect_intensity=self.effect_intensity,
            effect_temperature=self.effect_temperature,
            transition_time=self.transition_time,
            gradient=tuple(self.gradient) if self.gradient else None,
            gradient_mode=self.gradient_mode,
        )
