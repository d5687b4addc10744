"""
Color model - CIE xy chromaticity point

Gradients, effect colors and palettes are all expressed as xy points, which
is what gradient-capable lights consume natively. Conversions live in
utils.colors; this module only wraps them in a value type.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from huebeat.utils.colors import hex_to_xy, xy_to_hex, xy_to_hsv


@dataclass(frozen=True)
class XYPoint:
    """
    Immutable CIE xy coordinate

    Examples:
        red = XYPoint(0.6915, 0.3083)
        green = XYPoint.from_hex("#00ff00")
        mid = red.lerp(green, 0.5)
    """

    x: float
    y: float

    def __post_init__(self):
        if not (math.isfinite(self.x) and math.isfinite(self.y)):
            raise ValueError(f"Non-finite xy coordinate: ({self.x}, {self.y})")
        if not (0.0 <= self.x <= 1.0 and 0.0 <= self.y <= 1.0):
            raise ValueError(f"xy coordinate out of range: ({self.x}, {self.y})")

    # === CONSTRUCTORS ===

    @classmethod
    def from_hex(cls, hex_color: str) -> 'XYPoint':
        x, y = hex_to_xy(hex_color)
        return cls(x, y)

    @classmethod
    def from_tuple(cls, value: Tuple[float, float]) -> 'XYPoint':
        return cls(float(value[0]), float(value[1]))

    # === CONVERSIONS ===

    def to_hex(self) -> str:
        return xy_to_hex(self.x, self.y)

    def to_hsv(self) -> Tuple[int, int]:
        """Device-native (hue, saturation)"""
        return xy_to_hsv(self.x, self.y)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def to_dict(self) -> Dict[str, Any]:
        return {"x": self.x, "y": self.y}

    # === OPERATIONS ===

    def lerp(self, other: 'XYPoint', t: float) -> 'XYPoint':
        """Linear interpolation toward other (t clamped to 0.0-1.0)"""
        t = max(0.0, min(1.0, t))
        return XYPoint(
            self.x + (other.x - self.x) * t,
            self.y + (other.y - self.y) * t,
        )

    def __repr__(self) -> str:
        return f"XYPoint({self.x:.4f}, {self.y:.4f})"


WHITE_POINT = XYPoint(0.3227, 0.329)
