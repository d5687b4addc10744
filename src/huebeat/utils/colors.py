"""
Color conversion utilities

Pure functions for conversions between hex, HSV and CIE xy chromaticity.
HSV values use device-native ranges so callers never rescale:

    hue:        0-65535
    saturation: 0-254
    brightness: 0-254   (HSV value channel)

xy conversions use sRGB gamma expansion and the wide-gamut D65 matrix
published for Hue bulbs. All intermediate RGB values are clamped to [0, 1]
before any gamma step so out-of-gamut coordinates never produce NaN.
"""

import math
from typing import Tuple

HUE_MAX = 65535
SAT_MAX = 254
BRI_MAX = 254

# Linear RGB -> XYZ (wide gamut, D65)
RGB_TO_XYZ = (
    (0.664511, 0.154324, 0.162028),
    (0.283881, 0.668433, 0.047685),
    (0.000088, 0.072310, 0.986039),
)


def _invert_3x3(m) -> Tuple[Tuple[float, float, float], ...]:
    (a, b, c), (d, e, f), (g, h, i) = m
    det = a * (e * i - f * h) - b * (d * i - f * g) + c * (d * h - e * g)
    return (
        ((e * i - f * h) / det, (c * h - b * i) / det, (b * f - c * e) / det),
        ((f * g - d * i) / det, (a * i - c * g) / det, (c * d - a * f) / det),
        ((d * h - e * g) / det, (b * g - a * h) / det, (a * e - b * d) / det),
    )


# Computed once so both directions agree exactly
XYZ_TO_RGB = _invert_3x3(RGB_TO_XYZ)


def _clamp01(v: float) -> float:
    if not math.isfinite(v):
        return 0.0
    return max(0.0, min(1.0, v))


def gamma_expand(c: float) -> float:
    """sRGB companded value -> linear light"""
    c = _clamp01(c)
    return ((c + 0.055) / 1.055) ** 2.4 if c > 0.04045 else c / 12.92


def gamma_compress(c: float) -> float:
    """Linear light -> sRGB companded value"""
    c = _clamp01(c)
    return 12.92 * c if c <= 0.0031308 else 1.055 * c ** (1 / 2.4) - 0.055


# === HEX / RGB ===

def hex_to_rgb(hex_color: str) -> Tuple[float, float, float]:
    """
    Parse "#rrggbb" / "rrggbb" / "#rgb" into floats 0.0-1.0

    Raises:
        ValueError: malformed hex string
    """
    s = hex_color.strip().lstrip("#")
    if len(s) == 3:
        s = "".join(ch * 2 for ch in s)
    if len(s) != 6:
        raise ValueError(f"Invalid hex color: {hex_color!r}")
    try:
        r, g, b = (int(s[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        raise ValueError(f"Invalid hex color: {hex_color!r}") from None
    return r / 255.0, g / 255.0, b / 255.0


def rgb_to_hex(r: float, g: float, b: float) -> str:
    """Floats 0.0-1.0 -> "#rrggbb" (clamped)"""
    return "#" + "".join(f"{round(_clamp01(c) * 255):02x}" for c in (r, g, b))


# === RGB / HSV (unit ranges) ===

def rgb_to_hsv(r: float, g: float, b: float) -> Tuple[float, float, float]:
    """
    Standard RGB -> HSV, all values 0.0-1.0

    Hue is 0.0 for achromatic colors.
    """
    r, g, b = _clamp01(r), _clamp01(g), _clamp01(b)
    max_c = max(r, g, b)
    min_c = min(r, g, b)
    delta = max_c - min_c

    if delta == 0:
        h = 0.0
    elif max_c == r:
        h = ((g - b) / delta) % 6
    elif max_c == g:
        h = (b - r) / delta + 2
    else:
        h = (r - g) / delta + 4
    h /= 6.0

    s = 0.0 if max_c == 0 else delta / max_c
    return h % 1.0, s, max_c


def hsv_to_rgb(h: float, s: float, v: float) -> Tuple[float, float, float]:
    """Standard HSV -> RGB, all values 0.0-1.0 (hue wraps)"""
    h = (h % 1.0) * 6.0
    s, v = _clamp01(s), _clamp01(v)
    i = int(h) % 6
    f = h - int(h)
    p = v * (1 - s)
    q = v * (1 - s * f)
    t = v * (1 - s * (1 - f))
    return [
        (v, t, p),
        (q, v, p),
        (p, v, t),
        (p, q, v),
        (t, p, v),
        (v, p, q),
    ][i]


# === HEX / device HSV ===

def hex_to_hsv(hex_color: str) -> Tuple[int, int, int]:
    """
    Convert hex to device-native HSV

    Returns:
        (hue 0-65535, saturation 0-254, brightness 0-254)

    Example:
        hex_to_hsv("#ff0000")  # (0, 254, 254)
        hex_to_hsv("#00ff00")  # (21845, 254, 254)
    """
    h, s, v = rgb_to_hsv(*hex_to_rgb(hex_color))
    return round(h * HUE_MAX), round(s * SAT_MAX), round(v * BRI_MAX)


def hsv_to_hex(hue: int, saturation: int, brightness: int = BRI_MAX) -> str:
    """Convert device-native HSV to "#rrggbb" (full brightness by default)"""
    h = (hue % (HUE_MAX + 1)) / HUE_MAX
    return rgb_to_hex(*hsv_to_rgb(h, saturation / SAT_MAX, brightness / BRI_MAX))


# === XY ===

def rgb_to_xy(r: float, g: float, b: float) -> Tuple[float, float]:
    """sRGB floats 0.0-1.0 -> CIE xy; black maps to (0, 0)"""
    lr, lg, lb = gamma_expand(r), gamma_expand(g), gamma_expand(b)
    x_, y_, z_ = (row[0] * lr + row[1] * lg + row[2] * lb for row in RGB_TO_XYZ)
    total = x_ + y_ + z_
    if total == 0:
        return 0.0, 0.0
    return x_ / total, y_ / total


def xy_to_rgb(x: float, y: float) -> Tuple[float, float, float]:
    """
    CIE xy -> sRGB floats 0.0-1.0 at the brightest in-gamut level

    Out-of-gamut chromaticities clamp negative channels to zero; the result is
    scaled so its largest linear channel is 1.0 before gamma compression.
    A degenerate y (<= 0) yields white.
    """
    if not (math.isfinite(x) and math.isfinite(y)) or y <= 0:
        return 1.0, 1.0, 1.0

    z = max(0.0, 1.0 - x - y)
    big_y = 1.0
    big_x = (big_y / y) * x
    big_z = (big_y / y) * z

    linear = [max(0.0, row[0] * big_x + row[1] * big_y + row[2] * big_z) for row in XYZ_TO_RGB]
    peak = max(linear)
    if peak <= 0:
        return 0.0, 0.0, 0.0
    r, g, b = (gamma_compress(c / peak) for c in linear)
    return r, g, b


def hsv_to_xy(hue: int, saturation: int) -> Tuple[float, float]:
    """Device-native hue/sat -> CIE xy (brightness does not affect chromaticity)"""
    h = (hue % (HUE_MAX + 1)) / HUE_MAX
    return rgb_to_xy(*hsv_to_rgb(h, saturation / SAT_MAX, 1.0))


def xy_to_hsv(x: float, y: float) -> Tuple[int, int]:
    """CIE xy -> device-native (hue, saturation)"""
    h, s, _ = rgb_to_hsv(*xy_to_rgb(x, y))
    return round(h * HUE_MAX) % (HUE_MAX + 1), round(s * SAT_MAX)


def hex_to_xy(hex_color: str) -> Tuple[float, float]:
    return rgb_to_xy(*hex_to_rgb(hex_color))


def xy_to_hex(x: float, y: float) -> str:
    return rgb_to_hex(*xy_to_rgb(x, y))


def velocity_to_brightness(velocity: int) -> int:
    """MIDI velocity (0-127) -> device brightness (0-254)"""
    velocity = max(0, min(127, int(velocity)))
    return round(velocity / 127 * BRI_MAX)


def hue_distance(a: float, b: float) -> float:
    """Signed shortest distance from hue a to hue b on the 0-65535 wheel"""
    span = HUE_MAX + 1
    return ((b - a + span / 2) % span) - span / 2

