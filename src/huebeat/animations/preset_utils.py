"""
Shared helpers for procedural animation presets

Clamping, palette fallbacks, gradient padding and the seeded RNG. Every
helper is total: bad input degrades to a default instead of raising.
"""

import math
from typing import Callable, Iterable, List, Optional, Sequence

from huebeat.models.color import WHITE_POINT, XYPoint
from huebeat.models.light import MAX_GRADIENT_STOPS, MIN_GRADIENT_STOPS
from huebeat.models.light_state import LightState

DEFAULT_PALETTE = (
    XYPoint(0.6915, 0.3083),   # red
    XYPoint(0.17, 0.7),        # green
    XYPoint(0.1532, 0.0475),   # blue
)

DEFAULT_SEED = 1337
_PM_MODULUS = 2147483647
_PM_MULTIPLIER = 16807


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp(value: Optional[float], lo: float, hi: float, default: Optional[float] = None) -> float:
    """
    Clamp to [lo, hi]

    None uses default (when given); non-finite values fall to lo.
    """
    if value is None:
        value = default if default is not None else lo
    if not math.isfinite(value):
        return lo
    return min(hi, max(lo, value))


def clamp_int(value: Optional[float], lo: int, hi: int, default: Optional[float] = None) -> int:
    """Round half up, then clamp; non-finite values fall to lo"""
    if value is None:
        value = default if default is not None else lo
    if not math.isfinite(value):
        return lo
    return min(hi, max(lo, round_half_up(value)))


def valid_points(points: Optional[Iterable]) -> List[XYPoint]:
    """Keep only XYPoint entries (anything else is silently skipped)"""
    return [p for p in (points or ()) if isinstance(p, XYPoint)]


def ensure_palette(palette: Optional[Sequence[XYPoint]], base: LightState, min_length: int) -> List[XYPoint]:
    """
    Resolve a usable palette.

    Fallback chain:
      1. valid params palette (first 5) if it has at least min_length colors
      2. the base state's gradient (first 5) if long enough
      3. [effect_color, white] if the base state has an effect color
      4. the default red/green/blue palette
    """
    candidates = valid_points(palette)
    if len(candidates) >= min_length:
        return candidates[:MAX_GRADIENT_STOPS]

    gradient = base.gradient
    if gradient and len(gradient) >= min_length:
        return list(gradient[:MAX_GRADIENT_STOPS])

    if base.effect_color is not None:
        return [base.effect_color, WHITE_POINT]

    return list(DEFAULT_PALETTE[:max(min_length, MIN_GRADIENT_STOPS)])


def normalize_gradient(gradient: Optional[Sequence[XYPoint]]) -> List[XYPoint]:
    return valid_points(gradient)[:MAX_GRADIENT_STOPS]


def pad_gradient(gradient: Sequence[XYPoint], length: int) -> List[XYPoint]:
    """Pad with the last point (white when empty), or truncate, to length"""
    if not gradient:
        return [WHITE_POINT] * length
    result = list(gradient[:length])
    while len(result) < length:
        result.append(gradient[-1])
    return result


def palette_to_gradient(palette: Sequence[XYPoint], minimum_stops: int) -> List[XYPoint]:
    """Cycle the palette until it has at least minimum_stops points"""
    result = list(palette)
    while len(result) < minimum_stops:
        result.append(palette[len(result) % len(palette)] if palette else WHITE_POINT)
    return result[:MAX_GRADIENT_STOPS]


def seeded_random(seed: Optional[float]) -> Callable[[], float]:
    """
    Park-Miller minimal standard generator.

    Returns a function yielding floats in [0, 1); the same seed always
    yields the same sequence.
    """
    if seed is None or not math.isfinite(seed):
        seed = DEFAULT_SEED
    state = int(math.floor(seed)) % _PM_MODULUS
    if state <= 0:
        state += _PM_MODULUS - 1

    def next_value() -> float:
        nonlocal state
        state = (state * _PM_MULTIPLIER) % _PM_MODULUS
        return (state - 1) / (_PM_MODULUS - 1)

    return next_value


def jitter(rng: Callable[[], float], amount: float) -> float:
    """Random factor around 1.0 (+/- amount), never below 0.1"""
    if amount <= 0:
        return 1.0
    deviation = (rng() * 2 - 1) * amount
    return max(0.1, 1 + deviation)
