"""
Transition Models

Spring tunings for the transition smoother and easing curves used by
procedural animations (gradient crossfade) and scene transitions.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from huebeat.models.enums import EasingCurve, SpringPreset


@dataclass(frozen=True)
class SpringConfig:
    """
    Physical spring parameters

    acceleration = (-stiffness * (position - target) - damping * velocity) / mass

    Attributes:
        stiffness: Pull toward target (higher = faster)
        damping: Velocity drag (higher = less overshoot)
        mass: Inertia
    """
    stiffness: float
    damping: float
    mass: float = 1.0

    def __repr__(self):
        return f"SpringConfig(k={self.stiffness}, c={self.damping}, m={self.mass})"


SPRING_PRESETS: Dict[SpringPreset, Optional[SpringConfig]] = {
    SpringPreset.NONE: None,  # Instant: applied on the next tick
    SpringPreset.BOUNCE_IN: SpringConfig(300, 20, 1),
    SpringPreset.BOUNCE_OUT: SpringConfig(200, 15, 1),
    SpringPreset.GENTLE: SpringConfig(120, 14, 1),
    SpringPreset.WOBBLY: SpringConfig(180, 12, 1),
    SpringPreset.STIFF: SpringConfig(400, 30, 1),
    SpringPreset.SLOW: SpringConfig(80, 20, 1),
    SpringPreset.SNAPPY: SpringConfig(500, 25, 1),
}

# Presets whose damping ratio keeps overshoot small
NON_BOUNCY_PRESETS = (SpringPreset.GENTLE, SpringPreset.STIFF, SpringPreset.SLOW)


def spring_config(preset: SpringPreset) -> Optional[SpringConfig]:
    return SPRING_PRESETS[preset]


# === Easing Functions ===

def ease_linear(t: float) -> float:
    """
    Linear easing (constant speed)

    Args:
        t: Progress (0.0 = start, 1.0 = end)

    Returns:
        Eased progress (0.0 to 1.0)
    """
    return t


def ease_in_quad(t: float) -> float:
    """Quadratic ease-in (slow start → fast end)"""
    return t * t


def ease_out_quad(t: float) -> float:
    """Quadratic ease-out (fast start → slow end)"""
    return 1 - (1 - t) * (1 - t)


def ease_in_out_quad(t: float) -> float:
    """Quadratic ease-in-out (slow start → fast middle → slow end)"""
    return 2 * t * t if t < 0.5 else 1 - (-2 * t + 2) ** 2 / 2


EASING_FUNCTIONS: Dict[EasingCurve, Callable[[float], float]] = {
    EasingCurve.LINEAR: ease_linear,
    EasingCurve.EASE_IN: ease_in_quad,
    EasingCurve.EASE_OUT: ease_out_quad,
    EasingCurve.EASE_IN_OUT: ease_in_out_quad,
}


def apply_easing(curve: EasingCurve, t: float) -> float:
    """Clamp t to 0.0-1.0 and apply the curve"""
    t = max(0.0, min(1.0, t))
    return EASING_FUNCTIONS[curve](t)
