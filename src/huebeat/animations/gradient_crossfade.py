"""
Gradient crossfade preset - blends one gradient into another over a number
of beats. Easing shapes the interpolation parameter, not wall-clock time.
"""

from typing import List

from huebeat.animations.preset_utils import (
    clamp,
    clamp_int,
    ensure_palette,
    normalize_gradient,
    pad_gradient,
    palette_to_gradient,
    round_half_up,
)
from huebeat.models.animation import MAX_PRESET_STEPS, GradientCrossfadeParams, Step
from huebeat.models.enums import GradientMode
from huebeat.models.light import MIN_GRADIENT_STOPS
from huebeat.models.light_state import LightState, LightStateOverride
from huebeat.models.transition import apply_easing


def _label(index: int, count: int) -> str:
    if index == 0:
        return "Start"
    if index == count - 1:
        return "End"
    return f"Blend {index + 1}"


def build_gradient_crossfade_steps(params: GradientCrossfadeParams, base: LightState, version: int = 1) -> List[Step]:
    """
    Args:
        params: to_gradient, from_gradient (default: base gradient, then palette),
                total_beats (0.5-128, default 8), step_subdivision
                (0.0625-total, default 0.5), easing, gradient_mode
        base: Target state the animation starts from
        version: Preset revision (part of step ids)

    Returns:
        2-32 steps of total_beats / step_count beats each
    """
    total_beats = clamp(params.total_beats, 0.5, 128, default=8)
    subdivision = clamp(params.step_subdivision, 0.0625, total_beats, default=0.5)
    gradient_mode = params.gradient_mode or base.gradient_mode or GradientMode.INTERPOLATED_PALETTE

    if params.from_gradient:
        source = params.from_gradient
    elif base.gradient:
        source = base.gradient
    else:
        source = palette_to_gradient(ensure_palette(None, base, 2), 2)

    from_gradient = normalize_gradient(source)
    to_gradient = normalize_gradient(params.to_gradient)

    stop_count = max(len(from_gradient), len(to_gradient), MIN_GRADIENT_STOPS)
    padded_from = pad_gradient(from_gradient, stop_count)
    padded_to = pad_gradient(to_gradient, stop_count)

    step_count = clamp_int(round_half_up(total_beats / subdivision), 2, MAX_PRESET_STEPS)
    beats_per_step = total_beats / step_count

    steps = []
    for i in range(step_count):
        t = apply_easing(params.easing, i / (step_count - 1))
        gradient = tuple(a.lerp(b, t) for a, b in zip(padded_from, padded_to))
        steps.append(Step(
            id=f"preset-crossfade-{version}-{i}",
            label=_label(i, step_count),
            duration_beats=beats_per_step,
            override=LightStateOverride(on=True, gradient=gradient, gradient_mode=gradient_mode),
        ))
    return steps
