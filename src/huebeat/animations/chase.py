"""
Chase preset - sweeps a 2-5 color palette across a gradient light.

Step i shows gradient stop j = palette[(j + i) % len(palette)], so each step
shifts the palette one stop along the strip.
"""

from typing import List

from huebeat.animations.preset_utils import clamp, clamp_int, ensure_palette
from huebeat.models.animation import MAX_PRESET_STEPS, ChaseParams, Step
from huebeat.models.enums import GradientMode
from huebeat.models.light import MAX_GRADIENT_STOPS, MIN_GRADIENT_STOPS
from huebeat.models.light_state import LightState, LightStateOverride


def build_chase_steps(params: ChaseParams, base: LightState, version: int = 1) -> List[Step]:
    """
    Args:
        params: palette, beats_per_step (0.0625-16, default 0.5),
                stop_count (2-5, default palette size + 1),
                step_count (2-32, default max(stop_count, 3)), gradient_mode
        base: Target state the animation starts from
        version: Preset revision (part of step ids)

    Returns:
        step_count beat-relative steps
    """
    palette = ensure_palette(params.palette, base, 2)
    beats_per_step = clamp(params.beats_per_step, 0.0625, 16, default=0.5)
    stop_count = clamp_int(
        params.stop_count,
        MIN_GRADIENT_STOPS,
        MAX_GRADIENT_STOPS,
        default=min(MAX_GRADIENT_STOPS, max(len(palette) + 1, MIN_GRADIENT_STOPS)),
    )
    step_count = clamp_int(params.step_count, 2, MAX_PRESET_STEPS, default=max(stop_count, 3))
    gradient_mode = params.gradient_mode or base.gradient_mode or GradientMode.SEGMENTED_PALETTE

    steps = []
    for i in range(step_count):
        gradient = tuple(palette[(j + i) % len(palette)] for j in range(stop_count))
        steps.append(Step(
            id=f"preset-chase-{version}-{i}",
            label=f"Chase {i + 1}",
            duration_beats=beats_per_step,
            override=LightStateOverride(on=True, gradient=gradient, gradient_mode=gradient_mode),
        ))
    return steps
