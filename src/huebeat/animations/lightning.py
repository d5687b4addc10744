"""
Lightning preset - irregular bright flashes separated by randomized calm
gaps, then a settle period back at base brightness.

Randomness comes from a seeded Park-Miller generator, so the same params
always produce the same flicker.
"""

from typing import List

from huebeat.animations.preset_utils import (
    DEFAULT_SEED,
    clamp,
    clamp_int,
    ensure_palette,
    jitter,
    round_half_up,
    seeded_random,
)
from huebeat.models.animation import MAX_PRESET_STEPS, LightningParams, Step
from huebeat.models.enums import GradientMode
from huebeat.models.light_state import LightState, LightStateOverride

DEFAULT_BASE_BRIGHTNESS = 180


def reference_brightness(base: LightState) -> int:
    """Calm/settle reference: the base brightness, or the default for a never-lit light (off at 0)"""
    if base.on or base.brightness > 0:
        return base.brightness
    return DEFAULT_BASE_BRIGHTNESS


def build_lightning_steps(params: LightningParams, base: LightState, version: int = 1) -> List[Step]:
    """
    Args:
        params: palette, flash_count (1-16, default 4), flash_beats
                (1/32-2, default 1/8), calm_beats (1/32-8, default 1/4),
                randomness (0-1, default 0.35), seed (default 1337),
                settle_beats (0-16, default max(calm, 0.5)),
                brightness_scale (0.5-3, default 1.4)
        base: Target state (its brightness is the calm/settle reference)
        version: Preset revision (part of step ids)

    Returns:
        flash/calm pairs followed by an optional settle step
    """
    palette = ensure_palette(params.palette, base, 1)
    flash_count = clamp_int(params.flash_count, 1, MAX_PRESET_STEPS // 2, default=4)
    flash_beats = clamp(params.flash_beats, 0.03125, 2, default=0.125)
    calm_beats = clamp(params.calm_beats, 0.03125, 8, default=0.25)
    randomness = clamp(params.randomness, 0, 1, default=0.35)
    settle_beats = clamp(params.settle_beats, 0, 16, default=max(calm_beats, 0.5))
    brightness_scale = clamp(params.brightness_scale, 0.5, 3, default=1.4)

    base_brightness = clamp_int(reference_brightness(base), 1, 254)
    calm_brightness = clamp_int(round_half_up(base_brightness * 0.2), 1, base_brightness)
    rng = seeded_random(params.seed if params.seed is not None else DEFAULT_SEED)

    steps = []
    for i in range(flash_count):
        color = palette[i % len(palette)]
        flash_duration = flash_beats * jitter(rng, randomness)
        calm_duration = calm_beats * jitter(rng, randomness)
        brightness = clamp_int(
            round_half_up(base_brightness * brightness_scale * jitter(rng, randomness * 0.6)),
            base_brightness,
            254,
        )

        steps.append(Step(
            id=f"preset-lightning-{version}-flash-{i}",
            label=f"Flash {i + 1}",
            duration_beats=flash_duration,
            override=LightStateOverride(
                on=True,
                brightness=brightness,
                gradient=(color, color),
                gradient_mode=GradientMode.INTERPOLATED_PALETTE,
            ),
        ))
        steps.append(Step(
            id=f"preset-lightning-{version}-calm-{i}",
            label=f"Calm {i + 1}",
            duration_beats=calm_duration,
            override=LightStateOverride(on=True, brightness=calm_brightness),
        ))

    if settle_beats > 0:
        steps.append(Step(
            id=f"preset-lightning-{version}-settle",
            label="Settle",
            duration_beats=settle_beats,
            override=LightStateOverride(on=True, brightness=base_brightness),
        ))

    return steps
