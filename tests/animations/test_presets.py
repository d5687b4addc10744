"""
Tests for the procedural animation presets and their registry.
"""

import pytest

from huebeat.animations.chase import build_chase_steps
from huebeat.animations.gradient_crossfade import build_gradient_crossfade_steps
from huebeat.animations.lightning import build_lightning_steps
from huebeat.animations.preset_utils import DEFAULT_PALETTE, ensure_palette, pad_gradient, seeded_random
from huebeat.animations.registry import PRESET_GENERATORS, generate_preset_steps
from huebeat.models.animation import (
    ChaseParams,
    GradientCrossfadeParams,
    LightningParams,
    PresetDescriptor,
)
from huebeat.models.color import WHITE_POINT, XYPoint
from huebeat.models.enums import AnimationPresetID, EasingCurve, GradientMode
from huebeat.models.light_state import LightState

RED = XYPoint(0.6915, 0.3083)
GREEN = XYPoint(0.17, 0.7)
BLUE = XYPoint(0.1532, 0.0475)


class TestChase:

    def test_palette_shifts_one_stop_per_step(self):
        steps = build_chase_steps(ChaseParams(palette=(RED, GREEN, BLUE)), LightState())

        # stop_count defaults to palette size + 1, step_count to max(stop_count, 3)
        assert len(steps) == 4
        assert steps[0].override.gradient == (RED, GREEN, BLUE, RED)
        assert steps[1].override.gradient == (GREEN, BLUE, RED, GREEN)
        assert all(s.duration_beats == 0.5 for s in steps)
        assert steps[0].override.gradient_mode is GradientMode.SEGMENTED_PALETTE

    def test_params_are_clamped(self):
        steps = build_chase_steps(
            ChaseParams(palette=(RED, GREEN), beats_per_step=100, stop_count=9, step_count=1000),
            LightState(),
        )
        assert len(steps) == 32
        assert steps[0].duration_beats == 16
        assert len(steps[0].override.gradient) == 5

    def test_falls_back_to_default_palette(self):
        steps = build_chase_steps(ChaseParams(), LightState())
        colors = set(steps[0].override.gradient)
        assert colors <= set(DEFAULT_PALETTE)

    def test_falls_back_to_effect_color(self):
        base = LightState(effect_color=BLUE)
        steps = build_chase_steps(ChaseParams(), base)
        assert set(steps[0].override.gradient) == {BLUE, WHITE_POINT}

    def test_step_ids_carry_version(self):
        steps = build_chase_steps(ChaseParams(palette=(RED, GREEN)), LightState(), version=3)
        assert steps[0].id == "preset-chase-3-0"


class TestGradientCrossfade:

    def test_runs_from_source_to_destination(self):
        params = GradientCrossfadeParams(from_gradient=(RED, RED), to_gradient=(BLUE, BLUE), total_beats=8)
        steps = build_gradient_crossfade_steps(params, LightState())

        assert len(steps) == 16
        assert sum(s.duration_beats for s in steps) == pytest.approx(8)
        assert steps[0].override.gradient == (RED, RED)
        for point in steps[-1].override.gradient:
            assert point.as_tuple() == pytest.approx(BLUE.as_tuple())
        assert steps[0].label == "Start"
        assert steps[-1].label == "End"

    def test_linear_interpolation(self):
        params = GradientCrossfadeParams(from_gradient=(RED, RED), to_gradient=(BLUE, BLUE), total_beats=2, step_subdivision=0.5)
        steps = build_gradient_crossfade_steps(params, LightState())

        assert len(steps) == 4
        assert steps[1].override.gradient[0] == RED.lerp(BLUE, 1 / 3)

    def test_easing_shapes_parameter(self):
        base = dict(from_gradient=(RED, RED), to_gradient=(BLUE, BLUE), total_beats=8)
        linear = build_gradient_crossfade_steps(GradientCrossfadeParams(**base), LightState())
        eased = build_gradient_crossfade_steps(GradientCrossfadeParams(easing=EasingCurve.EASE_IN, **base), LightState())

        # Ease-in moves less than linear early on, same end point
        linear_move = RED.x - linear[1].override.gradient[0].x
        eased_move = RED.x - eased[1].override.gradient[0].x
        assert 0 < eased_move < linear_move
        assert eased[-1].override.gradient == linear[-1].override.gradient

    def test_pads_shorter_gradient(self):
        params = GradientCrossfadeParams(from_gradient=(RED, GREEN), to_gradient=(BLUE, BLUE, BLUE))
        steps = build_gradient_crossfade_steps(params, LightState())
        assert steps[0].override.gradient == (RED, GREEN, GREEN)

    def test_source_defaults_to_base_gradient(self):
        base = LightState(gradient=(GREEN, GREEN))
        steps = build_gradient_crossfade_steps(GradientCrossfadeParams(to_gradient=(BLUE, BLUE)), base)
        assert steps[0].override.gradient == (GREEN, GREEN)


class TestLightning:

    def test_same_seed_same_flicker(self):
        params = LightningParams(flash_count=3, seed=42)
        assert build_lightning_steps(params, LightState()) == build_lightning_steps(params, LightState())

    def test_different_seed_different_flicker(self):
        a = build_lightning_steps(LightningParams(seed=1), LightState())
        b = build_lightning_steps(LightningParams(seed=2), LightState())
        assert [s.duration_beats for s in a] != [s.duration_beats for s in b]

    def test_structure_and_brightness(self):
        base = LightState(on=True, brightness=100)
        steps = build_lightning_steps(LightningParams(flash_count=3), base)

        assert len(steps) == 7
        assert [s.label for s in steps] == ["Flash 1", "Calm 1", "Flash 2", "Calm 2", "Flash 3", "Calm 3", "Settle"]
        flashes = steps[0:6:2]
        calms = steps[1:6:2]
        assert all(100 <= s.override.brightness <= 254 for s in flashes)
        assert all(s.override.brightness == 20 for s in calms)
        assert steps[-1].override.brightness == 100

    def test_dark_base_uses_default_brightness(self):
        steps = build_lightning_steps(LightningParams(), LightState())
        assert steps[-1].override.brightness == 180

    def test_lit_base_at_zero_stays_dim(self):
        steps = build_lightning_steps(LightningParams(flash_count=2), LightState(on=True, brightness=0))

        assert steps[-1].override.brightness == 1
        assert [s.override.brightness for s in steps[1:4:2]] == [1, 1]

    def test_off_base_keeps_its_brightness(self):
        steps = build_lightning_steps(LightningParams(), LightState(on=False, brightness=90))
        assert steps[-1].override.brightness == 90

    def test_zero_randomness_keeps_nominal_durations(self):
        steps = build_lightning_steps(LightningParams(flash_count=2, randomness=0, flash_beats=0.25, calm_beats=0.5), LightState())
        assert [s.duration_beats for s in steps[:4]] == [0.25, 0.5, 0.25, 0.5]

    def test_no_settle_step(self):
        steps = build_lightning_steps(LightningParams(flash_count=2, settle_beats=0), LightState())
        assert len(steps) == 4


class TestRegistry:

    def test_every_preset_has_generator(self):
        assert set(PRESET_GENERATORS) == set(AnimationPresetID)

    def test_mismatched_params_use_defaults(self):
        descriptor = PresetDescriptor(AnimationPresetID.LIGHTNING, ChaseParams())
        steps = generate_preset_steps(descriptor, LightState())
        # Default lightning: 4 flash/calm pairs plus settle
        assert len(steps) == 9

    def test_descriptor_version_reaches_step_ids(self):
        descriptor = PresetDescriptor(AnimationPresetID.CHASE, ChaseParams(palette=(RED, GREEN)), version=7)
        assert generate_preset_steps(descriptor, LightState())[0].id.startswith("preset-chase-7-")


class TestPresetUtils:

    def test_seeded_random_is_deterministic(self):
        a, b = seeded_random(99), seeded_random(99)
        assert [a() for _ in range(5)] == [b() for _ in range(5)]
        assert all(0 <= v < 1 for v in (a() for _ in range(100)))

    def test_pad_gradient(self):
        assert pad_gradient([RED], 3) == [RED, RED, RED]
        assert pad_gradient([RED, GREEN, BLUE], 2) == [RED, GREEN]
        assert pad_gradient([], 2) == [WHITE_POINT, WHITE_POINT]

    def test_ensure_palette_skips_invalid_entries(self):
        palette = ensure_palette((RED, "nope", GREEN), LightState(), 2)
        assert palette == [RED, GREEN]
