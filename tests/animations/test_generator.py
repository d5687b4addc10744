"""
Tests for AnimationGenerator and capability clipping.
"""

import pytest

from huebeat.animations.generator import AnimationGenerator, clip_override_for_light
from huebeat.models.animation import (
    AnimationSpec,
    ChaseParams,
    LightningParams,
    PresetDescriptor,
    Step,
)
from huebeat.models.color import XYPoint
from huebeat.models.enums import AnimationPresetID, GradientMode, SpringPreset
from huebeat.models.light import LightInfo
from huebeat.models.light_state import LightState, LightStateOverride

RED = XYPoint(0.6915, 0.3083)
GREEN = XYPoint(0.17, 0.7)
BLUE = XYPoint(0.1532, 0.0475)

GRADIENT_LIGHT = LightInfo("stage-left", gradient=True, effects=True, max_gradient_stops=3)
PLAIN_LIGHT = LightInfo("floor")


@pytest.fixture
def generator():
    return AnimationGenerator()


class TestClipping:

    def test_gradient_truncated_to_light_stops(self):
        override = LightStateOverride(gradient=(RED, GREEN, BLUE, RED, GREEN))
        clipped = clip_override_for_light(override, GRADIENT_LIGHT)
        assert clipped.gradient == (RED, GREEN, BLUE)

    def test_single_stop_padded_to_two(self):
        clipped = clip_override_for_light(LightStateOverride(gradient=(RED,)), GRADIENT_LIGHT)
        assert clipped.gradient == (RED, RED)

    def test_plain_light_gets_first_stop_as_hue(self):
        override = LightStateOverride(gradient=(RED, BLUE), gradient_mode=GradientMode.INTERPOLATED_PALETTE)
        clipped = clip_override_for_light(override, PLAIN_LIGHT)

        hue, sat = RED.to_hsv()
        assert clipped.gradient is None
        assert clipped.gradient_mode is None
        assert (clipped.hue, clipped.saturation) == (hue, sat)

    def test_explicit_hue_kept_on_plain_light(self):
        clipped = clip_override_for_light(LightStateOverride(hue=1234, gradient=(RED, BLUE)), PLAIN_LIGHT)
        assert clipped.hue == 1234

    def test_effects_stripped_without_support(self):
        override = LightStateOverride(on=True, effect="candle", effect_speed=0.5)
        clipped = clip_override_for_light(override, PLAIN_LIGHT)
        assert clipped.effect is None
        assert clipped.effect_speed is None
        assert clipped.on is True

    def test_unchanged_override_returned_as_is(self):
        override = LightStateOverride(on=True, brightness=10)
        assert clip_override_for_light(override, PLAIN_LIGHT) is override
        assert clip_override_for_light(override, None) is override


class TestGenerate:

    def test_action_merged_into_base(self, generator):
        current = LightState(on=True, brightness=50, hue=30000, saturation=100)
        spec = AnimationSpec(steps=(Step(override=LightStateOverride(hue=0)),))

        instance = generator.generate(
            "floor", spec, current,
            action=LightStateOverride(brightness=200),
            light=PLAIN_LIGHT,
            mapping_id="r1",
            spring=SpringPreset.GENTLE,
        )

        assert instance.base_state == LightState(on=True, brightness=200, hue=30000, saturation=100)
        assert instance.step_state(0).hue == 0
        assert instance.step_index == 0
        assert instance.started is False
        assert instance.mapping_id == "r1"
        assert instance.spring is SpringPreset.GENTLE

    def test_empty_spec_holds_base(self, generator):
        instance = generator.generate("floor", AnimationSpec(), LightState(on=True))
        assert len(instance.steps) == 1
        assert instance.step_state() == LightState(on=True)

    def test_manual_steps_truncated(self, generator):
        spec = AnimationSpec(steps=tuple(Step(id=str(i)) for i in range(70)))
        instance = generator.generate("floor", spec, LightState())
        assert len(instance.steps) == 64

    def test_preset_steps_clipped_for_plain_light(self, generator):
        spec = AnimationSpec(preset=PresetDescriptor(AnimationPresetID.CHASE, ChaseParams(palette=(RED, GREEN))))
        instance = generator.generate("floor", spec, LightState(), light=PLAIN_LIGHT)

        assert all(step.override.gradient is None for step in instance.steps)
        assert instance.step_state(0).hue == RED.to_hsv()[0]
        assert instance.step_state(1).hue == GREEN.to_hsv()[0]

    def test_loop_and_sync_copied_from_spec(self, generator):
        spec = AnimationSpec(preset=PresetDescriptor(AnimationPresetID.LIGHTNING, LightningParams()), loop=False)
        instance = generator.generate("stage-left", spec, LightState(), light=GRADIENT_LIGHT)
        assert instance.loop is False
        assert instance.sync is None


class TestWithParams:

    def test_bumps_version(self):
        spec = AnimationSpec(preset=PresetDescriptor(AnimationPresetID.CHASE, ChaseParams()))
        updated = AnimationGenerator.with_params(spec, ChaseParams(beats_per_step=1))

        assert updated.preset.version == 2
        assert updated.preset.params.beats_per_step == 1
        assert updated.steps == ()

    def test_manual_spec_has_no_params(self):
        with pytest.raises(ValueError):
            AnimationGenerator.with_params(AnimationSpec(steps=(Step(),)), ChaseParams())
