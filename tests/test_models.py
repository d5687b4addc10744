"""
Tests for the frozen domain models: light state merging, actions,
context versioning and small value types.
"""

import pytest

from huebeat.models.animation import Step
from huebeat.models.color import XYPoint
from huebeat.models.context import Context
from huebeat.models.enums import BeatDivision, BrightnessMode, MidiEventKind
from huebeat.models.frame import LightStateFrame
from huebeat.models.light import LightInfo
from huebeat.models.light_state import OFF, LightState, LightStateOverride
from huebeat.models.mapping import (
    BrightnessAction,
    CCTrigger,
    ColorAction,
    GradientAction,
    LightTarget,
    MappingRule,
    NoteTrigger,
    RuleSet,
    ToggleAction,
    action_override,
)
from huebeat.models.midi import MidiEvent
from huebeat.models.scene import SceneTransition


class TestLightState:

    def test_override_wins_and_omitted_fields_retain(self):
        state = LightState(on=True, brightness=100, hue=2000, saturation=50, effect="candle")
        merged = state.merge(LightStateOverride(brightness=200, hue=4000))

        assert merged.brightness == 200
        assert merged.hue == 4000
        assert merged.on is True
        assert merged.saturation == 50
        assert merged.effect == "candle"

    def test_merge_none_or_empty_returns_same_state(self):
        state = LightState(on=True)
        assert state.merge(None) is state
        assert state.merge(LightStateOverride()) is state

    def test_override_normalizes_channels(self):
        o = LightStateOverride(brightness=300, saturation=-5, hue=70000)
        assert o.brightness == 254
        assert o.saturation == 0
        assert o.hue == 70000 % 65536

    def test_with_channels_rounds_and_wraps(self):
        state = LightState().with_channels(100.6, 65536.4, 300)
        assert state.brightness == 101
        assert state.hue == 0
        assert state.saturation == 254

    def test_overrides_combine(self):
        a = LightStateOverride(on=True, brightness=10)
        b = LightStateOverride(brightness=20, hue=5)
        combined = a.merged_with(b)
        assert (combined.on, combined.brightness, combined.hue) == (True, 20, 5)

    def test_to_dict_omits_unset_fields(self):
        data = LightState(on=True, brightness=10, gradient=(XYPoint(0.1, 0.2),)).to_dict()
        assert "effect" not in data
        assert data["gradient"] == [{"x": 0.1, "y": 0.2}]


class TestActions:

    def test_velocity_zero_is_off_for_every_action(self):
        for action in (ColorAction(hue=100), BrightnessAction(), ToggleAction()):
            assert action_override(action, 0) == OFF

    def test_color_action_velocity_brightness(self):
        o = action_override(ColorAction(hue=100, saturation=200), 127)
        assert (o.on, o.hue, o.saturation, o.brightness) == (True, 100, 200, 254)

    def test_fixed_brightness_ignores_velocity(self):
        o = action_override(BrightnessAction(BrightnessMode.FIXED, fixed_brightness=42), 10)
        assert o.brightness == 42

    def test_gradient_action(self):
        colors = (XYPoint(0.6, 0.3), XYPoint(0.2, 0.7))
        o = action_override(GradientAction(colors=colors, fixed_brightness=150), 90)
        assert o.gradient == colors
        assert o.brightness == 150


class TestTriggersAndRules:

    def test_cc_value_matching(self):
        assert CCTrigger(0, 69, value=2).matches_value(2)
        assert not CCTrigger(0, 69, value=2).matches_value(3)
        assert CCTrigger(0, 1, value_min=10, value_max=20).matches_value(10)
        assert not CCTrigger(0, 1, value_min=10, value_max=20).matches_value(21)
        assert CCTrigger(0, 1, value_min=100).matches_value(127)
        assert CCTrigger(0, 1).is_any_value

    def test_rule_set_replaced_bumps_version(self):
        rule = MappingRule("r", NoteTrigger(0, 36), LightTarget("floor"), action=ToggleAction())
        rules = RuleSet()
        updated = rules.replaced([rule])
        assert updated.version == rules.version + 1
        assert len(updated) == 1
        assert list(updated) == [rule]
        assert len(rules) == 0


class TestContext:

    def test_preset_change_records_and_versions(self):
        ctx = Context().with_preset(5)
        assert ctx.current_preset == 5
        assert ctx.encountered_presets == frozenset({5})
        assert ctx.version == 1

        ctx = ctx.with_preset(3)
        assert ctx.sorted_presets() == [3, 5]
        assert ctx.version == 2

    def test_unchanged_values_return_same_object(self):
        ctx = Context().with_preset(5).with_snapshot(1)
        assert ctx.with_preset(5) is ctx
        assert ctx.with_snapshot(1) is ctx


class TestSmallTypes:

    def test_beat_division_lengths(self):
        assert BeatDivision.WHOLE.beats == 1.0
        assert BeatDivision.HALF.beats == 0.5
        assert BeatDivision.SIXTEENTH.beats == 0.0625

    def test_step_duration_resolution(self):
        assert Step().resolve_ms(120) == 500
        assert Step(duration_beats=2).resolve_ms(60) == 2000
        assert Step(duration_ms=5).resolve_ms(120) == 10
        assert Step(duration_beats=1000).resolve_ms(10) == 60000
        assert Step(duration_ms=300).resolve_ms(999) == 300

    def test_step_rejects_both_durations(self):
        with pytest.raises(ValueError):
            Step(duration_beats=1, duration_ms=100)

    def test_scene_transition_time_units(self):
        assert SceneTransition(duration_ms=800).transition_time == 8
        assert SceneTransition().transition_time is None

    def test_light_info_clamps_gradient_stops(self):
        assert LightInfo("a", max_gradient_stops=9).max_gradient_stops == 5
        assert LightInfo("a", max_gradient_stops=0).max_gradient_stops == 2

    def test_midi_event_checks(self):
        assert MidiEvent.note_on(0, 36, 0).is_note_off
        assert MidiEvent.note_off(0, 36).is_note_off
        assert not MidiEvent.note_on(0, 36, 1).is_note_off
        assert not MidiEvent(MidiEventKind.NOTE_ON, 16, 36, 100).is_well_formed()
        assert MidiEvent.clock(0.0).is_well_formed()

    def test_frame_dict(self):
        frame = LightStateFrame("floor", LightState(on=True, brightness=10, saturation=254), tick=3)
        data = frame.to_dict()
        assert data["target_id"] == "floor"
        assert data["tick"] == 3
        assert set(data["xy"]) == {"x", "y"}
