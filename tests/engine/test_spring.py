"""
Tests for the spring-based TransitionSmoother.
"""

import pytest

from huebeat.engine.spring import SpringChannel, TransitionSmoother, hue_config
from huebeat.models.enums import SpringChannelID, SpringPreset
from huebeat.models.transition import NON_BOUNCY_PRESETS, SpringConfig, spring_config

BRI = SpringChannelID.BRIGHTNESS
HUE = SpringChannelID.HUE
SAT = SpringChannelID.SATURATION
DT = 20.0

ANIMATED_PRESETS = [p for p in SpringPreset if p is not SpringPreset.NONE]

# (channel, start, end): full-range moves and the longest hue paths
WORST_CASE_MOVES = [
    (BRI, 0, 254),
    (BRI, 254, 0),
    (SAT, 0, 254),
    (HUE, 0, 32767),
    (HUE, 64000, 1000),
]


def run_until_settled(smoother: TransitionSmoother, target: str, channel: SpringChannelID, max_steps: int = 200):
    """Step until the channel is gone; returns the values seen while in flight"""
    values = []
    for _ in range(max_steps):
        value = smoother.value(target, channel)
        if value is None:
            break
        values.append(value)
        smoother.step(DT)
    return values


class TestSettlement:

    @pytest.mark.parametrize("preset", ANIMATED_PRESETS)
    @pytest.mark.parametrize("channel, start, end", WORST_CASE_MOVES)
    def test_settles_before_timeout(self, preset, channel, start, end):
        smoother = TransitionSmoother(timeout_ms=2000)
        smoother.set_target("floor", channel, current=start, value=end, preset=preset)

        values = run_until_settled(smoother, "floor", channel)

        assert not smoother.is_active("floor")
        assert smoother.forced_settles == 0
        assert len(values) * DT < 2000

    @pytest.mark.parametrize("preset", NON_BOUNCY_PRESETS)
    def test_non_bouncy_overshoot_is_bounded(self, preset):
        smoother = TransitionSmoother()
        smoother.set_target("floor", BRI, current=0, value=200, preset=preset)

        values = run_until_settled(smoother, "floor", BRI)

        assert max(values) <= 200 + 0.15 * 200

    def test_instant_preset_applies_on_next_step(self):
        smoother = TransitionSmoother()
        spring = smoother.set_target("floor", BRI, current=0, value=200, preset=SpringPreset.NONE)

        assert spring is not None
        assert spring.config is None
        settled = smoother.step(DT)
        assert settled == [("floor", BRI)]
        assert smoother.value("floor", BRI) is None

    def test_no_channel_when_already_at_target(self):
        smoother = TransitionSmoother()
        assert smoother.set_target("floor", BRI, current=120, value=120, preset=SpringPreset.GENTLE) is None
        assert smoother.active_count == 0

    def test_safety_timeout_forces_settle(self):
        smoother = TransitionSmoother(timeout_ms=500)
        spring = smoother.set_target("floor", BRI, current=0, value=200, preset=SpringPreset.GENTLE)
        spring.config = SpringConfig(stiffness=100, damping=0)  # undamped: never settles by itself

        for _ in range(25):
            smoother.step(DT)

        assert not smoother.is_active("floor")
        assert smoother.forced_settles == 1

    def test_diverging_spring_snaps_to_target(self):
        spring = SpringChannel(BRI, position=0.0, target=254.0, config=SpringConfig(stiffness=1e308, damping=0))
        assert spring.step(DT) is True
        assert spring.value == 254.0


class TestHue:

    def test_wraps_through_zero(self):
        smoother = TransitionSmoother()
        smoother.set_target("floor", HUE, current=64000, value=1000, preset=SpringPreset.GENTLE)

        values = run_until_settled(smoother, "floor", HUE)

        assert values
        assert all(v >= 63000 or v <= 3000 for v in values)
        assert any(v <= 1000 for v in values)

    def test_hue_runs_at_half_stiffness(self):
        smoother = TransitionSmoother()
        hue = smoother.set_target("floor", HUE, current=0, value=1000, preset=SpringPreset.GENTLE)
        bri = smoother.set_target("floor", BRI, current=0, value=100, preset=SpringPreset.GENTLE)
        assert hue.config.stiffness == bri.config.stiffness / 2

    @pytest.mark.parametrize("preset, stiffness", [
        (SpringPreset.STIFF, 225.0),     # half would be overdamped: critical instead
        (SpringPreset.SLOW, 80.0),       # critical exceeds the preset: preset kept
    ])
    def test_hue_stiffness_floored_at_critical_damping(self, preset, stiffness):
        hue = hue_config(spring_config(preset))
        assert hue.stiffness == stiffness
        assert hue.damping == spring_config(preset).damping


class TestRetarget:

    def test_new_target_starts_from_interpolated_value(self):
        smoother = TransitionSmoother()
        smoother.set_target("floor", BRI, current=0, value=254, preset=SpringPreset.SLOW)
        for _ in range(5):
            smoother.step(DT)
        midway = smoother.value("floor", BRI)
        assert 0 < midway < 254

        spring = smoother.set_target("floor", BRI, current=999, value=0, preset=SpringPreset.SLOW)
        assert spring.position == midway
        assert smoother.active_count == 1

    def test_freeze_returns_reached_values(self):
        smoother = TransitionSmoother()
        smoother.set_target("floor", BRI, current=0, value=254, preset=SpringPreset.SLOW)
        smoother.set_target("backline", BRI, current=0, value=254, preset=SpringPreset.SLOW)
        smoother.step(DT)
        expected = smoother.value("floor", BRI)

        frozen = smoother.freeze("floor")

        assert frozen == {BRI: expected}
        assert not smoother.is_active("floor")
        assert smoother.is_active("backline")

    def test_value_fallback_when_at_rest(self):
        smoother = TransitionSmoother()
        assert smoother.value("floor", BRI, 42) == 42
