"""
Tests for TargetRenderState (per-target committed/emitted bookkeeping).
"""

from dataclasses import fields

from huebeat.engine.target_render_state import TargetRenderState
from huebeat.models.enums import SpringPreset
from huebeat.models.light_state import LightState


class TestTargetRenderStateBasics:

    def test_defaults(self):
        trs = TargetRenderState(target_id="floor")

        assert trs.committed == LightState()
        assert trs.emitted is None
        assert trs.spring is SpringPreset.NONE

    def test_only_render_bookkeeping_is_kept(self):
        assert [f.name for f in fields(TargetRenderState)] == ["target_id", "committed", "emitted", "spring"]

    def test_visible_prefers_emitted(self):
        trs = TargetRenderState(target_id="floor", committed=LightState(brightness=200))
        assert trs.visible.brightness == 200

        trs.record_emitted(LightState(brightness=120))
        assert trs.visible.brightness == 120


class TestTargetRenderStateUpdates:

    def test_commit_sets_destination_only(self):
        trs = TargetRenderState(target_id="floor")
        trs.record_emitted(LightState(brightness=40))

        trs.commit(LightState(on=True, brightness=200), SpringPreset.GENTLE)

        assert trs.spring is SpringPreset.GENTLE
        assert trs.committed.brightness == 200
        assert trs.visible.brightness == 40

    def test_record_emitted_replaces_previous_frame(self):
        trs = TargetRenderState(target_id="floor")
        trs.record_emitted(LightState(brightness=1))
        trs.record_emitted(LightState(brightness=2))
        assert trs.emitted == LightState(brightness=2)

    def test_repr_mentions_target(self):
        assert "floor" in repr(TargetRenderState(target_id="floor"))
