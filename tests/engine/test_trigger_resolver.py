"""
Tests for TriggerResolver: matching, preset scope and tie-breaking.
"""

import pytest

from huebeat.engine.trigger_resolver import TriggerResolver
from huebeat.models.context import Context
from huebeat.models.mapping import CCTrigger, LightTarget, MappingRule, NoteTrigger, ToggleAction
from huebeat.models.midi import MidiEvent


def note_rule(rule_id, note=36, channel=0, preset=None):
    return MappingRule(rule_id, NoteTrigger(channel, note), LightTarget("floor"), action=ToggleAction(), preset=preset)


def cc_rule(rule_id, controller=69, preset=None, **value):
    return MappingRule(rule_id, CCTrigger(0, controller, **value), LightTarget("floor"), action=ToggleAction(), preset=preset)


@pytest.fixture
def resolver():
    return TriggerResolver(snapshot_cc=69)


class TestNoteMatching:

    def test_exact_note_and_channel(self, resolver):
        rules = [note_rule("a", note=36), note_rule("b", note=38), note_rule("c", note=36, channel=9)]
        assert resolver.resolve(MidiEvent.note_on(0, 36, 100), Context(), rules).id == "a"
        assert resolver.resolve(MidiEvent.note_on(9, 36, 100), Context(), rules).id == "c"
        assert resolver.resolve(MidiEvent.note_on(1, 36, 100), Context(), rules) is None

    def test_note_off_never_matches(self, resolver):
        rules = [note_rule("a")]
        assert resolver.resolve(MidiEvent.note_off(0, 36), Context(), rules) is None
        assert resolver.resolve(MidiEvent.note_on(0, 36, 0), Context(), rules) is None

    def test_program_change_never_matches(self, resolver):
        rules = [note_rule("a", note=5), cc_rule("b", controller=5)]
        assert resolver.resolve(MidiEvent.program_change(0, 5), Context(), rules) is None


class TestPrecedence:

    def test_last_defined_wins_at_equal_scope(self, resolver):
        rules = [note_rule("first"), note_rule("second")]
        assert resolver.resolve(MidiEvent.note_on(0, 36, 100), Context(), rules).id == "second"

    def test_preset_scoped_beats_global(self, resolver):
        rules = [note_rule("scoped", preset=5), note_rule("global")]
        event = MidiEvent.note_on(0, 36, 100)

        assert resolver.resolve(event, Context(), rules).id == "global"
        assert resolver.resolve(event, Context().with_preset(5), rules).id == "scoped"
        assert resolver.resolve(event, Context().with_preset(6), rules).id == "global"

    def test_candidates_in_definition_order(self, resolver):
        rules = [note_rule("a"), note_rule("b", note=40), note_rule("c")]
        ids = [r.id for r in resolver.candidates(MidiEvent.note_on(0, 36, 1), Context(), rules)]
        assert ids == ["a", "c"]


class TestCCMatching:

    def test_exact_range_and_any(self, resolver):
        rules = [
            cc_rule("any", controller=11),
            cc_rule("range", controller=11, value_min=100, value_max=127),
            cc_rule("exact", controller=69, value=0),
        ]
        ctx = Context()
        assert resolver.resolve(MidiEvent.control_change(0, 11, 50), ctx, rules).id == "any"
        assert resolver.resolve(MidiEvent.control_change(0, 11, 110), ctx, rules).id == "range"
        assert resolver.resolve(MidiEvent.control_change(0, 69, 0), ctx, rules).id == "exact"
        assert resolver.resolve(MidiEvent.control_change(0, 69, 1), ctx, rules) is None

    def test_trigger_velocity(self, resolver):
        exact = cc_rule("exact", value=0)
        ranged = cc_rule("range", value_min=10)
        any_value = cc_rule("any", controller=11)

        assert resolver.trigger_velocity(exact, MidiEvent.control_change(0, 69, 0)) == 127
        assert resolver.trigger_velocity(ranged, MidiEvent.control_change(0, 69, 20)) == 127
        assert resolver.trigger_velocity(any_value, MidiEvent.control_change(0, 11, 33)) == 33
        assert resolver.trigger_velocity(note_rule("n"), MidiEvent.note_on(0, 36, 77)) == 77


class TestContext:

    def test_program_change_sets_preset(self, resolver):
        ctx = resolver.apply_context(MidiEvent.program_change(0, 5), Context())
        assert ctx.current_preset == 5
        assert 5 in ctx.encountered_presets

    def test_snapshot_cc_sets_snapshot(self, resolver):
        ctx = resolver.apply_context(MidiEvent.control_change(0, 69, 2), Context())
        assert ctx.current_snapshot == 2

    def test_other_events_leave_context(self, resolver):
        ctx = Context()
        assert resolver.apply_context(MidiEvent.control_change(0, 11, 2), ctx) is ctx
        assert resolver.apply_context(MidiEvent.note_on(0, 36, 100), ctx) is ctx

    def test_snapshot_tracking_can_be_disabled(self):
        resolver = TriggerResolver(snapshot_cc=None)
        ctx = Context()
        assert resolver.apply_context(MidiEvent.control_change(0, 69, 2), ctx) is ctx
