"""
TriggerResolver — MIDI event + context snapshot → winning mapping rule.

Matching:
  1. Trigger kind and channel must match (notes vs CCs).
  2. Notes: exact note number; note-off (incl. note-on velocity 0) never matches.
  3. CCs: controller number, then exact value / value range / any value.
  4. Preset scope: scoped rules need Context.current_preset == rule.preset.
  5. Tie-break: preset-scoped beats global; equal scope → last defined wins.

Program Change updates the context (apply_context) and never triggers a
rule. The resolver holds no mutable state: callers pass the context snapshot
and rule set on every call.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from huebeat.models.context import Context
from huebeat.models.enums import LogCategory, MidiEventKind
from huebeat.models.mapping import CCTrigger, MappingRule, NoteTrigger
from huebeat.models.midi import MidiEvent
from huebeat.utils.logger import get_logger

log = get_logger().for_category(LogCategory.RESOLVER)

HELIX_SNAPSHOT_CC = 69


class TriggerResolver:
    """
    Stateless rule matcher.

    Example:
        resolver = TriggerResolver(snapshot_cc=69)
        context = resolver.apply_context(event, context)
        rule = resolver.resolve(event, context, rule_set)
    """

    def __init__(self, snapshot_cc: Optional[int] = HELIX_SNAPSHOT_CC):
        """
        Args:
            snapshot_cc: Controller number whose value selects the current
                snapshot (None disables snapshot tracking)
        """
        self.snapshot_cc = snapshot_cc

    # ============================================================
    # Context
    # ============================================================

    def apply_context(self, event: MidiEvent, context: Context) -> Context:
        """
        Return the context after this event (same object when unchanged).

        Program Change sets the current preset and records it; a CC on the
        snapshot controller sets the current snapshot.
        """
        if event.kind is MidiEventKind.PROGRAM_CHANGE:
            return context.with_preset(event.number)
        if (
            event.kind is MidiEventKind.CONTROL_CHANGE
            and self.snapshot_cc is not None
            and event.number == self.snapshot_cc
        ):
            return context.with_snapshot(event.value)
        return context

    # ============================================================
    # Matching
    # ============================================================

    def candidates(self, event: MidiEvent, context: Context, rules: Iterable[MappingRule]) -> List[MappingRule]:
        """All rules matching the event, in definition order"""
        if event.kind is MidiEventKind.NOTE_ON and not event.is_note_off:
            return [r for r in rules if self._matches_note(r, event) and self._in_scope(r, context)]
        if event.kind is MidiEventKind.CONTROL_CHANGE:
            return [r for r in rules if self._matches_cc(r, event) and self._in_scope(r, context)]
        return []

    def resolve(self, event: MidiEvent, context: Context, rules: Iterable[MappingRule]) -> Optional[MappingRule]:
        """
        Pick the single winning rule for an event.

        Returns:
            The winning rule, or None (not an error)
        """
        matches = self.candidates(event, context, rules)
        if not matches:
            return None

        winner = max(
            enumerate(matches),
            key=lambda pair: (pair[1].is_preset_scoped, pair[0]),
        )[1]

        if len(matches) > 1:
            log.debug(
                "Resolved overlapping rules",
                event=repr(event),
                candidates=[r.id for r in matches],
                winner=winner.id,
            )
        return winner

    @staticmethod
    def trigger_velocity(rule: MappingRule, event: MidiEvent) -> int:
        """
        Velocity handed to the generator.

        Notes use their velocity. CC rules with an exact value or a range act
        as switches (127); any-value CC rules pass the controller value through.
        """
        trigger = rule.trigger
        if isinstance(trigger, CCTrigger) and not trigger.is_any_value:
            return 127
        return event.value

    # ============================================================
    # Internals
    # ============================================================

    @staticmethod
    def _matches_note(rule: MappingRule, event: MidiEvent) -> bool:
        trigger = rule.trigger
        return (
            isinstance(trigger, NoteTrigger)
            and trigger.channel == event.channel
            and trigger.note == event.number
        )

    @staticmethod
    def _matches_cc(rule: MappingRule, event: MidiEvent) -> bool:
        trigger = rule.trigger
        return (
            isinstance(trigger, CCTrigger)
            and trigger.channel == event.channel
            and trigger.controller == event.number
            and trigger.matches_value(event.value)
        )

    @staticmethod
    def _in_scope(rule: MappingRule, context: Context) -> bool:
        return rule.preset is None or rule.preset == context.current_preset
