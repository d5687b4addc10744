"""
Performance Service - MIDI event in, engine state changes out

Orchestrates one MidiEvent end to end:
    clock / transport  → TempoTracker (+ beat grid reset)
    program change     → Context (preset)
    CC                 → debounce, Context (snapshot), then rule matching
    note-off           → activity notification only
    note-on / CC       → TriggerResolver → light or scene application

All state mutation for an event happens synchronously before the first
await; notifications are published afterwards. A scheduler tick therefore
never observes a half-applied event.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from huebeat.animations.generator import AnimationGenerator, clip_override_for_light
from huebeat.engine.frame_scheduler import FrameScheduler
from huebeat.engine.tempo_tracker import TempoTracker
from huebeat.engine.trigger_resolver import TriggerResolver
from huebeat.models.animation import AnimationSpec
from huebeat.models.config import EngineConfig
from huebeat.models.context import Context
from huebeat.models.enums import LogCategory, MidiEventKind, RetriggerMode, SpringPreset, TargetType, TempoSource
from huebeat.models.events import (
    AnimationStartedEvent,
    AnimationStoppedEvent,
    Event,
    InputDroppedEvent,
    MappingTriggeredEvent,
    NoteReleasedEvent,
    PresetChangedEvent,
    SnapshotChangedEvent,
    TempoChangedEvent,
)
from huebeat.models.light import LightInfo
from huebeat.models.light_state import OFF, LightStateOverride
from huebeat.models.mapping import MappingRule, RuleSet, SceneTarget, action_override
from huebeat.models.midi import MidiEvent
from huebeat.models.scene import Scene
from huebeat.services.event_bus import EventBus
from huebeat.utils.logger import get_logger

log = get_logger().for_category(LogCategory.MIDI)


class PerformanceService:
    """
    Single owner of the live Context and rule set.

    Example:
        service = PerformanceService(scheduler, tempo, TriggerResolver(), AnimationGenerator(), bus)
        service.set_lights(lights)
        service.set_rules(rules)
        await service.handle_midi(MidiEvent.note_on(0, 36, 100, timestamp=now))
    """

    def __init__(
        self,
        scheduler: FrameScheduler,
        tempo: TempoTracker,
        resolver: TriggerResolver,
        generator: AnimationGenerator,
        event_bus: EventBus,
        config: Optional[EngineConfig] = None,
    ):
        self.scheduler = scheduler
        self.tempo = tempo
        self.resolver = resolver
        self.generator = generator
        self.event_bus = event_bus
        self.config = config or EngineConfig()

        self.context = Context()
        self.rules = RuleSet()
        self.scenes: Dict[str, Scene] = {}
        self.lights: Dict[str, LightInfo] = {}

        self._last_cc: Dict[Tuple[int, int], Tuple[int, float]] = {}
        self._tempo_notified_at: Optional[float] = None
        self._tempo_published: Optional[Tuple[float, TempoSource, bool]] = None

        self.events_handled = 0
        self.events_dropped = 0
        self.rules_triggered = 0

        scheduler.add_tick_listener(self.poll_tempo)

    # ============================================================
    # Definitions
    # ============================================================

    def set_rules(self, rules: Iterable[MappingRule]) -> RuleSet:
        """Replace the rule set wholesale (version bumped)"""
        self.rules = self.rules.replaced(rules)
        log.info("Rule set replaced", rules=len(self.rules), version=self.rules.version)
        return self.rules

    def set_scenes(self, scenes: Iterable[Scene]) -> None:
        self.scenes = {scene.id: scene for scene in scenes}
        log.info("Scenes loaded", scenes=len(self.scenes))

    def set_lights(self, lights: Iterable[LightInfo]) -> None:
        """Replace light metadata; every light becomes a scheduler target"""
        self.lights = {light.id: light for light in lights}
        for light_id in self.lights:
            self.scheduler.register_target(light_id)
        log.info("Lights loaded", lights=len(self.lights))

    # ============================================================
    # MIDI entry point
    # ============================================================

    async def handle_midi(self, event: MidiEvent) -> Optional[MappingRule]:
        """
        Process one MIDI event.

        Returns:
            The rule that fired, or None
        """
        pending: List[Event] = []
        rule = self._process(event, pending)
        await self._publish(pending)
        return rule

    def _process(self, event: MidiEvent, pending: List[Event]) -> Optional[MappingRule]:
        self.events_handled += 1

        if not event.is_well_formed():
            self._drop("malformed event", pending, midi=event)
            return None

        kind = event.kind
        if kind is MidiEventKind.CLOCK:
            if self.tempo.on_clock_pulse(event.timestamp):
                self._notify_tempo(event.timestamp, pending)
            return None

        if kind in (MidiEventKind.START, MidiEventKind.CONTINUE):
            self.tempo.reset()
            self.scheduler.reset_beat_position()
            log.info("Transport started", kind=kind.name)
            return None

        if kind is MidiEventKind.STOP:
            self.tempo.stop()
            self._notify_tempo(event.timestamp, pending, force=True)
            return None

        if kind is MidiEventKind.PROGRAM_CHANGE:
            self._update_context(event, pending)
            return None

        if kind is MidiEventKind.CONTROL_CHANGE:
            if self._is_debounced(event):
                log.debug("CC debounced", cc=event.number, value=event.value)
                return None
            self._update_context(event, pending)

        if event.is_note_off:
            pending.append(NoteReleasedEvent(event))
            return None

        rule = self.resolver.resolve(event, self.context, self.rules)
        if rule is None:
            log.debug("No rule for event", event=repr(event))
            return None

        velocity = self.resolver.trigger_velocity(rule, event)
        affected = self._apply_rule(rule, velocity, event, pending)
        if affected is None:
            return None

        self.rules_triggered += 1
        pending.append(MappingTriggeredEvent(rule.id, rule.target.id, velocity, event, affected))
        return rule

    # ============================================================
    # Context / tempo
    # ============================================================

    def _update_context(self, event: MidiEvent, pending: List[Event]) -> None:
        before = self.context
        after = self.resolver.apply_context(event, before)
        if after is before:
            return
        self.context = after

        if after.current_preset != before.current_preset or after.encountered_presets != before.encountered_presets:
            log.info("Preset changed", preset=after.current_preset, encountered=after.sorted_presets())
            pending.append(PresetChangedEvent(before.current_preset, after.current_preset, after.sorted_presets()))
        if after.current_snapshot != before.current_snapshot:
            log.info("Snapshot changed", snapshot=after.current_snapshot)
            pending.append(SnapshotChangedEvent(before.current_snapshot, after.current_snapshot))

    def _is_debounced(self, event: MidiEvent) -> bool:
        key = (event.channel, event.number)
        previous = self._last_cc.get(key)
        self._last_cc[key] = (event.value, event.timestamp)
        if previous is None:
            return False
        value, at = previous
        return value == event.value and 0 <= event.timestamp - at < self.config.cc_debounce_ms

    def _notify_tempo(self, now: float, pending: List[Event], force: bool = False, changed_only: bool = False) -> None:
        state = self.tempo.state(now)
        key = (state.bpm, state.source, state.stale)
        if changed_only and key == self._tempo_published:
            return
        last = self._tempo_notified_at
        if not force and last is not None and now - last < self.config.tempo_notify_interval_ms:
            return
        self._tempo_notified_at = now
        self._tempo_published = key
        pending.append(TempoChangedEvent(state.bpm, state.source, state.stale))

    async def poll_tempo(self, now: Optional[float] = None) -> bool:
        """
        Publish the tempo state if it differs from the last one announced.

        Runs once per scheduler tick. Covers what clock pulses alone cannot:
        the clock going silent (fallback to the default tempo) and an
        estimate that changed inside the notify throttle window.

        Returns:
            True if a TempoChangedEvent was published
        """
        now = self.scheduler.clock() if now is None else now
        pending: List[Event] = []
        self._notify_tempo(now, pending, changed_only=True)
        if pending:
            state = pending[0]
            log.debug("Tempo state announced", bpm=round(state.bpm, 2), source=state.tempo_source.name, stale=state.stale)
        await self._publish(pending)
        return bool(pending)

    async def set_manual_tempo(self, bpm: float, now: Optional[float] = None) -> bool:
        now = self.scheduler.clock() if now is None else now
        if not self.tempo.set_manual(bpm, now):
            return False
        pending: List[Event] = []
        self._notify_tempo(now, pending, force=True)
        await self._publish(pending)
        return True

    async def clear_manual_tempo(self, now: Optional[float] = None) -> None:
        now = self.scheduler.clock() if now is None else now
        self.tempo.clear_manual()
        pending: List[Event] = []
        self._notify_tempo(now, pending, force=True)
        await self._publish(pending)

    # ============================================================
    # Rule application
    # ============================================================

    def _apply_rule(self, rule: MappingRule, velocity: int, event: MidiEvent, pending: List[Event]) -> Optional[List[str]]:
        """
        Returns:
            Affected target ids, or None when the rule was dropped
        """
        if isinstance(rule.target, SceneTarget):
            scene = self.scenes.get(rule.target.scene_id)
            if scene is None:
                self._drop("unknown scene", pending, midi=event, rule_id=rule.id, target=rule.target.id)
                return None
            return self._apply_scene(scene, velocity, rule, pending)

        light = self.lights.get(rule.target.light_id)
        if light is None:
            self._drop("unknown light", pending, midi=event, rule_id=rule.id, target=rule.target.id)
            return None

        override = action_override(rule.action, velocity) if rule.action is not None else None
        if velocity <= 0:
            override = OFF
        self._apply_light(
            light,
            override,
            rule.animation if velocity > 0 else None,
            rule.transition,
            rule.id,
            rule.retrigger,
            pending,
        )
        return [light.id]

    def _apply_light(
        self,
        light: LightInfo,
        override: Optional[LightStateOverride],
        animation: Optional[AnimationSpec],
        spring: SpringPreset,
        mapping_id: Optional[str],
        retrigger: RetriggerMode,
        pending: List[Event],
    ) -> None:
        running = self.scheduler.get_instance(light.id)

        if animation is None:
            if override is None:
                log.warn("Rule has neither action nor animation", rule=mapping_id)
                return
            self.scheduler.apply_state(light.id, clip_override_for_light(override, light), spring)
            if running is not None:
                pending.append(AnimationStoppedEvent(light.id, "replaced by state"))
            return

        if (
            running is not None
            and retrigger is RetriggerMode.CONTINUE
            and mapping_id is not None
            and running.mapping_id == mapping_id
        ):
            log.debug("Animation already running, continuing", target=light.id, rule=mapping_id)
            return

        current = running.base_state if running is not None else self.scheduler.current_state(light.id)
        instance = self.generator.generate(
            light.id,
            animation,
            current,
            action=override,
            light=light,
            mapping_id=mapping_id,
            spring=spring,
        )
        self.scheduler.start_instance(instance)
        pending.append(AnimationStartedEvent(light.id, mapping_id, len(instance.steps)))

    def _apply_scene(self, scene: Scene, velocity: int, rule: Optional[MappingRule], pending: List[Event]) -> List[str]:
        transition_time = scene.transition.transition_time
        spring = rule.transition if rule is not None else SpringPreset.NONE
        mapping_id = rule.id if rule is not None else None
        affected = []

        for scene_light in scene.lights:
            light = self.lights.get(scene_light.target_id)
            if scene_light.target_type is TargetType.GROUPED_LIGHT or (
                light is not None and light.target_type is TargetType.GROUPED_LIGHT
            ):
                log.warn("Skipping grouped light in scene", scene=scene.id, target=scene_light.target_id)
                continue
            if light is None:
                log.warn("Scene references unknown light", scene=scene.id, target=scene_light.target_id)
                continue

            if velocity <= 0:
                self._apply_light(light, OFF, None, spring, mapping_id, RetriggerMode.RESTART, pending)
            else:
                override = scene_light.state
                if transition_time is not None and override.transition_time is None:
                    override = override.with_changes(transition_time=transition_time)
                self._apply_light(
                    light,
                    override,
                    scene_light.animation,
                    spring,
                    mapping_id,
                    RetriggerMode.RESTART,
                    pending,
                )
            affected.append(light.id)

        log.info("Scene applied", scene=scene.id, lights=len(affected), off=velocity <= 0)
        return affected

    async def activate_scene(self, scene_id: str, velocity: int = 127) -> List[str]:
        """Apply a scene directly (outside any mapping rule)"""
        pending: List[Event] = []
        scene = self.scenes.get(scene_id)
        if scene is None:
            self._drop("unknown scene", pending, target=scene_id)
            await self._publish(pending)
            return []
        affected = self._apply_scene(scene, velocity, None, pending)
        await self._publish(pending)
        return affected

    # ============================================================
    # Stopping
    # ============================================================

    async def stop_target(self, target_id: str) -> bool:
        """Stop a target's animation, holding its current frame"""
        stopped = self.scheduler.stop_animation(target_id)
        if stopped:
            await self._publish([AnimationStoppedEvent(target_id, "stopped")])
        return stopped

    async def stop_all(self) -> List[str]:
        stopped = self.scheduler.stop_all()
        await self._publish([AnimationStoppedEvent(t, "stopped") for t in stopped])
        if stopped:
            log.info("All animations stopped", targets=len(stopped))
        return stopped

    # ============================================================
    # Internals
    # ============================================================

    def _drop(self, reason: str, pending: List[Event], midi: Optional[MidiEvent] = None, rule_id: Optional[str] = None, **details) -> None:
        self.events_dropped += 1
        log.warn(f"Input dropped: {reason}", rule=rule_id, midi=repr(midi) if midi else None, **details)
        pending.append(InputDroppedEvent(reason, midi=midi, rule_id=rule_id))

    async def _publish(self, events: List[Event]) -> None:
        for event in events:
            await self.event_bus.publish(event)

    def get_status(self) -> Dict:
        now = self.scheduler.clock()
        tempo = self.tempo.state(now)
        return {
            "preset": self.context.current_preset,
            "snapshot": self.context.current_snapshot,
            "encountered_presets": self.context.sorted_presets(),
            "context_version": self.context.version,
            "rules": len(self.rules),
            "rules_version": self.rules.version,
            "bpm": tempo.bpm,
            "tempo_source": tempo.source.value,
            "tempo_stale": tempo.stale,
            "events_handled": self.events_handled,
            "events_dropped": self.events_dropped,
            "rules_triggered": self.rules_triggered,
        }
