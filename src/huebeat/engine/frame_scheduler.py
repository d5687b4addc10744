"""
FrameScheduler — fixed-cadence tick loop that drives every light target.

Architecture:
  - Owns the AnimationInstance per target (at most one) and a
    TargetRenderState per known target
  - One tick advances the beat position, every animation and every spring
    channel by the same dt, then composes one LightStateFrame per target
  - Frames are offered to a non-blocking LightSink; a refused frame is
    counted as dropped, never queued
  - The running loop publishes lifecycle events and awaits tick listeners
    (tempo state announcements) between ticks

tick() is synchronous and reads time from an injectable clock, so tests can
drive it deterministically. start()/stop() wrap it in an asyncio task at the
configured fps.
"""

from __future__ import annotations

import asyncio
import time
from collections import deque
from typing import Awaitable, Callable, Deque, Dict, List, Optional

from huebeat.engine.animation_instance import AnimationInstance
from huebeat.engine.spring import TransitionSmoother
from huebeat.engine.target_render_state import CHANNEL_FIELDS, TargetRenderState
from huebeat.engine.tempo_tracker import TempoTracker
from huebeat.hardware.sink_interface import LightSink
from huebeat.models.enums import LogCategory, SpringChannelID, SpringPreset
from huebeat.models.events import AnimationStoppedEvent, EventSource
from huebeat.models.frame import LightStateFrame
from huebeat.models.light_state import LightState, LightStateOverride
from huebeat.utils.logger import get_logger

log = get_logger().for_category(LogCategory.RENDER_ENGINE)

MIN_FPS = 1
MAX_FPS = 240
MAX_TICK_DT_MS = 1000.0


def monotonic_ms() -> float:
    """Default scheduler clock (milliseconds, monotonic)"""
    return time.perf_counter() * 1000.0


class FrameScheduler:
    """
    Centralized per-target frame producer.

    Manages:
    - Animation instances (start / replace / stop / natural finish)
    - Static state application (action-only triggers, scenes)
    - Absolute beat position for sync groups
    - Spring integration at the tick
    - Frame composition and sink emission
    - Performance metrics

    Example:
        scheduler = FrameScheduler(tempo, smoother, sink, fps=50)
        scheduler.apply_state("desk", LightStateOverride(on=True, brightness=200), SpringPreset.GENTLE)
        scheduler.tick()
    """

    def __init__(
        self,
        tempo: TempoTracker,
        smoother: TransitionSmoother,
        sink: Optional[LightSink] = None,
        fps: int = 50,
        clock: Optional[Callable[[], float]] = None,
        event_bus=None,
    ):
        """
        Args:
            tempo: Tempo tracker queried once per tick
            smoother: Spring channels integrated once per tick
            sink: Frame consumer (None = frames are composed but not emitted)
            fps: Tick frequency (1-240, default 50)
            clock: Millisecond clock (default perf_counter based)
            event_bus: Optional bus for animation lifecycle notifications
        """
        self.tempo = tempo
        self.smoother = smoother
        self.sink = sink
        self.fps = max(MIN_FPS, min(int(fps), MAX_FPS))
        self.clock = clock or monotonic_ms
        self.event_bus = event_bus

        self.render_states: Dict[str, TargetRenderState] = {}
        self.instances: Dict[str, AnimationInstance] = {}

        self.beat_position = 0.0
        self.tick_count = 0
        self._last_tick_at: Optional[float] = None
        self._last_bpm: Optional[float] = None
        self._finished: List[str] = []
        self._tick_listeners: List[Callable[[], Awaitable[object]]] = []

        # Runtime state
        self.running = False
        self.tick_task: Optional[asyncio.Task] = None

        # Metrics
        self.frame_times: Deque[float] = deque(maxlen=300)
        self.frames_emitted = 0
        self.dropped_frames = 0
        self.tick_errors = 0

        log.info("FrameScheduler initialized", fps=self.fps, interval_ms=round(self.interval_ms, 2))

    @property
    def interval_ms(self) -> float:
        return 1000.0 / self.fps

    def set_fps(self, fps: int) -> None:
        """Change FPS at runtime."""
        self.fps = max(MIN_FPS, min(int(fps), MAX_FPS))
        log.info(f"FrameScheduler FPS set to {self.fps}")

    # === Target registration ===

    def register_target(self, target_id: str, state: Optional[LightState] = None) -> TargetRenderState:
        """Make a target known (frames are emitted for known targets only)"""
        render_state = self.render_states.get(target_id)
        if render_state is None:
            render_state = TargetRenderState(target_id=target_id, committed=state or LightState())
            self.render_states[target_id] = render_state
            log.debug("Target registered", target=target_id)
        elif state is not None:
            render_state.commit(state)
        return render_state

    def unregister_target(self, target_id: str) -> None:
        self.instances.pop(target_id, None)
        self.smoother.cancel(target_id)
        self.render_states.pop(target_id, None)

    def current_state(self, target_id: str) -> LightState:
        """Committed (destination) state of a target; a dark default when unknown"""
        render_state = self.render_states.get(target_id)
        return render_state.committed if render_state else LightState()

    def visible_state(self, target_id: str) -> LightState:
        """State of the last emitted frame (committed before the first tick)"""
        render_state = self.render_states.get(target_id)
        return render_state.visible if render_state else LightState()

    # === Animation control ===

    def start_instance(self, instance: AnimationInstance) -> Optional[AnimationInstance]:
        """
        Install an instance, replacing any running one on the same target.

        The first step is entered on the next tick.

        Returns:
            The replaced instance, if any
        """
        self.register_target(instance.target_id)
        previous = self.instances.get(instance.target_id)
        self.instances[instance.target_id] = instance
        log.debug(
            "Animation started",
            target=instance.target_id,
            mapping=instance.mapping_id,
            steps=len(instance.steps),
            replaced=previous is not None,
        )
        return previous

    def get_instance(self, target_id: str) -> Optional[AnimationInstance]:
        return self.instances.get(target_id)

    def has_animation(self, target_id: str) -> bool:
        return target_id in self.instances

    def stop_animation(self, target_id: str) -> bool:
        """
        Stop a target's animation and hold its last emitted frame.

        In-flight springs are frozen where they are.

        Returns:
            True if an animation was running
        """
        instance = self.instances.pop(target_id, None)
        render_state = self.render_states.get(target_id)
        if render_state is not None:
            frozen = self.smoother.freeze(target_id)
            held = render_state.visible
            if frozen:
                held = held.with_channels(
                    frozen.get(SpringChannelID.BRIGHTNESS, held.brightness),
                    frozen.get(SpringChannelID.HUE, held.hue),
                    frozen.get(SpringChannelID.SATURATION, held.saturation),
                )
            render_state.commit(held, render_state.spring)

        if instance is not None:
            log.debug("Animation stopped", target=target_id, step=instance.step_index)
        return instance is not None

    def stop_all(self) -> List[str]:
        """Stop every animation; returns the affected targets"""
        targets = list(self.instances)
        for target_id in targets:
            self.stop_animation(target_id)
        return targets

    def sync_group_members(self, group_id: str) -> List[AnimationInstance]:
        return [i for i in self.instances.values() if i.sync is not None and i.sync.group_id == group_id]

    # === Static state ===

    def apply_state(
        self,
        target_id: str,
        override: LightStateOverride,
        spring: SpringPreset = SpringPreset.NONE,
        stop_animation: bool = True,
    ) -> LightState:
        """
        Merge an override onto a target's committed state.

        Non-numeric fields go live on the next frame; brightness, hue and
        saturation travel through the smoother with the given preset.

        Returns:
            New committed state
        """
        if stop_animation and target_id in self.instances:
            self.instances.pop(target_id)
            log.debug("Animation replaced by static state", target=target_id)

        render_state = self.register_target(target_id)
        state = render_state.committed.merge(override)
        self._set_target(target_id, state, spring)
        return state

    # === Beat grid ===

    def reset_beat_position(self) -> None:
        """Transport Start: beat 0 is now, sync groups restart their cycle"""
        self.beat_position = 0.0
        for instance in self.instances.values():
            instance.reset_sync()
        log.debug("Beat position reset")

    # === Core tick ===

    def tick(self) -> List[LightStateFrame]:
        """
        Advance everything by one tick and emit one frame per known target.

        Returns:
            Frames composed this tick (emitted or not)
        """
        now = self.clock()
        if self._last_tick_at is None:
            dt = self.interval_ms
        else:
            dt = min(max(0.0, now - self._last_tick_at), MAX_TICK_DT_MS)
        self._last_tick_at = now

        bpm = self.tempo.effective_bpm(now)
        if bpm != self._last_bpm:
            if self._last_bpm is not None:
                log.debug("Tempo in effect changed", bpm=round(bpm, 2))
            self._last_bpm = bpm
        self.beat_position += dt * bpm / 60000.0

        for instance in list(self.instances.values()):
            self._advance_instance(instance, dt, bpm)

        self.smoother.step(dt)

        self.tick_count += 1
        frames = []
        for render_state in self.render_states.values():
            frame = self._compose(render_state, now)
            frames.append(frame)
            self._emit(frame)

        self.frame_times.append(time.perf_counter())
        return frames

    def _advance_instance(self, instance: AnimationInstance, dt: float, bpm: float) -> None:
        if instance.sync is not None and instance.sync_anchor is None:
            instance.sync_anchor = self._group_anchor(instance)

        if not instance.started:
            instance.started = True
            if instance.sync is not None:
                instance.sync_to(self.beat_position, bpm)
            self._enter_step(instance)
            if instance.sync is not None:
                return

        if instance.sync is not None:
            changed = instance.sync_to(self.beat_position, bpm)
        else:
            changed = instance.advance(dt, bpm)

        if changed:
            self._enter_step(instance)

        if instance.finished:
            # Last step stays committed
            self.instances.pop(instance.target_id, None)
            self._finished.append(instance.target_id)
            log.debug("Animation finished", target=instance.target_id, mapping=instance.mapping_id)

    def _group_anchor(self, instance: AnimationInstance) -> Optional[float]:
        """Cycle start shared by the running members of an instance's sync group"""
        for peer in self.sync_group_members(instance.sync.group_id):
            if peer is not instance and peer.sync_anchor is not None:
                return peer.sync_anchor
        return None

    def _enter_step(self, instance: AnimationInstance) -> None:
        self._set_target(instance.target_id, instance.step_state(), instance.spring)

    def _set_target(self, target_id: str, state: LightState, spring: SpringPreset) -> None:
        render_state = self.register_target(target_id)
        previous = render_state.visible
        render_state.commit(state, spring)
        for channel, field_name in CHANNEL_FIELDS.items():
            self.smoother.set_target(
                target_id,
                channel,
                current=getattr(previous, field_name),
                value=getattr(state, field_name),
                preset=spring,
            )

    # === Composition & emission ===

    def _compose(self, render_state: TargetRenderState, now: float) -> LightStateFrame:
        target_id = render_state.target_id
        committed = render_state.committed
        state = committed.with_channels(
            self.smoother.value(target_id, SpringChannelID.BRIGHTNESS, committed.brightness),
            self.smoother.value(target_id, SpringChannelID.HUE, committed.hue),
            self.smoother.value(target_id, SpringChannelID.SATURATION, committed.saturation),
        )
        render_state.record_emitted(state)
        return LightStateFrame(target_id=target_id, state=state, tick=self.tick_count, timestamp=now)

    def _emit(self, frame: LightStateFrame) -> None:
        if self.sink is None:
            return
        try:
            accepted = self.sink.offer(frame)
        except Exception as e:
            log.error(f"Sink error for {frame.target_id}", exception=e)
            accepted = False

        if accepted:
            self.frames_emitted += 1
        else:
            self.dropped_frames += 1

    # === Lifecycle ===

    async def start(self) -> None:
        """Start the tick loop."""
        if self.running:
            log.warn("FrameScheduler already running")
            return

        self.running = True
        self.tick_task = asyncio.create_task(self._tick_loop())
        log.info(f"FrameScheduler tick loop started @ {self.fps} FPS")

    async def stop(self) -> None:
        """Stop the tick loop."""
        if not self.running:
            return
        self.running = False
        if self.tick_task:
            self.tick_task.cancel()
            try:
                await self.tick_task
            except asyncio.CancelledError:
                pass

        log.info(
            "FrameScheduler stopped",
            ticks=self.tick_count,
            frames_emitted=self.frames_emitted,
            dropped_frames=self.dropped_frames,
        )

    async def _tick_loop(self) -> None:
        """Main tick loop @ target FPS."""
        while self.running:
            started = time.perf_counter()
            try:
                self.tick()
            except Exception as e:
                self.tick_errors += 1
                log.error("Tick error", exception=e)

            await self._publish_finished()
            await self._notify_tick_listeners()

            elapsed = time.perf_counter() - started
            await asyncio.sleep(max(0.0, self.interval_ms / 1000.0 - elapsed))

    def add_tick_listener(self, listener: Callable[[], Awaitable[object]]) -> None:
        """Await listener() after every tick of the running loop"""
        self._tick_listeners.append(listener)

    async def _notify_tick_listeners(self) -> None:
        for listener in self._tick_listeners:
            try:
                await listener()
            except Exception as e:
                log.error("Tick listener error", exception=e)

    async def _publish_finished(self) -> None:
        if not self._finished:
            return
        finished, self._finished = self._finished, []
        if self.event_bus is None:
            return
        for target_id in finished:
            await self.event_bus.publish(
                AnimationStoppedEvent(target_id, "finished", source=EventSource.FRAME_SCHEDULER)
            )

    # === Metrics ===

    def get_actual_fps(self) -> float:
        """Get measured FPS over recent ticks."""
        if len(self.frame_times) < 2:
            return 0.0
        duration = self.frame_times[-1] - self.frame_times[0]
        if duration <= 0:
            return 0.0
        return (len(self.frame_times) - 1) / duration

    def get_metrics(self) -> Dict:
        """Get performance metrics."""
        return {
            "fps_target": self.fps,
            "fps_actual": self.get_actual_fps(),
            "ticks": self.tick_count,
            "frames_emitted": self.frames_emitted,
            "dropped_frames": self.dropped_frames,
            "tick_errors": self.tick_errors,
            "targets": len(self.render_states),
            "active_animations": len(self.instances),
            "active_springs": self.smoother.active_count,
            "beat_position": self.beat_position,
            "bpm": self._last_bpm,
        }

    def __repr__(self) -> str:
        metrics = self.get_metrics()
        return (
            f"FrameScheduler(fps={metrics['fps_actual']:.1f}/{metrics['fps_target']}, "
            f"ticks={metrics['ticks']}, "
            f"emitted={metrics['frames_emitted']}, "
            f"dropped={metrics['dropped_frames']})"
        )
