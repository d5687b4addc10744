"""
AnimationInstance — runtime execution of an AnimationSpec for one target.

Not persisted. Owned by the FrameScheduler, replaced wholesale on retrigger.

Timing policy:
  - Millisecond steps accumulate elapsed milliseconds.
  - Beat-relative steps accumulate elapsed *beats* (dt * bpm / 60000). The
    remaining duration is therefore recomputed from beats every tick, so a
    tempo change mid-step reshapes the rest of the step without losing the
    beat phase already covered.
  - Time past a step boundary carries into the next step.
  - Synced instances ignore their own elapsed time: the step comes from the
    scheduler's absolute beat position, measured from a cycle start aligned
    to the beat division.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Optional, Tuple

from huebeat.models.animation import AnimationSync, Step
from huebeat.models.enums import SpringPreset
from huebeat.models.light_state import LightState

_BOUNDARY_TOLERANCE_MS = 1e-6
_BEAT_TOLERANCE = 1e-9


@dataclass
class AnimationInstance:
    """
    Attributes:
        target_id: Light driven by this instance
        steps: Immutable step list (already clipped for the light)
        base_state: Full state each step override is merged onto
        mapping_id: Rule that started the instance (None for scenes/direct)
        loop: Wrap to step 0 after the last step
        sync: Optional sync-group membership
        spring: Spring preset used when entering each step
        step_index: Current step
        elapsed_ms: Time in the current ms step
        elapsed_beats: Beats in the current beat-relative step
        started: First step target has been handed to the smoother
        finished: Non-looping instance completed its last step
        cycles: Completed loops
        sync_anchor: Beat position where the synced cycle starts
        sync_cycle: Whole cycles since sync_anchor at the last sync
    """

    target_id: str
    steps: Tuple[Step, ...]
    base_state: LightState
    mapping_id: Optional[str] = None
    loop: bool = True
    sync: Optional[AnimationSync] = None
    spring: SpringPreset = SpringPreset.NONE
    step_index: int = 0
    elapsed_ms: float = 0.0
    elapsed_beats: float = 0.0
    started: bool = False
    finished: bool = False
    cycles: int = 0
    sync_anchor: Optional[float] = None
    sync_cycle: Optional[int] = None
    created_at: float = field(default_factory=time.time)

    # ============================================================
    # Step state
    # ============================================================

    @property
    def current_step(self) -> Step:
        return self.steps[self.step_index]

    def step_state(self, index: Optional[int] = None) -> LightState:
        """Full target state for a step: override merged onto base"""
        step = self.steps[self.step_index if index is None else index]
        return self.base_state.merge(step.override)

    # ============================================================
    # Advancement
    # ============================================================

    def advance(self, dt_ms: float, bpm: float) -> bool:
        """
        Free-running advance by one tick.

        Returns:
            True if the instance moved to a different step
        """
        if self.finished or not self.steps:
            return False

        step = self.current_step
        if step.is_beat_relative:
            self.elapsed_beats += dt_ms * bpm / 60000.0
            elapsed = self.elapsed_beats * 60000.0 / bpm
        else:
            self.elapsed_ms += dt_ms
            elapsed = self.elapsed_ms

        duration = step.resolve_ms(bpm)
        if elapsed + _BOUNDARY_TOLERANCE_MS < duration:
            return False

        next_index = self.step_index + 1
        if next_index >= len(self.steps):
            if not self.loop:
                self.finished = True
                return False
            next_index = 0
            self.cycles += 1

        self.step_index = next_index
        self._carry(max(0.0, elapsed - duration), bpm)
        return True

    def _carry(self, overshoot_ms: float, bpm: float) -> None:
        # One step per tick: the carry is capped at the new step's length
        step = self.current_step
        overshoot_ms = min(overshoot_ms, step.resolve_ms(bpm))
        if step.is_beat_relative:
            self.elapsed_ms = 0.0
            self.elapsed_beats = overshoot_ms * bpm / 60000.0
        else:
            self.elapsed_ms = overshoot_ms
            self.elapsed_beats = 0.0

    def sync_to(self, beat_position: float, bpm: float) -> bool:
        """
        Place a synced instance on the absolute beat grid.

        The cycle is the sum of step lengths in beats (ms steps converted at
        the current tempo). It starts at sync_anchor, which defaults to the
        beat position floored to the group's beat division on the first call.
        The step is looked up from the unquantized offset, so steps shorter
        than the division are all visited.

        A non-looping instance finishes on its last step once a full cycle
        has elapsed since it joined.

        Returns:
            True if the step changed
        """
        if not self.steps or self.sync is None or self.finished:
            return False

        ms_per_beat = 60000.0 / bpm
        lengths = [step.resolve_ms(bpm) / ms_per_beat for step in self.steps]
        cycle = sum(lengths)
        if cycle <= 0:
            return False

        if self.sync_anchor is None:
            division = self.sync.beat_division.beats
            self.sync_anchor = math.floor(beat_position / division + _BEAT_TOLERANCE) * division

        offset = max(0.0, beat_position - self.sync_anchor)
        completed = math.floor(offset / cycle + _BEAT_TOLERANCE)
        if self.sync_cycle is None:
            self.sync_cycle = completed
        wrapped = completed - self.sync_cycle
        self.sync_cycle = completed

        if wrapped > 0 and not self.loop:
            self.finished = True
            last = len(self.steps) - 1
            changed = self.step_index != last
            self.step_index = last
            return changed

        phase = offset - completed * cycle
        index = len(lengths) - 1
        acc = 0.0
        for i, length in enumerate(lengths):
            acc += length
            if phase < acc - _BEAT_TOLERANCE:
                index = i
                break

        self.cycles += max(0, wrapped)
        changed = index != self.step_index
        self.step_index = index
        return changed

    def reset_sync(self) -> None:
        """Forget the cycle start (the beat grid restarted)"""
        self.sync_anchor = None
        self.sync_cycle = None

    def __repr__(self) -> str:
        return (
            f"AnimationInstance({self.target_id}, step={self.step_index + 1}/{len(self.steps)}, "
            f"loop={self.loop}, sync={self.sync.group_id if self.sync else None})"
        )
