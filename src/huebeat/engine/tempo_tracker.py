"""
TempoTracker — live BPM estimate from MIDI clock.

MIDI clock sends 24 pulses per quarter note. The tracker keeps a rolling
window of inter-pulse intervals and derives:

    bpm = 60000 / (avg_interval_ms * 24)

Jitter handling:
  - Intervals longer than 2x the running average are rejected as outliers.
  - A run of consecutive outliers means the tempo really dropped: the window
    is reseeded from the new interval.
  - A gap longer than the staleness timeout means the clock stopped: the
    window restarts on the next pulse.

Staleness is a soft degrade: beat-relative durations fall back to the
default BPM, nothing ever raises.
"""

from __future__ import annotations

import math
from collections import deque
from typing import Deque, Optional

from huebeat.models.enums import LogCategory, TempoSource
from huebeat.models.tempo import DEFAULT_BPM, MAX_BPM, MIN_BPM, TempoState
from huebeat.utils.logger import get_logger

log = get_logger().for_category(LogCategory.TEMPO)


def clamp_bpm(bpm: float) -> Optional[float]:
    """Clamp to [10, 999]; None for non-finite or non-positive input"""
    if bpm is None or not math.isfinite(bpm) or bpm <= 0:
        return None
    return max(MIN_BPM, min(MAX_BPM, float(bpm)))


def beats_to_ms(beats: float, bpm: float) -> float:
    """Beat count → milliseconds; non-finite or non-positive beats give 0"""
    if not math.isfinite(beats) or beats <= 0:
        return 0.0
    return 60000.0 / bpm * beats


class TempoTracker:
    """
    Rolling-window MIDI clock tracker with manual override.

    Example:
        tracker = TempoTracker(default_bpm=120)
        for ts in pulse_times:
            tracker.on_clock_pulse(ts)
        tracker.effective_bpm(now_ms)   # live estimate, or 120 when stale
    """

    PULSES_PER_QUARTER = 24
    MIN_INTERVALS = 2           # Intervals needed before publishing an estimate
    OUTLIER_RATIO = 2.0
    RESYNC_AFTER_OUTLIERS = 6
    STALE_BEATS = 2.0           # Silence (in beats) before MIDI tempo goes stale

    def __init__(
        self,
        default_bpm: float = DEFAULT_BPM,
        window_size: int = 48,
        stale_ceiling_ms: float = 2000.0,
    ):
        """
        Args:
            default_bpm: Fallback tempo when no live clock is available
            window_size: Inter-pulse intervals kept (24-48 recommended)
            stale_ceiling_ms: Gap that restarts tracking before any estimate exists
        """
        self.default_bpm = clamp_bpm(default_bpm) or DEFAULT_BPM
        self.window_size = max(self.MIN_INTERVALS, int(window_size))
        self.stale_ceiling_ms = float(stale_ceiling_ms)

        self._intervals: Deque[float] = deque(maxlen=self.window_size)
        self._last_pulse_at: Optional[float] = None
        self._consecutive_outliers = 0

        self._midi_bpm: Optional[float] = None
        self._midi_updated_at = 0.0

        self._manual_bpm: Optional[float] = None
        self._manual_updated_at = 0.0

        self.pulses_received = 0
        self.outliers_rejected = 0

    # ============================================================
    # Clock input
    # ============================================================

    def on_clock_pulse(self, timestamp: float) -> bool:
        """
        Feed one clock pulse.

        Args:
            timestamp: Arrival time in ms (monotonic)

        Returns:
            True if the published MIDI estimate changed
        """
        if timestamp is None or not math.isfinite(timestamp):
            log.debug("Ignoring clock pulse with invalid timestamp", timestamp=timestamp)
            return False

        last = self._last_pulse_at
        if last is not None and timestamp <= last:
            return False

        self._last_pulse_at = timestamp
        self.pulses_received += 1
        if last is None:
            return False

        interval = timestamp - last

        if interval > self._restart_gap_ms():
            # Clock was silent: start a fresh window from this pulse
            self._intervals.clear()
            self._consecutive_outliers = 0
            log.debug("Clock resumed after gap", gap_ms=round(interval, 1))
            return False

        avg = self._average_interval()
        if avg is not None and interval > avg * self.OUTLIER_RATIO:
            self._consecutive_outliers += 1
            self.outliers_rejected += 1
            if self._consecutive_outliers < self.RESYNC_AFTER_OUTLIERS:
                return False
            log.info("Clock tempo dropped, resynchronizing", interval_ms=round(interval, 2))
            self._intervals.clear()

        self._consecutive_outliers = 0
        self._intervals.append(interval)

        if len(self._intervals) < self.MIN_INTERVALS:
            return False

        bpm = clamp_bpm(60000.0 / (self._average_interval() * self.PULSES_PER_QUARTER))
        if bpm is None:
            return False

        changed = self._midi_bpm is None or abs(bpm - self._midi_bpm) >= 0.01
        self._midi_bpm = bpm
        self._midi_updated_at = timestamp
        return changed

    def reset(self) -> None:
        """Transport Start/Continue: forget intervals, keep the last estimate"""
        self._intervals.clear()
        self._last_pulse_at = None
        self._consecutive_outliers = 0
        log.debug("Clock window reset")

    def stop(self) -> None:
        """Transport Stop: drop the MIDI estimate so the default applies at once"""
        self.reset()
        self._midi_bpm = None
        log.info("Clock stopped, using default tempo", bpm=self.default_bpm)

    # ============================================================
    # Manual override
    # ============================================================

    def set_manual(self, bpm: float, timestamp: float = 0.0) -> bool:
        """
        Explicit tempo override; never goes stale.

        Returns:
            False if bpm was rejected (non-finite or non-positive)
        """
        clamped = clamp_bpm(bpm)
        if clamped is None:
            log.warn("Ignoring invalid manual tempo", bpm=bpm)
            return False
        self._manual_bpm = clamped
        self._manual_updated_at = timestamp
        log.info("Manual tempo set", bpm=clamped)
        return True

    def clear_manual(self) -> None:
        if self._manual_bpm is not None:
            log.info("Manual tempo cleared")
        self._manual_bpm = None

    @property
    def is_manual(self) -> bool:
        return self._manual_bpm is not None

    # ============================================================
    # Queries
    # ============================================================

    def is_stale(self, now: float) -> bool:
        if self._manual_bpm is not None:
            return False
        if self._midi_bpm is None or self._last_pulse_at is None:
            return True
        return (now - self._last_pulse_at) > self._stale_timeout_ms(self._midi_bpm)

    def effective_bpm(self, now: float) -> float:
        """Manual override, else live MIDI estimate, else default"""
        if self._manual_bpm is not None:
            return self._manual_bpm
        if not self.is_stale(now):
            return self._midi_bpm
        return self.default_bpm

    def ms_per_beat(self, now: float) -> float:
        return 60000.0 / self.effective_bpm(now)

    def state(self, now: float) -> TempoState:
        if self._manual_bpm is not None:
            return TempoState(self._manual_bpm, TempoSource.MANUAL, self._manual_updated_at, stale=False)
        if not self.is_stale(now):
            return TempoState(self._midi_bpm, TempoSource.MIDI, self._midi_updated_at, stale=False)
        return TempoState(self.default_bpm, TempoSource.DEFAULT, self._midi_updated_at, stale=True)

    @property
    def midi_bpm(self) -> Optional[float]:
        """Last published clock estimate (may be stale)"""
        return self._midi_bpm

    # ============================================================
    # Internals
    # ============================================================

    def _average_interval(self) -> Optional[float]:
        if not self._intervals:
            return None
        return sum(self._intervals) / len(self._intervals)

    def _stale_timeout_ms(self, bpm: float) -> float:
        return self.STALE_BEATS * 60000.0 / bpm

    def _restart_gap_ms(self) -> float:
        if self._midi_bpm is None:
            return self.stale_ceiling_ms
        return self._stale_timeout_ms(self._midi_bpm)

    def __repr__(self) -> str:
        return (
            f"TempoTracker(midi={self._midi_bpm}, manual={self._manual_bpm}, "
            f"default={self.default_bpm}, window={len(self._intervals)}/{self.window_size})"
        )
