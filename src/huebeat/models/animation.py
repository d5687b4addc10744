"""
Animation models

Step / AnimationSpec describe what a triggered target does over time.
Steps are immutable; procedural presets regenerate the whole tuple whenever
their parameters change.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from huebeat.models.color import XYPoint
from huebeat.models.enums import AnimationPresetID, BeatDivision, EasingCurve, GradientMode
from huebeat.models.light_state import LightStateOverride

MIN_STEP_MS = 10.0
MAX_STEP_MS = 60000.0
DEFAULT_STEP_BEATS = 1.0
MAX_MANUAL_STEPS = 64
MAX_PRESET_STEPS = 32


@dataclass(frozen=True)
class Step:
    """
    One segment of an animation

    Duration is beat-relative (duration_beats) or absolute (duration_ms),
    never both. A step with neither lasts one beat.

    Raises:
        ValueError: both durations given
    """

    override: LightStateOverride = field(default_factory=LightStateOverride)
    duration_beats: Optional[float] = None
    duration_ms: Optional[float] = None
    id: str = ""
    label: str = ""

    def __post_init__(self):
        if self.duration_beats is not None and self.duration_ms is not None:
            raise ValueError(f"Step {self.id or '?'}: duration_beats and duration_ms are mutually exclusive")

    @property
    def is_beat_relative(self) -> bool:
        return self.duration_ms is None

    @property
    def beats(self) -> float:
        """Beat length (only meaningful for beat-relative steps)"""
        b = self.duration_beats if self.duration_beats is not None else DEFAULT_STEP_BEATS
        if not math.isfinite(b) or b <= 0:
            return 0.0
        return b

    def resolve_ms(self, bpm: float) -> float:
        """Concrete duration at the given tempo, clamped to [10, 60000] ms"""
        if self.duration_ms is not None:
            ms = self.duration_ms if math.isfinite(self.duration_ms) else MIN_STEP_MS
        else:
            ms = self.beats * 60000.0 / bpm
        return max(MIN_STEP_MS, min(MAX_STEP_MS, ms))


@dataclass(frozen=True)
class AnimationSync:
    """Sync-group membership: step phase locked to the absolute beat count"""
    group_id: str
    beat_division: BeatDivision = BeatDivision.WHOLE


# === Preset parameters ===
# Every field is optional; generators clamp and fall back to defaults.

@dataclass(frozen=True)
class ChaseParams:
    palette: Tuple[XYPoint, ...] = ()
    beats_per_step: Optional[float] = None
    stop_count: Optional[int] = None
    step_count: Optional[int] = None
    gradient_mode: Optional[GradientMode] = None


@dataclass(frozen=True)
class GradientCrossfadeParams:
    to_gradient: Tuple[XYPoint, ...] = ()
    from_gradient: Tuple[XYPoint, ...] = ()
    total_beats: Optional[float] = None
    step_subdivision: Optional[float] = None
    easing: EasingCurve = EasingCurve.LINEAR
    gradient_mode: Optional[GradientMode] = None


@dataclass(frozen=True)
class LightningParams:
    palette: Tuple[XYPoint, ...] = ()
    flash_count: Optional[int] = None
    flash_beats: Optional[float] = None
    calm_beats: Optional[float] = None
    randomness: Optional[float] = None
    seed: Optional[int] = None
    settle_beats: Optional[float] = None
    brightness_scale: Optional[float] = None


PresetParams = Union[ChaseParams, GradientCrossfadeParams, LightningParams]


@dataclass(frozen=True)
class PresetDescriptor:
    """Procedural animation reference: which generator, with which params"""
    preset_id: AnimationPresetID
    params: PresetParams
    version: int = 1


@dataclass(frozen=True)
class AnimationSpec:
    """
    What a triggered target should do over time

    Either a literal step list (manual) or a preset descriptor (procedural).
    When both are present the preset wins and the steps are regenerated.
    """

    steps: Tuple[Step, ...] = ()
    preset: Optional[PresetDescriptor] = None
    loop: bool = True
    sync: Optional[AnimationSync] = None

    @property
    def is_procedural(self) -> bool:
        return self.preset is not None
