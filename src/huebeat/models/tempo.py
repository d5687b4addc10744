from dataclasses import dataclass

from huebeat.models.enums import TempoSource

DEFAULT_BPM = 120.0
MIN_BPM = 10.0
MAX_BPM = 999.0


@dataclass(frozen=True)
class TempoState:
    """Current tempo estimate as seen at one instant"""

    bpm: float = DEFAULT_BPM
    source: TempoSource = TempoSource.DEFAULT
    updated_at: float = 0.0
    stale: bool = True

    @property
    def ms_per_beat(self) -> float:
        return 60000.0 / self.bpm
