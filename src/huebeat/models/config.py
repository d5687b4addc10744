from dataclasses import dataclass
from typing import Optional

from huebeat.models.enums import LogLevel


@dataclass(frozen=True)
class EngineConfig:
    """
    Engine tuning loaded from engine.yaml

    Attributes:
        fps: Frame scheduler cadence (1-240)
        default_bpm: Tempo used while no live clock is available
        tempo_window: Inter-pulse intervals kept for the rolling average
        stale_ceiling_ms: Clock gap that restarts tracking before any estimate exists
        tempo_notify_interval_ms: Minimum spacing of tempo notifications
        spring_timeout_ms: Hard settle deadline per spring channel
        cc_debounce_ms: Identical CC values inside this window are ignored
        snapshot_cc: Controller number that selects a snapshot (Helix: 69)
        sink_queue_size: Capacity of the queue sink before frames are dropped
        log_level: Minimum log level
        midi_port: Substring used to pick a MIDI input port (None = first)
    """
    fps: int = 50
    default_bpm: float = 120.0
    tempo_window: int = 48
    stale_ceiling_ms: float = 2000.0
    tempo_notify_interval_ms: float = 50.0
    spring_timeout_ms: float = 2000.0
    cc_debounce_ms: float = 50.0
    snapshot_cc: int = 69
    sink_queue_size: int = 64
    log_level: LogLevel = LogLevel.INFO
    midi_port: Optional[str] = None
