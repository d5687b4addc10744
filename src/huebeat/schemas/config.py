"""
Engine and light metadata schemas
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from huebeat.models.config import EngineConfig
from huebeat.models.enums import LogLevel, TargetType
from huebeat.models.light import MAX_GRADIENT_STOPS, MIN_GRADIENT_STOPS, LightInfo
from huebeat.models.tempo import MAX_BPM, MIN_BPM


class EngineConfigSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    fps: int = Field(50, ge=1, le=240)
    default_bpm: float = Field(120.0, ge=MIN_BPM, le=MAX_BPM)
    tempo_window: int = Field(48, ge=2, le=512)
    stale_ceiling_ms: float = Field(2000.0, gt=0)
    tempo_notify_interval_ms: float = Field(50.0, ge=0)
    spring_timeout_ms: float = Field(2000.0, gt=0)
    cc_debounce_ms: float = Field(50.0, ge=0)
    snapshot_cc: int = Field(69, ge=0, le=127)
    sink_queue_size: int = Field(64, ge=1)
    log_level: LogLevel = LogLevel.INFO
    midi_port: Optional[str] = None

    @field_validator("log_level", mode="before")
    @classmethod
    def _level_by_name(cls, v):
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Unknown log level '{v}'")
        return v

    def to_domain(self) -> EngineConfig:
        return EngineConfig(**self.model_dump())


class LightInfoSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1)
    name: str = ""
    type: TargetType = TargetType.LIGHT
    gradient: bool = False
    effects: bool = False
    max_gradient_stops: int = Field(MAX_GRADIENT_STOPS, ge=MIN_GRADIENT_STOPS, le=MAX_GRADIENT_STOPS)

    def to_domain(self) -> LightInfo:
        return LightInfo(
            id=self.id,
            name=self.name or self.id,
            target_type=self.type,
            gradient=self.gradient,
            effects=self.effects,
            max_gradient_stops=self.max_gradient_stops,
        )
