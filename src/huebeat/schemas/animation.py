"""
Animation schemas - manual steps, preset descriptors and sync groups
"""

import re
from dataclasses import fields
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from huebeat.animations.registry import PRESET_GENERATORS
from huebeat.models.animation import (
    MAX_MANUAL_STEPS,
    AnimationSpec,
    AnimationSync,
    PresetDescriptor,
    PresetParams,
    Step,
)
from huebeat.models.enums import AnimationPresetID, BeatDivision, EasingCurve, GradientMode
from huebeat.schemas.common import LightStateSchema, coerce_xy

_COLOR_LIST_PARAMS = ("palette", "to_gradient", "from_gradient")


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def build_preset_params(preset_id: AnimationPresetID, raw: Dict[str, Any]) -> PresetParams:
    """
    Convert a YAML params dict (snake_case or camelCase keys) into the
    preset's params dataclass.

    Raises:
        ValueError: unknown key or unconvertible value
    """
    params_type = PRESET_GENERATORS[preset_id][1]
    known = {f.name for f in fields(params_type)}

    values: Dict[str, Any] = {}
    for key, value in (raw or {}).items():
        name = _snake_case(key)
        if name not in known:
            raise ValueError(f"Unknown parameter '{key}' for preset {preset_id.value}")
        if value is None:
            continue
        if name in _COLOR_LIST_PARAMS:
            if not isinstance(value, (list, tuple)):
                raise ValueError(f"Parameter '{key}' must be a list of colors")
            value = tuple(coerce_xy(v) for v in value)
        elif name == "easing":
            value = EasingCurve(value)
        elif name == "gradient_mode":
            value = GradientMode(value)
        values[name] = value
    return params_type(**values)


class StepSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = ""
    label: str = ""
    beats: Optional[float] = Field(None, gt=0, description="Beat-relative duration")
    ms: Optional[float] = Field(None, gt=0, description="Absolute duration in milliseconds")
    state: LightStateSchema = Field(default_factory=LightStateSchema)

    @model_validator(mode="after")
    def _single_duration(self) -> "StepSchema":
        if self.beats is not None and self.ms is not None:
            raise ValueError("step duration is either 'beats' or 'ms', not both")
        return self

    def to_domain(self, index: int = 0) -> Step:
        return Step(
            override=self.state.to_domain(),
            duration_beats=self.beats,
            duration_ms=self.ms,
            id=self.id or f"step-{index}",
            label=self.label or f"Step {index + 1}",
        )


class PresetSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: AnimationPresetID
    params: Dict[str, Any] = Field(default_factory=dict)
    version: int = Field(1, ge=1)

    @model_validator(mode="after")
    def _valid_params(self) -> "PresetSchema":
        build_preset_params(self.id, self.params)
        return self

    def to_domain(self) -> PresetDescriptor:
        return PresetDescriptor(self.id, build_preset_params(self.id, self.params), self.version)


class SyncSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    group: str = Field(min_length=1)
    division: BeatDivision = BeatDivision.WHOLE

    @field_validator("division", mode="before")
    @classmethod
    def _division_as_str(cls, v: Any) -> Any:
        return str(v) if isinstance(v, (int, float)) else v

    def to_domain(self) -> AnimationSync:
        return AnimationSync(self.group, self.division)


class AnimationSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    steps: List[StepSchema] = Field(default_factory=list, max_length=MAX_MANUAL_STEPS)
    preset: Optional[PresetSchema] = None
    loop: bool = True
    sync: Optional[SyncSchema] = None

    @model_validator(mode="after")
    def _has_content(self) -> "AnimationSchema":
        if not self.steps and self.preset is None:
            raise ValueError("animation needs 'steps' or a 'preset'")
        return self

    def to_domain(self) -> AnimationSpec:
        return AnimationSpec(
            steps=tuple(step.to_domain(i) for i, step in enumerate(self.steps)),
            preset=self.preset.to_domain() if self.preset else None,
            loop=self.loop,
            sync=self.sync.to_domain() if self.sync else None,
        )
