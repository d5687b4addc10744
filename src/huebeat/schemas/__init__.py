"""
Pydantic schemas for YAML definitions

Each schema validates one document entry and converts it into its frozen
domain dataclass via to_domain().
"""

from .common import LightStateSchema, coerce_xy
from .animation import AnimationSchema, PresetSchema, StepSchema, SyncSchema, build_preset_params
from .mapping import ActionSchema, MappingRuleSchema, TargetSchema, TriggerSchema
from .scene import SceneLightSchema, SceneSchema, SceneTransitionSchema
from .config import EngineConfigSchema, LightInfoSchema

__all__ = [
    "LightStateSchema",
    "coerce_xy",
    "AnimationSchema",
    "PresetSchema",
    "StepSchema",
    "SyncSchema",
    "build_preset_params",
    "ActionSchema",
    "MappingRuleSchema",
    "TargetSchema",
    "TriggerSchema",
    "SceneLightSchema",
    "SceneSchema",
    "SceneTransitionSchema",
    "EngineConfigSchema",
    "LightInfoSchema",
]
