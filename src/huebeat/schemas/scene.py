"""
Scene schemas
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from huebeat.models.enums import EasingCurve, TargetType
from huebeat.models.scene import Scene, SceneLight, SceneTransition
from huebeat.schemas.animation import AnimationSchema
from huebeat.schemas.common import LightStateSchema


class SceneTransitionSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    duration_ms: Optional[int] = Field(None, ge=0, le=6_553_500)
    easing: EasingCurve = EasingCurve.LINEAR
    stagger_ms: int = Field(0, ge=0)

    def to_domain(self) -> SceneTransition:
        return SceneTransition(self.duration_ms, self.easing, self.stagger_ms)


class SceneLightSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    target: str = Field(min_length=1)
    target_type: TargetType = TargetType.LIGHT
    state: LightStateSchema = Field(default_factory=LightStateSchema)
    animation: Optional[AnimationSchema] = None

    def to_domain(self) -> SceneLight:
        return SceneLight(
            target_id=self.target,
            state=self.state.to_domain(),
            target_type=self.target_type,
            animation=self.animation.to_domain() if self.animation else None,
        )


class SceneSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1)
    name: str = ""
    lights: List[SceneLightSchema] = Field(default_factory=list)
    transition: SceneTransitionSchema = Field(default_factory=SceneTransitionSchema)

    def to_domain(self) -> Scene:
        return Scene(
            id=self.id,
            name=self.name or self.id,
            lights=tuple(light.to_domain() for light in self.lights),
            transition=self.transition.to_domain(),
        )
