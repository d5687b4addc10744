"""
Mapping schemas - triggers, targets, actions and rules
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from huebeat.models.enums import (
    ActionType,
    BrightnessMode,
    GradientMode,
    RetriggerMode,
    SpringPreset,
    TargetKind,
    TriggerKind,
)
from huebeat.models.mapping import (
    Action,
    BrightnessAction,
    CCTrigger,
    ColorAction,
    EffectAction,
    GradientAction,
    LightTarget,
    MappingRule,
    NoteTrigger,
    SceneTarget,
    Target,
    ToggleAction,
    Trigger,
)
from huebeat.schemas.animation import AnimationSchema
from huebeat.schemas.common import XYColor
from huebeat.utils.colors import hex_to_hsv


class TriggerSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: TriggerKind
    channel: int = Field(0, ge=0, le=15)
    note: Optional[int] = Field(None, ge=0, le=127)
    controller: Optional[int] = Field(None, ge=0, le=127)
    value: Optional[int] = Field(None, ge=0, le=127)
    value_min: Optional[int] = Field(None, ge=0, le=127)
    value_max: Optional[int] = Field(None, ge=0, le=127)

    @model_validator(mode="after")
    def _fields_for_kind(self) -> "TriggerSchema":
        if self.type is TriggerKind.NOTE:
            if self.note is None:
                raise ValueError("note trigger needs 'note'")
            if self.controller is not None or self.value is not None:
                raise ValueError("note trigger takes no controller/value")
        else:
            if self.controller is None:
                raise ValueError("cc trigger needs 'controller'")
            if self.value is not None and (self.value_min is not None or self.value_max is not None):
                raise ValueError("cc trigger takes 'value' or a range, not both")
            if self.value_min is not None and self.value_max is not None and self.value_min > self.value_max:
                raise ValueError("cc trigger range has value_min > value_max")
        return self

    def to_domain(self) -> Trigger:
        if self.type is TriggerKind.NOTE:
            return NoteTrigger(self.channel, self.note)
        return CCTrigger(self.channel, self.controller, self.value, self.value_min, self.value_max)


class TargetSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: TargetKind = TargetKind.LIGHT
    id: str = Field(min_length=1)

    def to_domain(self) -> Target:
        if self.type is TargetKind.SCENE:
            return SceneTarget(self.id)
        return LightTarget(self.id)


class ActionSchema(BaseModel):
    """
    One flat schema for every action kind; to_domain() picks the fields
    relevant to `type`.
    """

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    type: ActionType
    color: Optional[str] = None
    hue: Optional[int] = Field(None, ge=0, le=65535)
    saturation: Optional[int] = Field(None, ge=0, le=254)
    brightness_mode: Optional[BrightnessMode] = None
    brightness: Optional[int] = Field(None, ge=0, le=254)
    transition_time: Optional[int] = Field(None, ge=0)
    effect: Optional[str] = None
    effect_color: Optional[XYColor] = None
    effect_color2: Optional[XYColor] = None
    effect_speed: Optional[float] = Field(None, ge=0, le=1)
    effect_bpm: Optional[float] = Field(None, gt=0)
    effect_duration: Optional[int] = Field(None, ge=0)
    effect_intensity: Optional[float] = Field(None, ge=0, le=1)
    effect_temperature: Optional[int] = Field(None, ge=153, le=500)
    colors: List[XYColor] = Field(default_factory=list, max_length=5)
    gradient_mode: Optional[GradientMode] = None

    @model_validator(mode="after")
    def _fields_for_type(self) -> "ActionSchema":
        if self.color is not None:
            hex_to_hsv(self.color)
        if self.type is ActionType.EFFECT and not self.effect:
            raise ValueError("effect action needs 'effect'")
        if self.type is ActionType.GRADIENT and len(self.colors) < 2:
            raise ValueError("gradient action needs at least 2 'colors'")
        if self.brightness_mode is BrightnessMode.FIXED and self.brightness is None:
            raise ValueError("fixed brightness mode needs 'brightness'")
        return self

    def _mode(self, default: BrightnessMode) -> BrightnessMode:
        if self.brightness_mode is not None:
            return self.brightness_mode
        return BrightnessMode.FIXED if self.brightness is not None else default

    def to_domain(self) -> Action:
        if self.type is ActionType.COLOR:
            hue, saturation = self.hue, self.saturation
            if self.color is not None:
                h, s, _ = hex_to_hsv(self.color)
                hue = h if hue is None else hue
                saturation = s if saturation is None else saturation
            return ColorAction(
                hue=hue,
                saturation=saturation,
                brightness_mode=self._mode(BrightnessMode.VELOCITY),
                fixed_brightness=self.brightness,
                transition_time=self.transition_time,
            )
        if self.type is ActionType.BRIGHTNESS:
            return BrightnessAction(
                brightness_mode=self._mode(BrightnessMode.VELOCITY),
                fixed_brightness=self.brightness,
                transition_time=self.transition_time,
            )
        if self.type is ActionType.TOGGLE:
            return ToggleAction(transition_time=self.transition_time)
        if self.type is ActionType.EFFECT:
            return EffectAction(
                effect=self.effect,
                effect_color=self.effect_color,
                effect_color2=self.effect_color2,
                effect_speed=self.effect_speed,
                effect_bpm=self.effect_bpm,
                effect_duration=self.effect_duration,
                effect_intensity=self.effect_intensity,
                effect_temperature=self.effect_temperature,
                fixed_brightness=self.brightness,
                transition_time=self.transition_time,
            )
        return GradientAction(
            colors=tuple(self.colors),
            gradient_mode=self.gradient_mode,
            brightness_mode=self._mode(BrightnessMode.FIXED),
            fixed_brightness=self.brightness,
            transition_time=self.transition_time,
        )


class MappingRuleSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1)
    name: str = ""
    trigger: TriggerSchema
    target: TargetSchema
    action: Optional[ActionSchema] = None
    animation: Optional[AnimationSchema] = None
    preset: Optional[int] = Field(None, ge=0, le=127, description="Program Change scope (omit for global)")
    transition: SpringPreset = SpringPreset.NONE
    retrigger: RetriggerMode = RetriggerMode.RESTART

    @model_validator(mode="after")
    def _has_effect(self) -> "MappingRuleSchema":
        if self.target.type is TargetKind.LIGHT and self.action is None and self.animation is None:
            raise ValueError("light rule needs an 'action' or an 'animation'")
        if self.target.type is TargetKind.SCENE and self.animation is not None:
            raise ValueError("scene rules take their animations from the scene")
        return self

    def to_domain(self) -> MappingRule:
        return MappingRule(
            id=self.id,
            name=self.name,
            trigger=self.trigger.to_domain(),
            target=self.target.to_domain(),
            action=self.action.to_domain() if self.action else None,
            animation=self.animation.to_domain() if self.animation else None,
            preset=self.preset,
            transition=self.transition,
            retrigger=self.retrigger,
        )
