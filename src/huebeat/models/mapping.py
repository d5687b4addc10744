"""
Mapping models - trigger → action bindings

Actions are a tagged variant: one frozen dataclass per ActionType, each
implementing to_override(velocity). ACTION_TYPES is built from the enum and
refuses to import if a kind has no class.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import ClassVar, Dict, Optional, Tuple, Type, Union

from huebeat.models.animation import AnimationSpec
from huebeat.models.color import XYPoint
from huebeat.models.enums import (
    ActionType,
    BrightnessMode,
    GradientMode,
    RetriggerMode,
    SpringPreset,
    TargetKind,
    TriggerKind,
)
from huebeat.models.light_state import OFF, LightStateOverride
from huebeat.utils.colors import velocity_to_brightness


# ============================================================
# Triggers
# ============================================================

@dataclass(frozen=True)
class NoteTrigger:
    channel: int
    note: int

    kind: ClassVar[TriggerKind] = TriggerKind.NOTE


@dataclass(frozen=True)
class CCTrigger:
    """
    Control-change trigger

    value set          → exact match
    value_min/value_max → inclusive range (either bound may be omitted)
    neither            → any value
    """
    channel: int
    controller: int
    value: Optional[int] = None
    value_min: Optional[int] = None
    value_max: Optional[int] = None

    kind: ClassVar[TriggerKind] = TriggerKind.CC

    @property
    def is_any_value(self) -> bool:
        return self.value is None and self.value_min is None and self.value_max is None

    def matches_value(self, value: int) -> bool:
        if self.value is not None:
            return value == self.value
        if self.value_min is not None and value < self.value_min:
            return False
        if self.value_max is not None and value > self.value_max:
            return False
        return True


Trigger = Union[NoteTrigger, CCTrigger]


# ============================================================
# Targets
# ============================================================

@dataclass(frozen=True)
class LightTarget:
    light_id: str

    kind: ClassVar[TargetKind] = TargetKind.LIGHT

    @property
    def id(self) -> str:
        return self.light_id


@dataclass(frozen=True)
class SceneTarget:
    scene_id: str

    kind: ClassVar[TargetKind] = TargetKind.SCENE

    @property
    def id(self) -> str:
        return self.scene_id


Target = Union[LightTarget, SceneTarget]


# ============================================================
# Actions
# ============================================================

def _brightness(mode: BrightnessMode, fixed: Optional[int], velocity: int) -> Optional[int]:
    if mode is BrightnessMode.VELOCITY:
        return velocity_to_brightness(velocity)
    return fixed


@dataclass(frozen=True)
class ColorAction:
    hue: Optional[int] = None
    saturation: Optional[int] = None
    brightness_mode: BrightnessMode = BrightnessMode.VELOCITY
    fixed_brightness: Optional[int] = None
    transition_time: Optional[int] = None

    type: ClassVar[ActionType] = ActionType.COLOR

    def to_override(self, velocity: int) -> LightStateOverride:
        return LightStateOverride(
            on=True,
            hue=self.hue,
            saturation=self.saturation,
            brightness=_brightness(self.brightness_mode, self.fixed_brightness, velocity),
            transition_time=self.transition_time,
        )


@dataclass(frozen=True)
class BrightnessAction:
    brightness_mode: BrightnessMode = BrightnessMode.VELOCITY
    fixed_brightness: Optional[int] = None
    transition_time: Optional[int] = None

    type: ClassVar[ActionType] = ActionType.BRIGHTNESS

    def to_override(self, velocity: int) -> LightStateOverride:
        return LightStateOverride(
            on=True,
            brightness=_brightness(self.brightness_mode, self.fixed_brightness, velocity),
            transition_time=self.transition_time,
        )


@dataclass(frozen=True)
class ToggleAction:
    transition_time: Optional[int] = None

    type: ClassVar[ActionType] = ActionType.TOGGLE

    def to_override(self, velocity: int) -> LightStateOverride:
        return LightStateOverride(on=velocity > 0, transition_time=self.transition_time)


@dataclass(frozen=True)
class EffectAction:
    effect: str
    effect_color: Optional[XYPoint] = None
    effect_color2: Optional[XYPoint] = None
    effect_speed: Optional[float] = None
    effect_bpm: Optional[float] = None
    effect_duration: Optional[int] = None
    effect_intensity: Optional[float] = None
    effect_temperature: Optional[int] = None
    fixed_brightness: Optional[int] = None
    transition_time: Optional[int] = None

    type: ClassVar[ActionType] = ActionType.EFFECT

    def to_override(self, velocity: int) -> LightStateOverride:
        return LightStateOverride(
            on=True,
            effect=self.effect,
            effect_color=self.effect_color,
            effect_color2=self.effect_color2,
            effect_speed=self.effect_speed,
            effect_bpm=self.effect_bpm,
            effect_duration=self.effect_duration,
            effect_intensity=self.effect_intensity,
            effect_temperature=self.effect_temperature,
            brightness=self.fixed_brightness,
            transition_time=self.transition_time,
        )


@dataclass(frozen=True)
class GradientAction:
    colors: Tuple[XYPoint, ...]
    gradient_mode: Optional[GradientMode] = None
    brightness_mode: BrightnessMode = BrightnessMode.FIXED
    fixed_brightness: Optional[int] = None
    transition_time: Optional[int] = None

    type: ClassVar[ActionType] = ActionType.GRADIENT

    def to_override(self, velocity: int) -> LightStateOverride:
        return LightStateOverride(
            on=True,
            gradient=self.colors or None,
            gradient_mode=self.gradient_mode,
            brightness=_brightness(self.brightness_mode, self.fixed_brightness, velocity),
            transition_time=self.transition_time,
        )


Action = Union[ColorAction, BrightnessAction, ToggleAction, EffectAction, GradientAction]


def _build_action_registry() -> Dict[ActionType, Type]:
    """Map every ActionType to its class; fail loudly on a missing kind"""
    classes = (ColorAction, BrightnessAction, ToggleAction, EffectAction, GradientAction)
    registry = {cls.type: cls for cls in classes}
    missing = [t.name for t in ActionType if t not in registry]
    if missing:
        raise RuntimeError(f"Action types without implementation: {missing}")
    return registry


ACTION_TYPES: Dict[ActionType, Type] = _build_action_registry()


def action_override(action: Action, velocity: int) -> LightStateOverride:
    """
    Resolve an action for a trigger velocity.

    Velocity 0 always means "off" regardless of action kind.
    """
    if velocity <= 0:
        return OFF
    return action.to_override(velocity)


# ============================================================
# Rules
# ============================================================

@dataclass(frozen=True)
class MappingRule:
    """
    User-authored trigger → target binding

    Attributes:
        id: Stable identifier (used for activity notifications and retrigger)
        trigger: NoteTrigger or CCTrigger
        target: LightTarget or SceneTarget
        action: Immediate state change (optional)
        animation: Timed steps (optional, light targets only)
        preset: Program Change scope (None = global)
        transition: Spring preset used for numeric channels
        retrigger: RESTART (default) or CONTINUE while running
        name: Display name
    """

    id: str
    trigger: Trigger
    target: Target
    action: Optional[Action] = None
    animation: Optional[AnimationSpec] = None
    preset: Optional[int] = None
    transition: SpringPreset = SpringPreset.NONE
    retrigger: RetriggerMode = RetriggerMode.RESTART
    name: str = ""

    @property
    def is_preset_scoped(self) -> bool:
        return self.preset is not None

    def __repr__(self) -> str:
        scope = f"preset={self.preset}" if self.preset is not None else "global"
        return f"MappingRule({self.id}, {self.trigger.kind.value}, {scope} → {self.target.kind.value}:{self.target.id})"


@dataclass(frozen=True)
class RuleSet:
    """Immutable, versioned rule collection; replaced wholesale on edit"""

    rules: Tuple[MappingRule, ...] = ()
    version: int = 0

    def replaced(self, rules) -> 'RuleSet':
        return replace(self, rules=tuple(rules), version=self.version + 1)

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self):
        return iter(self.rules)
