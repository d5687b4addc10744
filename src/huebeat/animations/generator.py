"""
Animation Generator

Turns an AnimationSpec (manual steps or a procedural preset) plus the
target's current state into a fresh AnimationInstance. Generation never
fails: bad params fall back to defaults and an empty spec becomes a single
hold step.
"""

from dataclasses import replace
from typing import List, Optional, Tuple

from huebeat.animations.preset_utils import pad_gradient
from huebeat.animations.registry import generate_preset_steps
from huebeat.engine.animation_instance import AnimationInstance
from huebeat.models.animation import MAX_MANUAL_STEPS, AnimationSpec, PresetDescriptor, PresetParams, Step
from huebeat.models.enums import LogCategory, SpringPreset
from huebeat.models.light import MIN_GRADIENT_STOPS, LightInfo
from huebeat.models.light_state import LightState, LightStateOverride
from huebeat.utils.logger import get_logger

log = get_logger().for_category(LogCategory.ANIMATION)

_EFFECT_FIELDS = (
    "effect",
    "effect_color",
    "effect_color2",
    "effect_speed",
    "effect_bpm",
    "effect_duration",
    "effect_intensity",
    "effect_temperature",
)


def clip_override_for_light(override: LightStateOverride, light: Optional[LightInfo]) -> LightStateOverride:
    """
    Fit an override to a light's capabilities.

    - gradient lights: stops padded to 2 and truncated to max_gradient_stops
    - other lights: the first gradient point becomes hue/sat (unless set)
    - lights without effects: effect fields removed
    """
    if light is None:
        return override

    changes = {}
    if override.gradient is not None:
        if light.gradient:
            stops = max(MIN_GRADIENT_STOPS, min(len(override.gradient), light.max_gradient_stops))
            clipped = tuple(pad_gradient(override.gradient, stops))
            if clipped != override.gradient:
                changes["gradient"] = clipped
        else:
            changes["gradient"] = None
            changes["gradient_mode"] = None
            if override.gradient and override.hue is None:
                hue, sat = override.gradient[0].to_hsv()
                changes["hue"] = hue
                changes["saturation"] = sat if override.saturation is None else override.saturation

    if not light.effects:
        for name in _EFFECT_FIELDS:
            if getattr(override, name) is not None:
                changes[name] = None

    return replace(override, **changes) if changes else override


class AnimationGenerator:
    """
    Builds AnimationInstances.

    Example:
        generator = AnimationGenerator()
        instance = generator.generate(
            "desk", spec, current_state,
            action=LightStateOverride(on=True, brightness=200),
            light=light_info,
        )
    """

    def build_steps(self, spec: AnimationSpec, base: LightState) -> Tuple[Step, ...]:
        """Resolve the step list for a spec against a base state"""
        if spec.preset is not None:
            steps: List[Step] = generate_preset_steps(spec.preset, base)
        else:
            steps = list(spec.steps)
            if len(steps) > MAX_MANUAL_STEPS:
                log.warn("Animation has too many steps, truncating", steps=len(steps), limit=MAX_MANUAL_STEPS)
                steps = steps[:MAX_MANUAL_STEPS]

        if not steps:
            log.debug("Empty animation, holding base state")
            steps = [Step(id="hold", label="Hold")]
        return tuple(steps)

    def generate(
        self,
        target_id: str,
        spec: AnimationSpec,
        current_state: LightState,
        action: Optional[LightStateOverride] = None,
        light: Optional[LightInfo] = None,
        mapping_id: Optional[str] = None,
        spring: SpringPreset = SpringPreset.NONE,
    ) -> AnimationInstance:
        """
        Create a new instance starting at step 0.

        Args:
            target_id: Light id
            spec: Manual or procedural spec
            current_state: Target's current full state
            action: Velocity-resolved action override applied before the steps
            light: Capability metadata used to clip overrides
            mapping_id: Triggering rule id
            spring: Spring preset used for step transitions

        Returns:
            AnimationInstance (never None)
        """
        base = current_state
        if action is not None:
            base = base.merge(clip_override_for_light(action, light))

        steps = tuple(
            replace(step, override=clip_override_for_light(step.override, light))
            for step in self.build_steps(spec, base)
        )

        instance = AnimationInstance(
            target_id=target_id,
            steps=steps,
            base_state=base,
            mapping_id=mapping_id,
            loop=spec.loop,
            sync=spec.sync,
            spring=spring,
        )
        log.debug(
            "Animation generated",
            target=target_id,
            steps=len(steps),
            preset=spec.preset.preset_id.value if spec.preset else "manual",
        )
        return instance

    @staticmethod
    def with_params(spec: AnimationSpec, params: PresetParams) -> AnimationSpec:
        """
        New spec with replaced preset params (version bumped).

        Steps are never patched: the next generate() call rebuilds them all.
        """
        if spec.preset is None:
            raise ValueError("Only procedural animations have params")
        descriptor = PresetDescriptor(spec.preset.preset_id, params, spec.preset.version + 1)
        return replace(spec, preset=descriptor, steps=())
