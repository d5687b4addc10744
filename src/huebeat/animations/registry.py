"""
Procedural preset registry

Maps every AnimationPresetID to a pure generator
    (params, base_state, version) -> List[Step]
and to its parameter type. Built from the enum at import time so a preset
id without a generator is an import error rather than a silent fallback.
"""

from typing import Callable, Dict, List, Tuple, Type

from huebeat.animations.chase import build_chase_steps
from huebeat.animations.gradient_crossfade import build_gradient_crossfade_steps
from huebeat.animations.lightning import build_lightning_steps
from huebeat.models.animation import (
    MAX_PRESET_STEPS,
    ChaseParams,
    GradientCrossfadeParams,
    LightningParams,
    PresetDescriptor,
    Step,
)
from huebeat.models.enums import AnimationPresetID, LogCategory
from huebeat.models.light_state import LightState
from huebeat.utils.logger import get_logger

log = get_logger().for_category(LogCategory.ANIMATION)

PresetGenerator = Callable[..., List[Step]]


def _build_preset_registry() -> Dict[AnimationPresetID, Tuple[PresetGenerator, Type]]:
    """Build preset registry from AnimationPresetID enum"""
    class_map = {
        AnimationPresetID.CHASE: (build_chase_steps, ChaseParams),
        AnimationPresetID.GRADIENT_CROSSFADE: (build_gradient_crossfade_steps, GradientCrossfadeParams),
        AnimationPresetID.LIGHTNING: (build_lightning_steps, LightningParams),
    }
    missing = [p.name for p in AnimationPresetID if p not in class_map]
    if missing:
        raise RuntimeError(f"Animation presets without generator: {missing}")
    return class_map


PRESET_GENERATORS: Dict[AnimationPresetID, Tuple[PresetGenerator, Type]] = _build_preset_registry()


def generate_preset_steps(descriptor: PresetDescriptor, base: LightState) -> List[Step]:
    """
    Run the generator for a preset descriptor.

    Params of the wrong type are replaced by that preset's defaults (with a
    warning); the result is capped at MAX_PRESET_STEPS.
    """
    generator, params_type = PRESET_GENERATORS[descriptor.preset_id]
    params = descriptor.params
    if not isinstance(params, params_type):
        log.warn(
            "Preset params do not match preset, using defaults",
            preset=descriptor.preset_id.value,
            params_type=type(params).__name__,
        )
        params = params_type()

    steps = generator(params, base, descriptor.version)
    if len(steps) > MAX_PRESET_STEPS:
        log.warn(
            "Preset produced too many steps, truncating",
            preset=descriptor.preset_id.value,
            steps=len(steps),
            limit=MAX_PRESET_STEPS,
        )
        steps = steps[:MAX_PRESET_STEPS]
    return steps
