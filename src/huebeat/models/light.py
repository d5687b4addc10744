from dataclasses import dataclass

from huebeat.models.enums import TargetType

MIN_GRADIENT_STOPS = 2
MAX_GRADIENT_STOPS = 5


@dataclass(frozen=True)
class LightInfo:
    """
    Static light metadata (capabilities)

    Only used to validate and clip generated parameters; never mutated.

    Attributes:
        id: Bridge resource id
        name: Display name
        target_type: LIGHT or GROUPED_LIGHT
        gradient: Supports multi-point gradients
        effects: Supports named effects
        max_gradient_stops: Gradient points the device accepts (2-5)
    """
    id: str
    name: str = ""
    target_type: TargetType = TargetType.LIGHT
    gradient: bool = False
    effects: bool = False
    max_gradient_stops: int = MAX_GRADIENT_STOPS

    def __post_init__(self):
        stops = max(MIN_GRADIENT_STOPS, min(MAX_GRADIENT_STOPS, int(self.max_gradient_stops)))
        object.__setattr__(self, "max_gradient_stops", stops)
