"""
Enums for the MIDI-to-light performance engine
"""

from enum import Enum, auto


class MidiEventKind(Enum):
    """Typed MIDI message kinds fed in by the transport layer"""
    NOTE_ON = auto()
    NOTE_OFF = auto()
    CONTROL_CHANGE = auto()
    PROGRAM_CHANGE = auto()
    CLOCK = auto()          # 24 pulses per quarter note
    START = auto()          # 0xFA
    CONTINUE = auto()       # 0xFB
    STOP = auto()           # 0xFC


class TriggerKind(Enum):
    """Which MIDI message family a mapping rule listens to"""
    NOTE = "note"
    CC = "cc"


class TempoSource(Enum):
    """Where the current tempo estimate came from"""
    MIDI = "midi"
    MANUAL = "manual"
    DEFAULT = "default"


class TargetKind(Enum):
    """What a mapping rule drives"""
    LIGHT = "light"
    SCENE = "scene"


class TargetType(Enum):
    """Light metadata target type (bridge resource kind)"""
    LIGHT = "light"
    GROUPED_LIGHT = "grouped_light"


class ActionType(Enum):
    """
    Mapping action kinds

    Every member must have a concrete action class registered in
    models.mapping.ACTION_TYPES, otherwise import fails.
    """
    COLOR = "color"
    BRIGHTNESS = "brightness"
    TOGGLE = "toggle"
    EFFECT = "effect"
    GRADIENT = "gradient"


class BrightnessMode(Enum):
    """How an action derives brightness"""
    VELOCITY = "velocity"
    FIXED = "fixed"


class RetriggerMode(Enum):
    """What happens when a mapping fires while its animation still runs"""
    RESTART = "restart"     # Start again from step 0
    CONTINUE = "continue"   # Leave the running instance alone


class GradientMode(Enum):
    """Gradient rendering modes understood by gradient-capable lights"""
    INTERPOLATED_PALETTE = "interpolated_palette"
    INTERPOLATED_PALETTE_MIRRORED = "interpolated_palette_mirrored"
    RANDOM_PIXELATED = "random_pixelated"
    SEGMENTED_PALETTE = "segmented_palette"


class AnimationPresetID(Enum):
    """
    Procedural animation presets

    Every member must have a generator in animations.registry.PRESET_GENERATORS.
    """
    CHASE = "chase"
    GRADIENT_CROSSFADE = "gradientCrossfade"
    LIGHTNING = "lightning"


class EasingCurve(Enum):
    """Easing applied to an interpolation parameter (0.0-1.0)"""
    LINEAR = "linear"
    EASE_IN = "easeIn"
    EASE_OUT = "easeOut"
    EASE_IN_OUT = "easeInOut"


class BeatDivision(Enum):
    """Sync-group step grid, expressed as a fraction of one beat"""
    WHOLE = "1"
    HALF = "1/2"
    QUARTER = "1/4"
    EIGHTH = "1/8"
    SIXTEENTH = "1/16"

    @property
    def beats(self) -> float:
        """Length of one grid cell in beats"""
        if self is BeatDivision.WHOLE:
            return 1.0
        return 1.0 / int(self.value.split("/")[1])


class SpringPreset(Enum):
    """Named spring tunings (see models.transition.SPRING_PRESETS)"""
    NONE = "none"
    BOUNCE_IN = "bounceIn"
    BOUNCE_OUT = "bounceOut"
    GENTLE = "gentle"
    WOBBLY = "wobbly"
    STIFF = "stiff"
    SLOW = "slow"
    SNAPPY = "snappy"


class SpringChannelID(Enum):
    """Numeric light attributes smoothed by the spring model"""
    BRIGHTNESS = auto()
    HUE = auto()
    SATURATION = auto()


class LogLevel(Enum):
    """Log severity levels"""
    DEBUG = auto()
    INFO = auto()
    WARN = auto()
    ERROR = auto()


class LogCategory(Enum):
    """Log categories for grouping related events"""
    CONFIG = auto()         # Configuration loading, validation
    MIDI = auto()           # Incoming MIDI events, adapter
    TEMPO = auto()          # Clock tracking, BPM changes
    RESOLVER = auto()       # Rule matching, context changes
    ANIMATION = auto()      # Animation generation, start/stop
    TRANSITION = auto()     # Spring smoothing
    RENDER_ENGINE = auto()  # Frame scheduler tick loop
    SINK = auto()           # Output sinks
    EVENT = auto()          # Event bus events and handling
    SYSTEM = auto()         # Startup, shutdown, errors

    GENERAL = auto()    # Default general category
