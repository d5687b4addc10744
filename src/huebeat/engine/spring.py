"""
Transition Smoother — spring-physics interpolation per numeric channel.

Each (target, channel) pair owns at most one SpringChannel:

    acceleration = (-stiffness * (position - target) - damping * velocity) / mass
    velocity    += acceleration * dt
    position    += velocity * dt

All channels are integrated by the Frame Scheduler tick (fixed dt); there
are no per-channel timers.

Channel specifics:
  - BRIGHTNESS / SATURATION: 0-254, position clamped to range
  - HUE: 0-65535 circular. The spring runs in unwrapped space toward the
    shortest-path target and the output is wrapped, so 64000 → 1000 crosses
    the wrap point instead of sweeping the whole wheel. Hue uses half the
    preset stiffness, floored at critical damping so overdamped presets
    still settle before the safety timeout.

Settlement: |velocity| < ε and |error| < ε (ε = 1% of channel range), or the
safety timeout elapses, or the state becomes non-finite.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from huebeat.models.enums import LogCategory, SpringChannelID, SpringPreset
from huebeat.models.transition import SpringConfig, spring_config
from huebeat.utils.colors import hue_distance
from huebeat.utils.logger import get_logger

log = get_logger().for_category(LogCategory.TRANSITION)

CHANNEL_RANGES: Dict[SpringChannelID, Tuple[float, float]] = {
    SpringChannelID.BRIGHTNESS: (0.0, 254.0),
    SpringChannelID.HUE: (0.0, 65535.0),
    SpringChannelID.SATURATION: (0.0, 254.0),
}

EPSILON: Dict[SpringChannelID, float] = {
    ch: 0.01 * (hi - lo) for ch, (lo, hi) in CHANNEL_RANGES.items()
}

HUE_STIFFNESS_FACTOR = 0.5
HUE_SPAN = 65536.0
DEFAULT_TIMEOUT_MS = 2000.0


def hue_config(config: SpringConfig) -> SpringConfig:
    """
    Hue variant of a preset: half stiffness, but never below critical
    damping (c^2 / 4m) and never above the preset itself.
    """
    critical = config.damping ** 2 / (4.0 * config.mass)
    stiffness = min(config.stiffness, max(config.stiffness * HUE_STIFFNESS_FACTOR, critical))
    return SpringConfig(stiffness, config.damping, config.mass)


@dataclass
class SpringChannel:
    """
    Smoothing state for one numeric channel of one target

    Attributes:
        channel: Which attribute
        position: Current value (unwrapped for hue)
        target: Destination (unwrapped for hue)
        config: Spring parameters (None = instant)
        velocity: Units per second
        elapsed_ms: Time since the transition started
        settled: Reached target (channel can be discarded)
    """

    channel: SpringChannelID
    position: float
    target: float
    config: Optional[SpringConfig]
    velocity: float = 0.0
    elapsed_ms: float = 0.0
    settled: bool = False

    @property
    def epsilon(self) -> float:
        return EPSILON[self.channel]

    @property
    def value(self) -> float:
        """Output value in the channel's native range"""
        if self.channel is SpringChannelID.HUE:
            return self.position % HUE_SPAN
        return self.position

    def step(self, dt_ms: float, timeout_ms: float = DEFAULT_TIMEOUT_MS) -> bool:
        """
        Integrate one fixed step.

        Returns:
            True once the channel is settled
        """
        if self.settled:
            return True

        if self.config is None:
            self._settle()
            return True

        dt = dt_ms / 1000.0
        cfg = self.config
        acceleration = (-cfg.stiffness * (self.position - self.target) - cfg.damping * self.velocity) / cfg.mass
        self.velocity += acceleration * dt
        self.position += self.velocity * dt
        self.elapsed_ms += dt_ms

        if not (math.isfinite(self.position) and math.isfinite(self.velocity)):
            log.warn("Spring diverged, forcing settle", channel=self.channel.name, config=repr(cfg))
            self._settle()
            return True

        if self.channel is not SpringChannelID.HUE:
            lo, hi = CHANNEL_RANGES[self.channel]
            self.position = max(lo, min(hi, self.position))

        eps = self.epsilon
        if abs(self.velocity) < eps and abs(self.position - self.target) < eps:
            self._settle()
        elif self.elapsed_ms >= timeout_ms:
            log.debug("Spring safety timeout", channel=self.channel.name, elapsed_ms=round(self.elapsed_ms))
            self._settle()
        return self.settled

    def _settle(self) -> None:
        self.position = self.target
        self.velocity = 0.0
        self.settled = True


class TransitionSmoother:
    """
    Owns every live SpringChannel, keyed by (target_id, channel).

    Example:
        smoother = TransitionSmoother()
        smoother.set_target("desk", SpringChannelID.BRIGHTNESS, current=0, value=254,
                            preset=SpringPreset.GENTLE)
        smoother.step(20.0)
        smoother.value("desk", SpringChannelID.BRIGHTNESS)
    """

    def __init__(self, timeout_ms: float = DEFAULT_TIMEOUT_MS):
        self.timeout_ms = timeout_ms
        self._channels: Dict[Tuple[str, SpringChannelID], SpringChannel] = {}
        self.forced_settles = 0

    # ============================================================
    # Control
    # ============================================================

    def set_target(
        self,
        target_id: str,
        channel: SpringChannelID,
        current: float,
        value: float,
        preset: SpringPreset = SpringPreset.NONE,
    ) -> Optional[SpringChannel]:
        """
        Start a transition, replacing any in-flight channel.

        The start point is the in-flight interpolated value when a channel
        exists, otherwise `current`. Returns None when there is nothing to do
        (start already equals the new value).
        """
        key = (target_id, channel)
        existing = self._channels.pop(key, None)
        start = existing.value if existing is not None else float(current)

        if channel is SpringChannelID.HUE:
            start = start % HUE_SPAN
            goal = start + hue_distance(start, float(value) % HUE_SPAN)
        else:
            goal = float(value)

        if abs(goal - start) < 1e-9:
            return None

        config = spring_config(preset)
        if config is not None and channel is SpringChannelID.HUE:
            config = hue_config(config)

        spring = SpringChannel(channel=channel, position=start, target=goal, config=config)
        self._channels[key] = spring
        return spring

    def freeze(self, target_id: str) -> Dict[SpringChannelID, float]:
        """
        Stop every channel of a target where it currently is.

        Returns:
            The interpolated value each cancelled channel had reached
        """
        frozen: Dict[SpringChannelID, float] = {}
        for key in [k for k in self._channels if k[0] == target_id]:
            frozen[key[1]] = self._channels.pop(key).value
        return frozen

    def cancel(self, target_id: str) -> None:
        self.freeze(target_id)

    def clear(self) -> None:
        self._channels.clear()

    # ============================================================
    # Tick
    # ============================================================

    def step(self, dt_ms: float) -> List[Tuple[str, SpringChannelID]]:
        """
        Integrate all channels by one tick and discard settled ones.

        Returns:
            Keys that settled during this step
        """
        settled = []
        for key, spring in list(self._channels.items()):
            if spring.step(dt_ms, self.timeout_ms):
                if spring.elapsed_ms >= self.timeout_ms:
                    self.forced_settles += 1
                settled.append(key)
                del self._channels[key]
        return settled

    # ============================================================
    # Queries
    # ============================================================

    def value(self, target_id: str, channel: SpringChannelID, fallback: Optional[float] = None) -> Optional[float]:
        """Interpolated value, or fallback when the channel is at rest"""
        spring = self._channels.get((target_id, channel))
        return spring.value if spring is not None else fallback

    def channel(self, target_id: str, channel: SpringChannelID) -> Optional[SpringChannel]:
        return self._channels.get((target_id, channel))

    def is_active(self, target_id: str) -> bool:
        return any(k[0] == target_id for k in self._channels)

    @property
    def active_count(self) -> int:
        return len(self._channels)

    def __repr__(self) -> str:
        return f"TransitionSmoother(active={len(self._channels)}, timeout={self.timeout_ms}ms)"
