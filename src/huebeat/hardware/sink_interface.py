"""
LightSink Protocol
==================
Output abstraction for light frames.
Minimal contract for any consumer (bridge streaming client, recorder, UI).
"""

from __future__ import annotations

from typing import Protocol

from huebeat.models.frame import LightStateFrame


class LightSink(Protocol):
    """
    Protocol defining the frame consumer interface.

    All implementations must provide:
    - offer: accept or refuse one frame without blocking
    """

    def offer(self, frame: LightStateFrame) -> bool:
        """
        Hand over one frame.

        Must return immediately. Returning False means the frame was not
        taken (sink busy); the scheduler counts it as dropped and never
        retries it.
        """
        ...
