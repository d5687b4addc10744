from __future__ import annotations

from collections import deque
from typing import Deque, Dict, List, Optional

from huebeat.hardware.sink_interface import LightSink
from huebeat.models.frame import LightStateFrame


class VirtualSink(LightSink):
    """
    In-memory sink for tests and dry runs.

    Keeps the latest frame per target plus a bounded history. Setting
    `accepting = False` (or a `capacity` per tick) simulates a busy sink.
    """

    def __init__(self, history_size: int = 1000, capacity: Optional[int] = None):
        self.latest: Dict[str, LightStateFrame] = {}
        self.history: Deque[LightStateFrame] = deque(maxlen=history_size)
        self.capacity = capacity
        self.accepting = True
        self.refused = 0
        self._tick: Optional[int] = None
        self._taken_this_tick = 0

    def offer(self, frame: LightStateFrame) -> bool:
        if frame.tick != self._tick:
            self._tick = frame.tick
            self._taken_this_tick = 0

        if not self.accepting or (self.capacity is not None and self._taken_this_tick >= self.capacity):
            self.refused += 1
            return False

        self._taken_this_tick += 1
        self.latest[frame.target_id] = frame
        self.history.append(frame)
        return True

    def frames_for(self, target_id: str) -> List[LightStateFrame]:
        return [f for f in self.history if f.target_id == target_id]

    def clear(self) -> None:
        self.latest.clear()
        self.history.clear()
        self.refused = 0
