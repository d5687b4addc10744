"""
QueueSink — bounded asyncio.Queue hand-off to an async consumer.

The scheduler side never awaits: put_nowait either succeeds or the frame is
refused. The consumer (e.g. a streaming client task) drains with get().
"""

from __future__ import annotations

import asyncio

from huebeat.hardware.sink_interface import LightSink
from huebeat.models.enums import LogCategory
from huebeat.models.frame import LightStateFrame
from huebeat.utils.logger import get_logger

log = get_logger().for_category(LogCategory.SINK)


class QueueSink(LightSink):

    def __init__(self, maxsize: int = 64):
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=max(1, maxsize))
        self.dropped = 0

    def offer(self, frame: LightStateFrame) -> bool:
        try:
            self.queue.put_nowait(frame)
        except asyncio.QueueFull:
            self.dropped += 1
            if self.dropped == 1 or self.dropped % 100 == 0:
                log.warn("Sink queue full, dropping frames", dropped=self.dropped, maxsize=self.queue.maxsize)
            return False
        return True

    async def get(self) -> LightStateFrame:
        return await self.queue.get()

    def qsize(self) -> int:
        return self.queue.qsize()

    def __repr__(self) -> str:
        return f"QueueSink(size={self.queue.qsize()}/{self.queue.maxsize}, dropped={self.dropped})"
