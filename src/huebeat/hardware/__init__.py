from .sink_interface import LightSink
from .virtual_sink import VirtualSink
from .queue_sink import QueueSink

__all__ = ["LightSink", "VirtualSink", "QueueSink"]
