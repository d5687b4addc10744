from .event_bus import EventBus
from .middleware import log_middleware

__all__ = ["EventBus", "log_middleware"]
