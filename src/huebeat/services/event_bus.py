"""
Event Bus - advisory notification routing

Implements pub-sub pattern:
- Publishers: publish(event)
- Subscribers: subscribe(event_type, handler, priority, filter_fn)
- Middleware: add_middleware(middleware_fn)

Nothing in the engine waits on a subscriber: handlers observe activity
(UI monitors, logging), they never feed back into frame production.
"""

import asyncio
from dataclasses import dataclass
from typing import Callable, Deque, Dict, List, Optional
from collections import deque

from huebeat.models.enums import LogCategory
from huebeat.models.events import Event, EventType
from huebeat.utils.logger import get_logger

log = get_logger().for_category(LogCategory.EVENT)


@dataclass
class EventHandler:
    """Event handler registration"""
    handler: Callable[[Event], None]
    priority: int
    filter_fn: Optional[Callable[[Event], bool]]


class EventBus:
    """
    Central event bus for pub-sub event handling

    Features:
    - Priority-based handler execution (high priority first)
    - Per-handler filtering
    - Middleware pipeline (logging, blocking, throttling)
    - Async/sync handler support (auto-detected)
    - Fault tolerance (one handler crash doesn't stop others)

    Example:
        bus = EventBus()

        bus.subscribe(
            EventType.MAPPING_TRIGGERED,
            on_triggered,
            priority=10,
            filter_fn=lambda e: e.target_id == "desk"
        )

        await bus.publish(MappingTriggeredEvent("r1", "desk", 100, midi, ["desk"]))
    """

    def __init__(self, history_limit: int = 100):
        self._handlers: Dict[EventType, List[EventHandler]] = {}
        self._middleware: List[Callable[[Event], Optional[Event]]] = []
        self._event_history: Deque[Event] = deque(maxlen=history_limit)
        self.handler_errors = 0

    def subscribe(
        self,
        event_type: EventType,
        handler: Callable[[Event], None],
        priority: int = 0,
        filter_fn: Optional[Callable[[Event], bool]] = None
    ) -> None:
        """
        Subscribe to event type

        Args:
            event_type: Which events to listen for
            handler: Function to call (can be async or sync)
            priority: Execution priority (higher = called first, default: 0)
            filter_fn: Optional filter (return True = handle, False = skip)
        """
        handlers = self._handlers.setdefault(event_type, [])
        handlers.append(EventHandler(handler, priority, filter_fn))
        handlers.sort(key=lambda h: h.priority, reverse=True)

        log.debug(
            "Event handler subscribed",
            event_type=event_type.name,
            handler=getattr(handler, "__name__", repr(handler)),
            priority=priority
        )

    def unsubscribe(self, event_type: EventType, handler: Callable[[Event], None]) -> bool:
        handlers = self._handlers.get(event_type, [])
        for entry in handlers:
            if entry.handler == handler:
                handlers.remove(entry)
                return True
        return False

    def add_middleware(self, middleware: Callable[[Event], Optional[Event]]) -> None:
        """
        Add middleware to event processing pipeline

        Middleware can modify events (return a new event), block them
        (return None) or just observe. Runs in registration order.
        """
        self._middleware.append(middleware)
        log.debug("Middleware registered", middleware=getattr(middleware, "__name__", repr(middleware)))

    async def publish(self, event: Event) -> None:
        """
        Publish event to all subscribers

        Flow:
        1. Apply middleware (can modify or block event)
        2. Save to event history
        3. Execute handlers by priority, honoring per-handler filters
        4. Catch and log handler exceptions
        """
        for middleware in self._middleware:
            processed_event = middleware(event)
            if processed_event is None:
                return
            event = processed_event

        self._event_history.append(event)

        handlers = self._handlers.get(event.type, [])
        if not handlers:
            return

        for handler_entry in list(handlers):
            try:
                if handler_entry.filter_fn and not handler_entry.filter_fn(event):
                    continue

                if asyncio.iscoroutinefunction(handler_entry.handler):
                    await handler_entry.handler(event)
                else:
                    handler_entry.handler(event)
            except Exception as e:
                self.handler_errors += 1
                log.error(
                    f"Event handler failed: {getattr(handler_entry.handler, '__name__', '?')} for {event.type.name}",
                    exception=e
                )

    def get_event_history(self, limit: int = 10) -> List[Event]:
        """Recent events (newest last)"""
        if limit <= 0:
            return []
        return list(self._event_history)[-limit:]

    def clear_history(self) -> None:
        self._event_history.clear()
