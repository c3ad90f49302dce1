# File: src/ecoride/infrastructure/messaging.py
"""
In-process messaging for EcoRide Car Rental System

Domain events collected by aggregates are published here after a
transition has been committed. Handlers run synchronously; a failing
handler is logged and never undoes the transition that raised the event.
"""

from abc import ABC, abstractmethod
from collections import deque
from typing import Deque, Dict, List, Optional
import logging

from ..domain.models import DomainEvent, EventType


# ============================================================================
# EVENT HANDLERS
# ============================================================================

class EventHandler(ABC):
    """Abstract base class for event handlers"""

    @abstractmethod
    def handle(self, event: DomainEvent) -> None:
        pass

    def can_handle(self, event: DomainEvent) -> bool:
        return True


class LoggingEventHandler(EventHandler):
    """Writes every event to the application log and keeps the latest ones"""

    def __init__(self, max_events: int = 100):
        self.recent: Deque[DomainEvent] = deque(maxlen=max_events)
        self.logger = logging.getLogger(self.__class__.__name__)

    def handle(self, event: DomainEvent) -> None:
        self.recent.append(event)
        self.logger.info(f"{event.event_type.value}: {event.data()}")


# ============================================================================
# EVENT BUS (In-memory)
# ============================================================================

class EventBus:
    """
    In-memory event bus for intra-process event publishing

    Implements publish/subscribe within the same process.
    """

    def __init__(self):
        self._subscribers: Dict[EventType, List[EventHandler]] = {}
        self._logger = logging.getLogger(self.__class__.__name__)

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        if event_type not in self._subscribers:
            self._subscribers[event_type] = []

        if handler not in self._subscribers[event_type]:
            self._subscribers[event_type].append(handler)
            self._logger.debug(f"Subscribed {handler.__class__.__name__} to {event_type.value}")

    def subscribe_all(self, handler: EventHandler) -> None:
        for event_type in EventType:
            self.subscribe(event_type, handler)

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> None:
        handlers = self._subscribers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)
            self._logger.debug(f"Unsubscribed {handler.__class__.__name__} from {event_type.value}")

    def publish(self, event: DomainEvent) -> int:
        """
        Publish an event to all subscribers
        Returns: number of handlers that processed the event
        """
        self._logger.debug(f"Publishing event: {event.event_type.value} (ID: {event.event_id})")

        handled = 0
        for handler in list(self._subscribers.get(event.event_type, [])):
            if not handler.can_handle(event):
                continue
            try:
                handler.handle(event)
                handled += 1
            except Exception as e:
                self._logger.error(
                    f"Error handling event {event.event_type.value} with "
                    f"{handler.__class__.__name__}: {e}",
                    exc_info=True
                )
        return handled

    def publish_all(self, events: List[DomainEvent]) -> None:
        for event in events:
            self.publish(event)

    def subscriber_count(self, event_type: Optional[EventType] = None) -> int:
        if event_type is not None:
            return len(self._subscribers.get(event_type, []))
        return sum(len(handlers) for handlers in self._subscribers.values())

    def clear_subscribers(self) -> None:
        """Clear all subscribers (for testing)"""
        self._subscribers.clear()
