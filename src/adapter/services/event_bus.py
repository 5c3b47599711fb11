"""In-process event bus

Handlers are keyed by event_type. Errors are caught per handler so a
failing subscriber cannot fail the already committed producer.
"""

import logging
from collections import defaultdict
from typing import Awaitable, Callable, Dict, List, Type
from src.app.services.event_publisher import EventPublisher
from src.domain.events import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], Awaitable[object]]


class InMemoryEventBus(EventPublisher):

    def __init__(self):
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)

    def subscribe(self, event_class: Type[DomainEvent], handler: EventHandler) -> None:
        self._handlers[event_class.event_type].append(handler)

    def handlers_for(self, event_type: str) -> List[EventHandler]:
        return list(self._handlers.get(event_type, []))

    async def publish(self, event: DomainEvent) -> None:
        handlers = self.handlers_for(event.event_type)
        if not handlers:
            logger.debug(f"No handlers for event {event.event_type}")
            return

        for handler in handlers:
            try:
                await handler(event)
            except Exception as e:
                logger.error(
                    f"Handler {getattr(handler, '__qualname__', handler)!s} failed "
                    f"for event {event.event_type}: {e}",
                    exc_info=True,
                )
