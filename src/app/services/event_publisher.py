"""Event Publisher Interface

Defines the contract for publishing domain events after commit.
"""

from abc import ABC, abstractmethod
from src.domain.events import DomainEvent


class EventPublisher(ABC):
    """
    Publishes domain events to interested handlers

    Events are published only after the producing unit of work committed.
    Handlers run in their own unit of work.
    """

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        """
        Publish an event

        Args:
            event: Domain event to deliver
        """
        pass
