from .unit_of_work import SqlAlchemyUnitOfWork
from .event_bus import InMemoryEventBus

__all__ = [
    "SqlAlchemyUnitOfWork",
    "InMemoryEventBus",
]
