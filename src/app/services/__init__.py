from .unit_of_work import UnitOfWork
from .event_publisher import EventPublisher
from .ledger_posting import LedgerPoster
from .store_errors import is_store_busy, raise_if_store_busy

__all__ = [
    "UnitOfWork",
    "EventPublisher",
    "LedgerPoster",
    "is_store_busy",
    "raise_if_store_busy",
]
