"""Domain Events

Value objects exchanged between use cases through the EventPublisher.
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar
from pydantic import BaseModel, Field


class DomainEvent(BaseModel):
    event_type: ClassVar[str] = "domain.event"

    occurred_at: datetime = Field(default_factory=datetime.utcnow)


class SaleConfirmed(DomainEvent):
    """
    A sale entered the confirmed state for the first time

    Consumed by the platform fee calculator.
    """

    event_type: ClassVar[str] = "sale.confirmed"

    tenant_id: str
    sale_id: int
    transaction_number: str
    total: Decimal
