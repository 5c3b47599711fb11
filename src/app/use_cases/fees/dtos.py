"""Data Transfer Objects for Fee Use Cases"""

from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel


class FeeTransactionDTO(BaseModel):
    fee_id: int
    tenant_id: str
    sale_id: int
    sale_total: Decimal
    fee_rate: Decimal
    fee_amount: Decimal
    status: str
    created_at: datetime
    replayed: bool = False
