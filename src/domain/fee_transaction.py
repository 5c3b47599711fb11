"""Fee Transaction Domain Entity

Platform fee derived from a confirmed sale. At most one per sale.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import BigInteger, Numeric
from src.domain.base import BaseModel, BigIntegerPK


class FeeStatus(str, Enum):
    PENDING = "pending"
    COLLECTED = "collected"
    WAIVED = "waived"


class FeeTransaction(BaseModel, table=True):
    """
    Fee Transaction - Platform commission on a sale

    Domain Rules:
    - sale_id is unique (a sale is charged at most once)
    - fee_amount = sale_total * fee_rate / 100, rounded to cents
    """

    __tablename__ = "fee_transactions"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerPK, primary_key=True, autoincrement=True),
    )

    tenant_id: str = Field(index=True)

    sale_id: int = Field(sa_column=Column(BigInteger, nullable=False, unique=True))

    sale_total: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))

    fee_rate: Decimal = Field(sa_column=Column(Numeric(5, 2), nullable=False))

    fee_amount: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))

    status: FeeStatus = Field(default=FeeStatus.PENDING)

    created_at: datetime = Field(default_factory=datetime.utcnow)
