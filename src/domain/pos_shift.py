"""POS Shift Domain Entity

Cash register session accumulating running sale totals.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import Integer, Numeric
from src.domain.base import BaseModel, BigIntegerPK


class ShiftStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class PosShift(BaseModel, table=True):
    __tablename__ = "pos_shifts"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerPK, primary_key=True, autoincrement=True),
    )

    tenant_id: str = Field(index=True)

    status: ShiftStatus = Field(default=ShiftStatus.OPEN)

    total_transactions: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))

    total_sales: Decimal = Field(default=Decimal("0"), sa_column=Column(Numeric(12, 2), nullable=False, default=0))

    cash_sales: Decimal = Field(default=Decimal("0"), sa_column=Column(Numeric(12, 2), nullable=False, default=0))

    card_sales: Decimal = Field(default=Decimal("0"), sa_column=Column(Numeric(12, 2), nullable=False, default=0))

    other_sales: Decimal = Field(default=Decimal("0"), sa_column=Column(Numeric(12, 2), nullable=False, default=0))

    opened_at: datetime = Field(default_factory=datetime.utcnow)

    closed_at: Optional[datetime] = Field(default=None)
