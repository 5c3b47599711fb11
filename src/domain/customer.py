"""Customer Domain Entity

Loyalty projection of a tenant's customer. Profile data lives in the CRM.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import BigInteger, Numeric
from src.domain.base import BaseModel, BigIntegerPK


class Customer(BaseModel, table=True):
    __tablename__ = "customers"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerPK, primary_key=True, autoincrement=True),
    )

    tenant_id: str = Field(index=True)

    loyalty_points: int = Field(default=0, sa_column=Column(BigInteger, nullable=False, default=0))

    total_spent: Decimal = Field(default=Decimal("0"), sa_column=Column(Numeric(14, 2), nullable=False, default=0))

    last_purchase_at: Optional[datetime] = Field(default=None)
