"""Unified Order Domain Entity

Cross-channel normalized record mirroring a sale (POS, menu, wholesale,
retail) for reporting.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Dict, Any
from sqlmodel import Field, Column, Index
from sqlalchemy import Numeric, String, JSON, UniqueConstraint
from src.domain.base import BaseModel, BigIntegerPK


class UnifiedOrder(BaseModel, table=True):
    __tablename__ = "unified_orders"
    __table_args__ = (
        UniqueConstraint("source_channel", "source_id", name="uq_unified_orders_source"),
        Index("ix_unified_orders_tenant_created", "tenant_id", "created_at"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerPK, primary_key=True, autoincrement=True),
    )

    tenant_id: str = Field(index=True)

    order_number: str = Field(sa_column=Column(String(50), nullable=False))

    source_channel: str = Field(sa_column=Column(String(20), nullable=False))

    source_id: str = Field(sa_column=Column(String(64), nullable=False))

    status: str = Field(sa_column=Column(String(20), nullable=False))

    subtotal: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))

    tax_amount: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))

    discount_amount: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))

    total: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))

    payment_method: str = Field(sa_column=Column(String(20), nullable=False))

    payment_status: str = Field(sa_column=Column(String(20), nullable=False))

    customer_id: Optional[int] = Field(default=None)

    items: List[Dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)
