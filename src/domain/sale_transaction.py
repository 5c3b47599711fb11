"""Sale Transaction Domain Entities

One SaleTransaction per completed point-of-sale event, with its line items.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, List, Dict, Any
from sqlmodel import Field, Column, Index
from sqlalchemy import BigInteger, ForeignKey, Integer, Numeric, String, JSON
from src.domain.base import BaseModel, BigIntegerPK


class SaleStatus(str, Enum):
    """Sale lifecycle status"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    OTHER = "other"


class SaleTransaction(BaseModel, table=True):
    """
    Sale Transaction - Header of a POS sale

    Domain Rules:
    - transaction_number is unique
    - total = subtotal + tax_amount - discount_amount, fixed at creation
    - Created together with its stock decrements, never partially
    """

    __tablename__ = "sale_transactions"
    __table_args__ = (
        Index("ix_sale_transactions_tenant_created", "tenant_id", "created_at"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerPK, primary_key=True, autoincrement=True),
    )

    tenant_id: str = Field(index=True)

    transaction_number: str = Field(
        sa_column=Column(String(50), nullable=False, unique=True),
    )

    status: SaleStatus = Field(default=SaleStatus.PENDING)

    subtotal: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))

    tax_amount: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False, default=0))

    discount_amount: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False, default=0))

    total: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))

    payment_method: PaymentMethod = Field(default=PaymentMethod.CASH)

    payment_status: str = Field(default="completed", sa_column=Column(String(20), nullable=False))

    shift_id: Optional[int] = Field(default=None)

    customer_id: Optional[int] = Field(default=None)

    low_stock_warnings: Optional[List[Dict[str, Any]]] = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
        description="Low-stock warnings produced by this sale"
    )

    confirmed_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)


class SaleLineItem(BaseModel, table=True):
    __tablename__ = "sale_line_items"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerPK, primary_key=True, autoincrement=True),
    )

    sale_id: int = Field(
        sa_column=Column(BigInteger, ForeignKey("sale_transactions.id", ondelete="CASCADE"), nullable=False, index=True),
    )

    product_id: str = Field(sa_column=Column(String(64), nullable=False))

    product_name: str = Field(default="", sa_column=Column(String(255), nullable=False, default=""))

    quantity: int = Field(sa_column=Column(Integer, nullable=False))

    unit_price: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))

    line_total: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))
