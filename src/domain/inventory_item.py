"""Inventory Domain Entities

InventoryItem is the stock record of one sellable product per tenant.
InventoryMovement is the immutable audit trail of stock changes.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, Integer, String, UniqueConstraint
from src.domain.base import BaseModel, BigIntegerPK


class InventoryItem(BaseModel, table=True):
    """
    Inventory Item - Stock level of one product

    Domain Rules:
    - quantity_on_hand >= 0 and quantity_reserved >= 0
    - available = on_hand - reserved never goes negative through a sale
    - Mutated only by the sale processor while holding the row lock
    """

    __tablename__ = "inventory_items"
    __table_args__ = (
        UniqueConstraint("tenant_id", "product_id", name="uq_inventory_items_tenant_product"),
        CheckConstraint("quantity_on_hand >= 0", name="on_hand_non_negative"),
        CheckConstraint("quantity_reserved >= 0", name="reserved_non_negative"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerPK, primary_key=True, autoincrement=True),
    )

    tenant_id: str = Field(index=True)

    product_id: str = Field(sa_column=Column(String(64), nullable=False))

    name: str = Field(default="", sa_column=Column(String(255), nullable=False, default=""))

    sku: Optional[str] = Field(default=None, sa_column=Column(String(100), nullable=True))

    quantity_on_hand: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))

    quantity_reserved: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))

    low_stock_threshold: int = Field(default=10, sa_column=Column(Integer, nullable=False, default=10))

    in_stock: bool = Field(default=True)

    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def available(self) -> int:
        return self.quantity_on_hand - self.quantity_reserved


class InventoryMovement(BaseModel, table=True):
    __tablename__ = "inventory_movements"
    __table_args__ = (
        Index("ix_inventory_movements_tenant_created", "tenant_id", "created_at"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerPK, primary_key=True, autoincrement=True),
    )

    tenant_id: str = Field(index=True)

    inventory_item_id: int = Field(index=True)

    product_id: str = Field(sa_column=Column(String(64), nullable=False))

    movement_type: str = Field(sa_column=Column(String(30), nullable=False))

    quantity_change: int = Field(sa_column=Column(Integer, nullable=False))

    quantity_before: int = Field(sa_column=Column(Integer, nullable=False))

    quantity_after: int = Field(sa_column=Column(Integer, nullable=False))

    reference: Optional[str] = Field(default=None, sa_column=Column(String(100), nullable=True))

    created_at: datetime = Field(default_factory=datetime.utcnow)
