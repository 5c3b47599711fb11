"""Data Transfer Objects for Sale Use Cases"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field
from src.domain.sale_transaction import PaymentMethod


class SaleLineCommandDTO(BaseModel):
    """One requested line of a sale"""

    product_id: str = Field(..., description="Product identifier")
    quantity: int = Field(..., description="Units sold (must be > 0)")
    unit_price: Decimal = Field(..., description="Price per unit (must be >= 0)")


class ExecuteSaleCommandDTO(BaseModel):
    """
    Command DTO for executing a POS sale

    Amount invariants are checked by the use case so every violation is
    reported in one INVARIANT_VIOLATION error.
    """

    tenant_id: str = Field(
        ...,
        description="Tenant identifier"
    )

    line_items: List[SaleLineCommandDTO] = Field(
        ...,
        description="Requested lines; several lines may name the same product"
    )

    payment_method: PaymentMethod = Field(
        default=PaymentMethod.CASH,
        description="cash, card or other"
    )

    payment_status: str = Field(
        default="completed",
        description="'completed' creates a confirmed sale, anything else a pending one"
    )

    tax_amount: Decimal = Field(default=Decimal("0"))

    discount_amount: Decimal = Field(default=Decimal("0"))

    shift_id: Optional[int] = Field(
        default=None,
        description="Open POS shift receiving the sale totals"
    )

    customer_id: Optional[int] = Field(
        default=None,
        description="Customer earning loyalty points"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "tenant_id": "tenant_xyz789",
                "line_items": [
                    {"product_id": "prod_1", "quantity": 2, "unit_price": "12.50"},
                    {"product_id": "prod_2", "quantity": 1, "unit_price": "4.00"}
                ],
                "payment_method": "card",
                "tax_amount": "2.32",
                "discount_amount": "0",
                "shift_id": 12
            }
        }


class LowStockWarningDTO(BaseModel):
    """Stock level alert raised by a sale"""

    product_id: str
    product_name: str
    alert_level: str = Field(..., description="out_of_stock, critical or warning")
    remaining: int
    threshold: int


class StockShortageDTO(BaseModel):
    """A line that cannot be fulfilled"""

    product_id: str
    requested: int
    available: int
    reason: str = Field(..., description="not_found or insufficient")


class SaleResultDTO(BaseModel):
    """Result of a successful sale"""

    success: bool = True
    sale_id: int
    transaction_number: str
    status: str
    subtotal: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    total: Decimal
    warnings: List[LowStockWarningDTO] = Field(default_factory=list)
    created_at: datetime


class ConfirmSaleResponseDTO(BaseModel):
    sale_id: int
    transaction_number: str
    status: str
    total: Decimal
    confirmed_at: Optional[datetime] = None
    already_confirmed: bool = False
