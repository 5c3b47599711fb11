"""Request schemas for Sale API

Amount rules (positive quantities, non-negative prices and totals) are
enforced by the use case and reported as INVARIANT_VIOLATION.
"""

from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator
from src.domain.sale_transaction import PaymentMethod


class SaleLineRequestSchema(BaseModel):
    product_id: str = Field(..., min_length=1)
    quantity: int
    unit_price: Decimal


class SaleRequestSchema(BaseModel):
    """
    Request schema for executing a sale

    Used for POST /sales endpoint.
    """

    tenant_id: str = Field(..., min_length=1)

    line_items: List[SaleLineRequestSchema] = Field(...)

    payment_method: PaymentMethod = Field(default=PaymentMethod.CASH)

    payment_status: str = Field(default="completed")

    tax_amount: Decimal = Field(default=Decimal("0"))

    discount_amount: Decimal = Field(default=Decimal("0"))

    shift_id: Optional[int] = None

    customer_id: Optional[int] = None

    @field_validator('payment_status')
    @classmethod
    def validate_payment_status(cls, v):
        """Normalize payment status"""
        return v.strip().lower()

    class Config:
        json_schema_extra = {
            "example": {
                "tenant_id": "tenant_xyz789",
                "line_items": [
                    {"product_id": "prod_1", "quantity": 2, "unit_price": "12.50"}
                ],
                "payment_method": "card",
                "payment_status": "completed",
                "tax_amount": "2.00",
                "shift_id": 12
            }
        }


class ConfirmSaleRequestSchema(BaseModel):
    tenant_id: str = Field(..., min_length=1)
