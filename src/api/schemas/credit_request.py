"""Request schemas for Credit API

Pydantic models for validating incoming HTTP requests.
"""

from typing import Optional, Dict, Any
from pydantic import BaseModel, Field, field_validator
from src.domain.ledger_entry import GRANT_KINDS


class ConsumeRequestSchema(BaseModel):
    """
    Request schema for consuming credits

    Used for POST /credits/consume endpoint.
    """

    tenant_id: str = Field(
        ...,
        min_length=1,
        description="Tenant identifier (required, non-empty)"
    )

    action_key: str = Field(
        ...,
        min_length=1,
        description="Action being paid for"
    )

    amount: Optional[int] = Field(
        default=None,
        ge=0,
        description="Explicit cost, overrides the configured action cost"
    )

    description: Optional[str] = Field(default=None)

    reference_id: Optional[str] = Field(
        default=None,
        description="Caller reference; repeated references are not charged twice"
    )

    metadata: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Optional metadata for audit trail"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "tenant_id": "tenant_xyz789",
                "action_key": "ai.generate_description",
                "reference_id": "product_456:description",
                "metadata": {"model": "gpt-4"}
            }
        }


class GrantRequestSchema(BaseModel):
    """
    Request schema for granting credits

    Used for POST /credits/grant endpoint.
    """

    tenant_id: str = Field(..., min_length=1)

    amount: int = Field(..., gt=0, description="Credits to add (must be > 0)")

    kind: str = Field(default="grant", description="grant, refund, signup_bonus or purchase")

    description: str = Field(..., min_length=1)

    reference_id: Optional[str] = Field(default=None)

    metadata: Optional[Dict[str, Any]] = Field(default=None)

    @field_validator('kind')
    @classmethod
    def validate_kind(cls, v):
        """Only grant kinds can add credits"""
        if v not in {k.value for k in GRANT_KINDS}:
            raise ValueError(f"kind must be one of {sorted(k.value for k in GRANT_KINDS)}")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "tenant_id": "tenant_xyz789",
                "amount": 5000,
                "kind": "purchase",
                "description": "Credit pack 5k",
                "reference_id": "order_123"
            }
        }
