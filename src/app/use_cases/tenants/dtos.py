"""Data Transfer Objects for Tenant Use Cases"""

from datetime import datetime
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field


class ProvisionTenantCommandDTO(BaseModel):
    """
    Command DTO for provisioning a tenant

    Replaying the same command (same idempotency_key, or same slug and
    owner) returns the original tenant without granting credits again.
    """

    owner_user_id: str = Field(..., description="Authenticated user becoming the owner")
    owner_email: str = Field(..., description="Owner e-mail")
    business_name: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1, description="Unique tenant slug")
    plan: str = Field(default="free", description="free, starter, professional, enterprise or trial")
    idempotency_key: Optional[str] = Field(
        default=None,
        description="Client request key; a replay with the same key returns the original tenant"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "owner_user_id": "user_123",
                "owner_email": "owner@example.com",
                "business_name": "Corner Shop",
                "slug": "corner-shop",
                "plan": "starter",
                "idempotency_key": "signup-7f3a"
            }
        }


class TenantRecordDTO(BaseModel):
    tenant_id: str
    slug: str
    business_name: str
    plan: str
    status: str
    limits: Dict[str, Any]
    trial_ends_at: Optional[datetime] = None
    balance: int = Field(..., description="Balance after signup (-1 = unlimited)")
    unlimited: bool
    created: bool = Field(..., description="False when an earlier provisioning was replayed")
