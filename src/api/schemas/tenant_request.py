"""Request schema for the tenant provisioning API"""

import re
from typing import Optional
from pydantic import BaseModel, Field, field_validator

SLUG_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]{1,98}[a-z0-9]$")


class ProvisionTenantRequestSchema(BaseModel):
    """
    Request schema for provisioning a tenant

    Used for POST /tenants endpoint. The owner is the authenticated caller.
    """

    owner_user_id: str = Field(..., min_length=1)

    owner_email: str = Field(..., min_length=3)

    business_name: str = Field(..., min_length=1, max_length=255)

    slug: str = Field(..., description="Lowercase letters, digits and dashes")

    plan: str = Field(default="free")

    idempotency_key: Optional[str] = Field(default=None)

    @field_validator('slug')
    @classmethod
    def validate_slug(cls, v):
        v = v.strip().lower()
        if not SLUG_PATTERN.match(v):
            raise ValueError("slug must be 3-100 characters of lowercase letters, digits and dashes")
        return v

    @field_validator('owner_email')
    @classmethod
    def validate_email(cls, v):
        if "@" not in v:
            raise ValueError("owner_email must be an e-mail address")
        return v.strip().lower()
