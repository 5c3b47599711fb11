"""Tenant Domain Entities

Minimal tenant records written by provisioning. Profile management is
handled elsewhere.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any
from sqlmodel import Field, Column
from sqlalchemy import String, JSON, UniqueConstraint
from src.domain.base import BaseModel, BigIntegerPK, generate_uuid


class TenantStatus(str, Enum):
    ACTIVE = "active"
    TRIAL = "trial"
    SUSPENDED = "suspended"


class MemberRole(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class Tenant(BaseModel, table=True):
    __tablename__ = "tenants"

    id: str = Field(
        default_factory=generate_uuid,
        sa_column=Column(String(64), primary_key=True),
    )

    slug: str = Field(sa_column=Column(String(100), nullable=False, unique=True))

    provision_key: Optional[str] = Field(
        default=None,
        sa_column=Column(String(128), nullable=True, unique=True),
        description="Client idempotency key of the provisioning request",
    )

    business_name: str = Field(sa_column=Column(String(255), nullable=False))

    owner_email: str = Field(sa_column=Column(String(255), nullable=False))

    plan: str = Field(sa_column=Column(String(30), nullable=False))

    status: TenantStatus = Field(default=TenantStatus.ACTIVE)

    limits: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))

    trial_ends_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)


class TenantMember(BaseModel, table=True):
    __tablename__ = "tenant_members"
    __table_args__ = (
        UniqueConstraint("tenant_id", "user_id", name="uq_tenant_members_tenant_user"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerPK, primary_key=True, autoincrement=True),
    )

    tenant_id: str = Field(sa_column=Column(String(64), nullable=False, index=True))

    user_id: str = Field(sa_column=Column(String(64), nullable=False))

    email: str = Field(sa_column=Column(String(255), nullable=False))

    role: MemberRole = Field(default=MemberRole.OWNER)

    created_at: datetime = Field(default_factory=datetime.utcnow)


class SubscriptionEvent(BaseModel, table=True):
    """Audit record of subscription lifecycle changes"""

    __tablename__ = "subscription_events"
    __table_args__ = (
        UniqueConstraint("tenant_id", "event_type", "reference_id", name="uq_subscription_events_reference"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerPK, primary_key=True, autoincrement=True),
    )

    tenant_id: str = Field(sa_column=Column(String(64), nullable=False, index=True))

    event_type: str = Field(sa_column=Column(String(50), nullable=False))

    plan: str = Field(sa_column=Column(String(30), nullable=False))

    reference_id: str = Field(sa_column=Column(String(255), nullable=False))

    event_metadata: Optional[Dict[str, Any]] = Field(
        default=None,
        sa_column=Column("metadata", JSON, nullable=True),
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)
