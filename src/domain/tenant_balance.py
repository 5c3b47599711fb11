"""Tenant Balance Domain Entity

Cached projection of a tenant's credit ledger. One row per tenant.
The ledger (LedgerEntry) is the source of truth; this row is rewritten
only by the credit accounting use cases while holding a row lock.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import CheckConstraint, BigInteger
from src.domain.base import BaseModel, BigIntegerPK

UNLIMITED_BALANCE = -1


class TierStatus(str, Enum):
    """Billing tier of the tenant"""
    FREE = "free"
    PAID = "paid"


class TenantBalance(BaseModel, table=True):
    """
    Tenant Balance - Current credit balance per tenant

    Domain Rules:
    - One balance row per tenant (tenant_id is unique)
    - balance >= 0, or balance == UNLIMITED_BALANCE (-1)
    - For finite balances: balance == free_balance + purchased_balance
    - Never hard-deleted (suspended together with the tenant)
    """

    __tablename__ = "tenant_balances"
    __table_args__ = (
        CheckConstraint(
            f"balance >= 0 OR balance = {UNLIMITED_BALANCE}", name="balance_non_negative_or_unlimited"
        ),
        CheckConstraint("free_balance >= 0", name="free_balance_non_negative"),
        CheckConstraint("purchased_balance >= 0", name="purchased_balance_non_negative"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerPK, primary_key=True, autoincrement=True),
    )

    tenant_id: str = Field(
        index=True,
        unique=True,
        description="Tenant ID (unique - one balance per tenant)"
    )

    balance: int = Field(
        default=0,
        sa_column=Column(BigInteger, nullable=False, default=0),
        description="Current balance, -1 means unlimited"
    )

    free_balance: int = Field(
        default=0,
        sa_column=Column(BigInteger, nullable=False, default=0),
        description="Part of the balance coming from free grants"
    )

    purchased_balance: int = Field(
        default=0,
        sa_column=Column(BigInteger, nullable=False, default=0),
        description="Part of the balance coming from purchases"
    )

    lifetime_earned: int = Field(
        default=0,
        sa_column=Column(BigInteger, nullable=False, default=0),
    )

    lifetime_spent: int = Field(
        default=0,
        sa_column=Column(BigInteger, nullable=False, default=0),
    )

    tier_status: TierStatus = Field(
        default=TierStatus.FREE,
        description="Billing tier (free, paid)"
    )

    free_credits_expire_at: Optional[datetime] = Field(
        default=None,
        description="When free/trial credits stop being valid"
    )

    next_free_grant_at: Optional[datetime] = Field(
        default=None,
        description="When the next scheduled free grant is due"
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)

    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_unlimited(self) -> bool:
        return self.balance == UNLIMITED_BALANCE

    def trial_expired(self, now: datetime) -> bool:
        """Unlimited trial whose window has closed"""
        return (
            self.is_unlimited
            and self.free_credits_expire_at is not None
            and self.free_credits_expire_at <= now
        )
