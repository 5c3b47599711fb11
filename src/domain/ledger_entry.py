"""Ledger Entry Domain Entity

Immutable append-only record of every balance-affecting event.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any
from sqlmodel import Field, Column, Index
from sqlalchemy import BigInteger, String, Text, JSON
from src.domain.base import BaseModel, BigIntegerPK


class LedgerEntryKind(str, Enum):
    """Ledger entry kinds"""
    GRANT = "grant"                  # Free or manual grant
    CONSUMPTION = "consumption"      # Credits spent on an action
    REFUND = "refund"                # Credits given back after a failed action
    SIGNUP_BONUS = "signup_bonus"    # Initial balance granted at provisioning
    REPAIR = "repair"                # Projection correction after reconciliation
    PURCHASE = "purchase"            # Paid credit pack
    TRIAL_EXPIRED = "trial_expired"  # Unlimited trial converted to a finite balance


GRANT_KINDS = frozenset(
    {
        LedgerEntryKind.GRANT,
        LedgerEntryKind.REFUND,
        LedgerEntryKind.SIGNUP_BONUS,
        LedgerEntryKind.PURCHASE,
    }
)


def build_idempotency_key(tenant_id: str, kind: LedgerEntryKind, reference_id: Optional[str]) -> Optional[str]:
    """
    Derive the unique ledger key for a referenced operation

    All grant-type kinds share one namespace so a reference can only
    credit a tenant once, whatever kind the retry claims.
    """
    if not reference_id:
        return None
    namespace = "grant" if kind in GRANT_KINDS else kind.value
    return f"{tenant_id}:{namespace}:{reference_id}"


class LedgerEntry(BaseModel, table=True):
    """
    Ledger Entry - Immutable audit trail of credit mutations

    Domain Rules:
    - Entries are never updated or deleted
    - amount is signed (negative = consumption)
    - balance_after equals TenantBalance.balance right after this entry
    - idempotency_key is unique (prevents double grants / double charges)
    """

    __tablename__ = "ledger_entries"
    __table_args__ = (
        Index("ix_ledger_entries_tenant_created", "tenant_id", "created_at"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerPK, primary_key=True, autoincrement=True),
    )

    tenant_id: str = Field(index=True)

    amount: int = Field(
        sa_column=Column(BigInteger, nullable=False),
        description="Signed credit amount"
    )

    balance_after: int = Field(
        sa_column=Column(BigInteger, nullable=False),
        description="Balance snapshot after applying this entry"
    )

    kind: LedgerEntryKind = Field(
        description="Entry kind (grant, consumption, refund, signup_bonus, repair, purchase)"
    )

    action_key: Optional[str] = Field(
        default=None,
        sa_column=Column(String(100), nullable=True),
        description="Action key or grant category"
    )

    description: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
    )

    reference_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
        description="External reference (order, repair run, signup...)"
    )

    idempotency_key: Optional[str] = Field(
        default=None,
        sa_column=Column(String(400), nullable=True, unique=True),
    )

    entry_metadata: Optional[Dict[str, Any]] = Field(
        default=None,
        sa_column=Column("metadata", JSON, nullable=True),
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)
