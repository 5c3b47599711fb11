"""Data Transfer Objects for Credit Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import datetime
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field


class CheckCreditsResponseDTO(BaseModel):
    """Outcome of a read-only credit check"""

    tenant_id: str
    action_key: str
    allowed: bool = Field(..., description="True if the tenant can afford the action")
    balance: int = Field(..., description="Current balance (-1 = unlimited)")
    cost: int = Field(..., description="Credit cost of the action")
    unlimited: bool = False


class ConsumeCreditsCommandDTO(BaseModel):
    """
    Command DTO for consuming credits

    Used as input to ConsumeCredits use case.
    """

    tenant_id: str = Field(
        ...,
        description="Tenant identifier"
    )

    action_key: str = Field(
        ...,
        min_length=1,
        description="Action being paid for (e.g., 'ai.generate_description')"
    )

    amount_override: Optional[int] = Field(
        default=None,
        ge=0,
        description="Explicit cost, replaces the configured cost of the action"
    )

    description: Optional[str] = Field(
        default=None,
        description="Human readable description stored on the ledger entry"
    )

    reference_id: Optional[str] = Field(
        default=None,
        description="Caller reference; makes the consumption idempotent"
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
                "metadata": {"model": "gpt-4", "tokens": 1500}
            }
        }


class ConsumeCreditsResponseDTO(BaseModel):
    """
    Response DTO for credit consumption

    new_balance is -1 for unlimited tenants.
    """

    success: bool = True
    tenant_id: str
    consumed: int = Field(..., description="Credits actually deducted")
    new_balance: int = Field(..., description="Balance after the consumption")
    entry_id: Optional[int] = Field(default=None, description="Ledger entry ID, None when nothing was recorded")
    replayed: bool = Field(default=False, description="True if an earlier identical request was returned")


class GrantCreditsCommandDTO(BaseModel):
    """
    Command DTO for granting credits

    kind must be one of grant, refund, signup_bonus or purchase.
    """

    tenant_id: str = Field(
        ...,
        description="Tenant identifier"
    )

    amount: int = Field(
        ...,
        gt=0,
        description="Credits to add (must be > 0)"
    )

    kind: str = Field(
        default="grant",
        description="Grant kind (grant, refund, signup_bonus, purchase)"
    )

    description: str = Field(
        ...,
        description="Why the credits were granted"
    )

    reference_id: Optional[str] = Field(
        default=None,
        description="Caller reference; the same reference never grants twice"
    )

    metadata: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Optional metadata for audit trail"
    )

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


class GrantCreditsResponseDTO(BaseModel):
    """Response DTO for credit grants"""

    tenant_id: str
    entry_id: int
    amount: int
    kind: str
    new_balance: int
    replayed: bool = False


class BalanceResponseDTO(BaseModel):
    """
    Response DTO for balance query

    Returned by GetBalance use case.
    """

    tenant_id: str
    balance: int = Field(..., description="Current balance (-1 = unlimited)")
    free_balance: int
    purchased_balance: int
    lifetime_earned: int
    lifetime_spent: int
    tier_status: str
    unlimited: bool
    free_credits_expire_at: Optional[datetime] = None
    next_free_grant_at: Optional[datetime] = None
    updated_at: datetime


class LedgerEntryDTO(BaseModel):
    """Single ledger entry in list responses"""

    id: int
    amount: int
    balance_after: int
    kind: str
    action_key: Optional[str] = None
    description: Optional[str] = None
    reference_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    created_at: datetime


class ListLedgerEntriesResponseDTO(BaseModel):
    """Paginated ledger entries, newest first"""

    tenant_id: str
    entries: List[LedgerEntryDTO]
    total: int
    limit: int
    offset: int


class LedgerDiscrepancyDTO(BaseModel):
    """
    A balance projection that disagrees with its ledger

    Used by ReconcileLedger use case to report mismatches.
    """

    tenant_id: str
    cached_balance: int = Field(..., description="Balance stored on tenant_balances")
    ledger_total: int = Field(..., description="Sum of all ledger entry amounts")
    last_snapshot: Optional[int] = Field(default=None, description="balance_after of the newest entry")
    discrepancy: int = Field(..., description="cached_balance - ledger_total")
    repaired: bool = False


class ReconciliationResultDTO(BaseModel):
    """
    Result of ledger reconciliation

    Used by ReconcileLedger use case to report reconciliation results.
    """

    total_balances_checked: int
    discrepancies_found: int
    repaired: int = 0
    discrepancies: List[LedgerDiscrepancyDTO]
    reconciliation_time: datetime
    execution_time_ms: int


class ReplenishResultDTO(BaseModel):
    """Summary of one free-credit replenishment run"""

    run_at: datetime
    tenants_due: int
    granted: int
    skipped: int
    failed: int
    failed_tenants: List[str] = Field(default_factory=list)
