"""Credit accounting use cases"""
from .check_credits import CheckCredits
from .consume_credits import ConsumeCredits
from .grant_credits import GrantCredits
from .get_balance import GetBalance
from .list_ledger_entries import ListLedgerEntries
from .reconcile_ledger import ReconcileLedger
from .replenish_free_credits import ReplenishFreeCredits, free_grant_reference
from .dtos import (
    CheckCreditsResponseDTO,
    ConsumeCreditsCommandDTO,
    ConsumeCreditsResponseDTO,
    GrantCreditsCommandDTO,
    GrantCreditsResponseDTO,
    BalanceResponseDTO,
    LedgerEntryDTO,
    ListLedgerEntriesResponseDTO,
    LedgerDiscrepancyDTO,
    ReconciliationResultDTO,
    ReplenishResultDTO,
)

__all__ = [
    "CheckCredits",
    "ConsumeCredits",
    "GrantCredits",
    "GetBalance",
    "ListLedgerEntries",
    "ReconcileLedger",
    "ReplenishFreeCredits",
    "free_grant_reference",
    "CheckCreditsResponseDTO",
    "ConsumeCreditsCommandDTO",
    "ConsumeCreditsResponseDTO",
    "GrantCreditsCommandDTO",
    "GrantCreditsResponseDTO",
    "BalanceResponseDTO",
    "LedgerEntryDTO",
    "ListLedgerEntriesResponseDTO",
    "LedgerDiscrepancyDTO",
    "ReconciliationResultDTO",
    "ReplenishResultDTO",
]
