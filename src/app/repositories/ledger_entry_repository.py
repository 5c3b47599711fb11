"""Ledger Entry Repository Interface

Defines the contract for ledger entry persistence operations.
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Tuple
from src.domain.ledger_entry import LedgerEntry, LedgerEntryKind


class LedgerEntryRepository(ABC):
    """
    Repository interface for LedgerEntry persistence

    Entries are immutable and append-only.
    Idempotency is enforced via unique idempotency_key.
    """

    @abstractmethod
    async def create(self, entry: LedgerEntry) -> LedgerEntry:
        """
        Append a new ledger entry

        Raises:
            IntegrityError: If idempotency_key already exists (duplicate operation)
        """
        pass

    @abstractmethod
    async def get_by_idempotency_key(self, idempotency_key: str) -> Optional[LedgerEntry]:
        """
        Retrieve entry by idempotency key

        Used to detect a retried operation before applying it again.
        """
        pass

    @abstractmethod
    async def get_by_tenant_id(
        self, tenant_id: str, limit: int = 20, offset: int = 0
    ) -> Tuple[List[LedgerEntry], int]:
        """
        Retrieve entries of a tenant, most recent first

        Returns:
            Tuple of (entries, total count)
        """
        pass

    @abstractmethod
    async def get_replay_totals(self, tenant_id: str) -> Tuple[int, Optional[int], int]:
        """
        Replay a tenant's ledger

        Returns:
            Tuple of (sum of amounts, balance_after of the latest entry or None, entry count)
        """
        pass

    @abstractmethod
    async def sum_by_kind(self, tenant_id: str, kind: LedgerEntryKind) -> int:
        """Sum of the amounts of one entry kind (0 when none)"""
        pass
