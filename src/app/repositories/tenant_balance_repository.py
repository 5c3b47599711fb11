"""Tenant Balance Repository Interface

Defines the contract for tenant balance persistence operations.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, List
from src.domain.tenant_balance import TenantBalance


class TenantBalanceRepository(ABC):
    """
    Repository interface for TenantBalance persistence

    Methods use pessimistic locking (SELECT FOR UPDATE) to ensure
    consistency during concurrent credit operations.
    """

    @abstractmethod
    async def get_by_tenant_id(self, tenant_id: str, for_update: bool = False) -> Optional[TenantBalance]:
        """
        Retrieve balance by tenant ID

        Args:
            tenant_id: Tenant identifier
            for_update: If True, lock the row with SELECT FOR UPDATE (pessimistic lock)

        Returns:
            TenantBalance if found, None otherwise
        """
        pass

    @abstractmethod
    async def create(self, balance: TenantBalance) -> TenantBalance:
        """
        Create a new balance row

        Raises:
            IntegrityError: If the tenant already has a balance row
        """
        pass

    @abstractmethod
    async def save(self, balance: TenantBalance) -> TenantBalance:
        """
        Persist changes of an already loaded (and locked) balance row
        """
        pass

    @abstractmethod
    async def get_all(self) -> List[TenantBalance]:
        """Retrieve every balance row (reconciliation)"""
        pass

    @abstractmethod
    async def get_due_for_free_grant(self, now: datetime, limit: int = 100) -> List[TenantBalance]:
        """
        Retrieve free-tier balances whose next scheduled grant is due

        Args:
            now: Reference time
            limit: Maximum number of rows to return
        """
        pass
