"""Sale Transaction Repository Interface"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.sale_transaction import SaleTransaction, SaleLineItem


class SaleTransactionRepository(ABC):
    """
    Repository interface for SaleTransaction and its line items
    """

    @abstractmethod
    async def create(self, sale: SaleTransaction) -> SaleTransaction:
        """
        Persist a sale header

        Raises:
            DuplicateTransactionNumberError: If transaction_number already
                exists; the surrounding transaction stays usable
        """
        pass

    @abstractmethod
    async def add_line_items(self, items: List[SaleLineItem]) -> List[SaleLineItem]:
        """Persist the line items of a sale"""
        pass

    @abstractmethod
    async def transaction_number_exists(self, transaction_number: str) -> bool:
        """Check whether a transaction number is already taken"""
        pass

    @abstractmethod
    async def get_by_id(
        self, tenant_id: str, sale_id: int, for_update: bool = False
    ) -> Optional[SaleTransaction]:
        """
        Retrieve a tenant's sale by ID

        Args:
            tenant_id: Tenant identifier
            sale_id: Sale ID
            for_update: If True, lock the row with SELECT FOR UPDATE
        """
        pass

    @abstractmethod
    async def get_line_items(self, sale_id: int) -> List[SaleLineItem]:
        pass

    @abstractmethod
    async def update(self, sale: SaleTransaction) -> SaleTransaction:
        pass
