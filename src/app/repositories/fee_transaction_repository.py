"""Fee Transaction Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.fee_transaction import FeeTransaction


class FeeTransactionRepository(ABC):
    """
    Repository interface for FeeTransaction persistence

    A sale is charged at most once (unique sale_id).
    """

    @abstractmethod
    async def get_by_sale_id(self, sale_id: int) -> Optional[FeeTransaction]:
        pass

    @abstractmethod
    async def create(self, fee: FeeTransaction) -> FeeTransaction:
        """
        Persist a fee transaction

        Raises:
            IntegrityError: If a fee already exists for the sale
        """
        pass
