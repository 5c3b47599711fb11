"""Unified Order Repository Interface"""

from abc import ABC, abstractmethod
from src.domain.unified_order import UnifiedOrder


class UnifiedOrderRepository(ABC):

    @abstractmethod
    async def create(self, order: UnifiedOrder) -> UnifiedOrder:
        """Mirror an order into the cross-channel order ledger"""
        pass
