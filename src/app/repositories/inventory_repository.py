"""Inventory Repository Interface

Defines the contract for stock persistence used by the sale processor.
"""

from abc import ABC, abstractmethod
from typing import Dict, List
from src.domain.inventory_item import InventoryItem, InventoryMovement


class InventoryRepository(ABC):
    """
    Repository interface for InventoryItem and InventoryMovement

    Stock rows are always locked in ascending product_id order so two sales
    touching overlapping products cannot deadlock.
    """

    @abstractmethod
    async def lock_items(self, tenant_id: str, product_ids: List[str]) -> Dict[str, InventoryItem]:
        """
        Lock the tenant's inventory rows for the given products

        Args:
            tenant_id: Tenant identifier
            product_ids: Products to lock (locked in sorted order)

        Returns:
            Mapping product_id -> InventoryItem for products the tenant owns.
            Unknown or foreign products are absent from the mapping.
        """
        pass

    @abstractmethod
    async def decrement_stock(self, item: InventoryItem, quantity: int) -> bool:
        """
        Decrement on-hand quantity if enough stock is available

        The availability guard is part of the UPDATE itself.

        Returns:
            True if decremented, False if available stock was insufficient
        """
        pass

    @abstractmethod
    async def add_movement(self, movement: InventoryMovement) -> InventoryMovement:
        """Append a stock movement audit row"""
        pass
