"""SQLAlchemy implementation of InventoryRepository

Locks stock rows in a stable order and decrements with an availability
guard inside the UPDATE statement.
"""

from datetime import datetime
from typing import Dict, List
from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.inventory_repository import InventoryRepository
from src.domain.inventory_item import InventoryItem, InventoryMovement


class SqlAlchemyInventoryRepository(InventoryRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def lock_items(self, tenant_id: str, product_ids: List[str]) -> Dict[str, InventoryItem]:
        """
        Lock inventory rows with SELECT FOR UPDATE

        ORDER BY product_id makes PostgreSQL acquire the row locks in a
        deterministic order across concurrent sales.
        """
        if not product_ids:
            return {}

        stmt = (
            select(InventoryItem)
            .where(
                InventoryItem.tenant_id == tenant_id,
                InventoryItem.product_id.in_(sorted(set(product_ids))),
            )
            .order_by(InventoryItem.product_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return {item.product_id: item for item in result.scalars().all()}

    async def decrement_stock(self, item: InventoryItem, quantity: int) -> bool:
        stmt = (
            update(InventoryItem)
            .where(
                InventoryItem.id == item.id,
                InventoryItem.quantity_on_hand - InventoryItem.quantity_reserved >= quantity,
            )
            .values(
                quantity_on_hand=InventoryItem.quantity_on_hand - quantity,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return False

        await self.session.refresh(item)
        item.in_stock = item.quantity_on_hand > 0
        self.session.add(item)
        await self.session.flush()
        return True

    async def add_movement(self, movement: InventoryMovement) -> InventoryMovement:
        self.session.add(movement)
        await self.session.flush()
        return movement
