"""SQLAlchemy implementation of UnifiedOrderRepository"""

from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.unified_order_repository import UnifiedOrderRepository
from src.domain.unified_order import UnifiedOrder


class SqlAlchemyUnifiedOrderRepository(UnifiedOrderRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, order: UnifiedOrder) -> UnifiedOrder:
        self.session.add(order)
        await self.session.flush()
        return order
