"""SQLAlchemy implementation of CreditCostRepository"""

from typing import Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.credit_cost_repository import CreditCostRepository
from src.domain.credit_cost import CreditCost


class SqlAlchemyCreditCostRepository(CreditCostRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_active_cost(self, action_key: str) -> Optional[int]:
        stmt = select(CreditCost.credits).where(
            CreditCost.action_key == action_key,
            CreditCost.is_active == True,  # noqa: E712
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
