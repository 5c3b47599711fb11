"""SQLAlchemy implementation of FeeTransactionRepository"""

from typing import Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.fee_transaction_repository import FeeTransactionRepository
from src.domain.fee_transaction import FeeTransaction


class SqlAlchemyFeeTransactionRepository(FeeTransactionRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_sale_id(self, sale_id: int) -> Optional[FeeTransaction]:
        stmt = select(FeeTransaction).where(FeeTransaction.sale_id == sale_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, fee: FeeTransaction) -> FeeTransaction:
        self.session.add(fee)
        await self.session.flush()
        await self.session.refresh(fee)
        return fee
