"""SQLAlchemy implementation of SaleTransactionRepository"""

from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.sale_transaction_repository import SaleTransactionRepository
from src.domain.sale_transaction import SaleTransaction, SaleLineItem
from src.domain.exceptions import DuplicateTransactionNumberError


class SqlAlchemySaleTransactionRepository(SaleTransactionRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, sale: SaleTransaction) -> SaleTransaction:
        """Insert inside a savepoint so a duplicate number leaves the outer transaction usable"""
        transaction_number = sale.transaction_number
        try:
            async with self.session.begin_nested():
                self.session.add(sale)
                await self.session.flush()
        except IntegrityError as e:
            if "transaction_number" in str(e.orig).lower():
                raise DuplicateTransactionNumberError(transaction_number) from e
            raise
        await self.session.refresh(sale)
        return sale

    async def add_line_items(self, items: List[SaleLineItem]) -> List[SaleLineItem]:
        self.session.add_all(items)
        await self.session.flush()
        return items

    async def transaction_number_exists(self, transaction_number: str) -> bool:
        stmt = select(SaleTransaction.id).where(SaleTransaction.transaction_number == transaction_number)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def get_by_id(
        self, tenant_id: str, sale_id: int, for_update: bool = False
    ) -> Optional[SaleTransaction]:
        stmt = select(SaleTransaction).where(
            SaleTransaction.id == sale_id,
            SaleTransaction.tenant_id == tenant_id,
        )

        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_line_items(self, sale_id: int) -> List[SaleLineItem]:
        stmt = select(SaleLineItem).where(SaleLineItem.sale_id == sale_id).order_by(SaleLineItem.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, sale: SaleTransaction) -> SaleTransaction:
        self.session.add(sale)
        await self.session.flush()
        return sale
