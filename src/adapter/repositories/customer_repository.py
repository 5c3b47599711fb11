"""SQLAlchemy implementation of CustomerRepository"""

from typing import Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.customer_repository import CustomerRepository
from src.domain.customer import Customer


class SqlAlchemyCustomerRepository(CustomerRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, tenant_id: str, customer_id: int, for_update: bool = False) -> Optional[Customer]:
        stmt = select(Customer).where(Customer.id == customer_id, Customer.tenant_id == tenant_id)

        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, customer: Customer) -> Customer:
        self.session.add(customer)
        await self.session.flush()
        return customer
