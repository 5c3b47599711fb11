"""SQLAlchemy implementation of TenantBalanceRepository

Provides persistence for TenantBalance entities with pessimistic locking support
to prevent race conditions during concurrent credit operations.
"""

from datetime import datetime
from typing import Optional, List
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.tenant_balance_repository import TenantBalanceRepository
from src.domain.tenant_balance import TenantBalance, TierStatus


class SqlAlchemyTenantBalanceRepository(TenantBalanceRepository):
    """
    SQLAlchemy implementation of TenantBalanceRepository

    Features:
    - Pessimistic locking via SELECT FOR UPDATE
    - Changes are flushed, never committed (the unit of work commits)
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_tenant_id(self, tenant_id: str, for_update: bool = False) -> Optional[TenantBalance]:
        stmt = select(TenantBalance).where(TenantBalance.tenant_id == tenant_id)

        if for_update:
            # populate_existing refreshes a row already in the identity map
            stmt = stmt.with_for_update().execution_options(populate_existing=True)

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, balance: TenantBalance) -> TenantBalance:
        self.session.add(balance)
        await self.session.flush()
        await self.session.refresh(balance)
        return balance

    async def save(self, balance: TenantBalance) -> TenantBalance:
        balance.updated_at = datetime.utcnow()
        self.session.add(balance)
        await self.session.flush()
        return balance

    async def get_all(self) -> List[TenantBalance]:
        result = await self.session.execute(select(TenantBalance).order_by(TenantBalance.id))
        return list(result.scalars().all())

    async def get_due_for_free_grant(self, now: datetime, limit: int = 100) -> List[TenantBalance]:
        stmt = (
            select(TenantBalance)
            .where(
                TenantBalance.tier_status == TierStatus.FREE,
                TenantBalance.next_free_grant_at.is_not(None),
                TenantBalance.next_free_grant_at <= now,
            )
            .order_by(TenantBalance.next_free_grant_at)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
