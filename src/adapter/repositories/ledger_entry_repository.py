"""SQLAlchemy implementation of LedgerEntryRepository

Provides persistence for LedgerEntry entities with idempotency enforcement
via unique constraint on idempotency_key.
"""

from typing import Optional, List, Tuple
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from src.domain.ledger_entry import LedgerEntry, LedgerEntryKind


class SqlAlchemyLedgerEntryRepository(LedgerEntryRepository):
    """
    SQLAlchemy implementation of LedgerEntryRepository

    Features:
    - Idempotency enforcement via unique idempotency_key constraint
    - Immutable append-only entries
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, entry: LedgerEntry) -> LedgerEntry:
        self.session.add(entry)
        await self.session.flush()
        await self.session.refresh(entry)
        return entry

    async def get_by_idempotency_key(self, idempotency_key: str) -> Optional[LedgerEntry]:
        stmt = select(LedgerEntry).where(LedgerEntry.idempotency_key == idempotency_key)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_tenant_id(
        self, tenant_id: str, limit: int = 20, offset: int = 0
    ) -> Tuple[List[LedgerEntry], int]:
        count_stmt = select(func.count()).select_from(LedgerEntry).where(LedgerEntry.tenant_id == tenant_id)
        total = (await self.session.execute(count_stmt)).scalar_one()

        stmt = (
            select(LedgerEntry)
            .where(LedgerEntry.tenant_id == tenant_id)
            .order_by(LedgerEntry.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def get_replay_totals(self, tenant_id: str) -> Tuple[int, Optional[int], int]:
        totals_stmt = select(
            func.coalesce(func.sum(LedgerEntry.amount), 0),
            func.count(LedgerEntry.id),
        ).where(LedgerEntry.tenant_id == tenant_id)
        amount_sum, count = (await self.session.execute(totals_stmt)).one()

        last_stmt = (
            select(LedgerEntry.balance_after)
            .where(LedgerEntry.tenant_id == tenant_id)
            .order_by(LedgerEntry.id.desc())
            .limit(1)
        )
        last_balance = (await self.session.execute(last_stmt)).scalar_one_or_none()
        return int(amount_sum), last_balance, int(count)

    async def sum_by_kind(self, tenant_id: str, kind: LedgerEntryKind) -> int:
        stmt = select(func.coalesce(func.sum(LedgerEntry.amount), 0)).where(
            LedgerEntry.tenant_id == tenant_id,
            LedgerEntry.kind == kind,
        )
        return int((await self.session.execute(stmt)).scalar_one())
