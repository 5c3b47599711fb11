"""SQLAlchemy implementation of PosShiftRepository"""

from typing import Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.pos_shift_repository import PosShiftRepository
from src.domain.pos_shift import PosShift


class SqlAlchemyPosShiftRepository(PosShiftRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, tenant_id: str, shift_id: int, for_update: bool = False) -> Optional[PosShift]:
        stmt = select(PosShift).where(PosShift.id == shift_id, PosShift.tenant_id == tenant_id)

        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, shift: PosShift) -> PosShift:
        self.session.add(shift)
        await self.session.flush()
        return shift
