"""SQLAlchemy implementation of ActionLogRepository"""

from datetime import datetime
from typing import Optional, Tuple
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.action_log_repository import ActionLogRepository
from src.domain.action_log import ActionLog


class SqlAlchemyActionLogRepository(ActionLogRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def count_since(
        self, tenant_id: str, action_type: str, since: datetime
    ) -> Tuple[int, Optional[datetime]]:
        stmt = select(func.count(ActionLog.id), func.min(ActionLog.created_at)).where(
            ActionLog.tenant_id == tenant_id,
            ActionLog.action_type == action_type,
            ActionLog.created_at >= since,
        )
        count, oldest = (await self.session.execute(stmt)).one()
        return int(count), oldest

    async def create(self, log: ActionLog) -> ActionLog:
        self.session.add(log)
        await self.session.flush()
        await self.session.refresh(log)
        return log
