"""CheckRateLimit Use Case

Sliding-window rate limiting backed by the action log.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable
from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.store_errors import raise_if_store_busy
from src.app.repositories.action_log_repository import ActionLogRepository
from src.domain.action_log import ActionLog
from .dtos import CheckRateLimitCommandDTO, RateLimitResponseDTO

logger = logging.getLogger(__name__)


class CheckRateLimit:
    """
    Use Case: Check and record a rate-limited action

    Business Rules:
    1. Counts the tenant's action log rows in [now - window, now]
    2. count >= limit: denied, nothing written
    3. Otherwise one row is appended and the action is allowed
    4. reset_at = oldest counted row + window (now + window if none)

    No lock is taken, so concurrent callers at the boundary can overshoot
    the limit by the number of in-flight checks.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        action_log_repo: ActionLogRepository,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.uow = uow
        self.action_log_repo = action_log_repo
        self.clock = clock

    async def execute(self, command: CheckRateLimitCommandDTO) -> Result[RateLimitResponseDTO]:
        now = self.clock()
        window = timedelta(hours=command.window_hours)

        try:
            used, oldest = await self.action_log_repo.count_since(
                command.tenant_id, command.action_type, now - window
            )
            reset_at = (oldest + window) if oldest else (now + window)

            if used >= command.limit:
                await self.uow.rollback()
                logger.warning(
                    f"Rate limit reached for tenant {command.tenant_id}: "
                    f"action={command.action_type}, used={used}, limit={command.limit}"
                )
                return Return.ok(
                    RateLimitResponseDTO(
                        allowed=False,
                        used=used,
                        remaining=0,
                        limit=command.limit,
                        reset_at=reset_at,
                    )
                )

            await self.action_log_repo.create(
                ActionLog(
                    tenant_id=command.tenant_id,
                    action_type=command.action_type,
                    log_metadata=command.metadata,
                    created_at=now,
                )
            )
            await self.uow.commit()

            used += 1
            return Return.ok(
                RateLimitResponseDTO(
                    allowed=True,
                    used=used,
                    remaining=command.limit - used,
                    limit=command.limit,
                    reset_at=reset_at,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            raise_if_store_busy(e, "check_rate_limit")
            raise
