"""Action Log Repository Interface

Defines the contract for the rate limiter's audit log.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Tuple
from src.domain.action_log import ActionLog


class ActionLogRepository(ABC):

    @abstractmethod
    async def count_since(
        self, tenant_id: str, action_type: str, since: datetime
    ) -> Tuple[int, Optional[datetime]]:
        """
        Count logged actions of a tenant since a point in time

        Args:
            tenant_id: Tenant identifier
            action_type: Rate-limited action type
            since: Window start (inclusive)

        Returns:
            Tuple of (count, created_at of the oldest counted row or None)
        """
        pass

    @abstractmethod
    async def create(self, log: ActionLog) -> ActionLog:
        """Append an action log row"""
        pass
