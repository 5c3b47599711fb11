"""Credit Cost Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional


class CreditCostRepository(ABC):

    @abstractmethod
    async def get_active_cost(self, action_key: str) -> Optional[int]:
        """
        Retrieve the configured credit cost of an action

        Returns:
            Credits of the active cost row, None when unconfigured or inactive
        """
        pass
