"""POS Shift Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.pos_shift import PosShift


class PosShiftRepository(ABC):

    @abstractmethod
    async def get_by_id(self, tenant_id: str, shift_id: int, for_update: bool = False) -> Optional[PosShift]:
        """Retrieve a tenant's shift, optionally locking the row"""
        pass

    @abstractmethod
    async def update(self, shift: PosShift) -> PosShift:
        pass
