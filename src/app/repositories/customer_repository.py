"""Customer Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.customer import Customer


class CustomerRepository(ABC):

    @abstractmethod
    async def get_by_id(self, tenant_id: str, customer_id: int, for_update: bool = False) -> Optional[Customer]:
        """Retrieve a tenant's customer, optionally locking the row"""
        pass

    @abstractmethod
    async def update(self, customer: Customer) -> Customer:
        pass
