"""Tenant Repository Interface

Defines the contract for the records written by tenant provisioning.
"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.tenant import Tenant, TenantMember, SubscriptionEvent


class TenantRepository(ABC):
    """
    Repository interface for Tenant, TenantMember and SubscriptionEvent
    """

    @abstractmethod
    async def get_by_slug(self, slug: str) -> Optional[Tenant]:
        pass

    @abstractmethod
    async def get_by_provision_key(self, provision_key: str) -> Optional[Tenant]:
        """Tenant created by the provisioning request carrying this key"""
        pass

    @abstractmethod
    async def create(self, tenant: Tenant) -> Tenant:
        """
        Persist a new tenant

        Raises:
            IntegrityError: If the slug is already taken or the provision key reused
        """
        pass

    @abstractmethod
    async def get_member(self, tenant_id: str, user_id: str) -> Optional[TenantMember]:
        pass

    @abstractmethod
    async def create_member(self, member: TenantMember) -> TenantMember:
        pass

    @abstractmethod
    async def get_subscription_event(
        self, tenant_id: str, event_type: str, reference_id: str
    ) -> Optional[SubscriptionEvent]:
        pass

    @abstractmethod
    async def create_subscription_event(self, event: SubscriptionEvent) -> SubscriptionEvent:
        pass
