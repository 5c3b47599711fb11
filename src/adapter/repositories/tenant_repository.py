"""SQLAlchemy implementation of TenantRepository"""

from typing import Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.tenant_repository import TenantRepository
from src.domain.tenant import Tenant, TenantMember, SubscriptionEvent


class SqlAlchemyTenantRepository(TenantRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_slug(self, slug: str) -> Optional[Tenant]:
        result = await self.session.execute(select(Tenant).where(Tenant.slug == slug))
        return result.scalar_one_or_none()

    async def get_by_provision_key(self, provision_key: str) -> Optional[Tenant]:
        result = await self.session.execute(select(Tenant).where(Tenant.provision_key == provision_key))
        return result.scalar_one_or_none()

    async def create(self, tenant: Tenant) -> Tenant:
        self.session.add(tenant)
        await self.session.flush()
        await self.session.refresh(tenant)
        return tenant

    async def get_member(self, tenant_id: str, user_id: str) -> Optional[TenantMember]:
        stmt = select(TenantMember).where(
            TenantMember.tenant_id == tenant_id,
            TenantMember.user_id == user_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_member(self, member: TenantMember) -> TenantMember:
        self.session.add(member)
        await self.session.flush()
        await self.session.refresh(member)
        return member

    async def get_subscription_event(
        self, tenant_id: str, event_type: str, reference_id: str
    ) -> Optional[SubscriptionEvent]:
        stmt = select(SubscriptionEvent).where(
            SubscriptionEvent.tenant_id == tenant_id,
            SubscriptionEvent.event_type == event_type,
            SubscriptionEvent.reference_id == reference_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_subscription_event(self, event: SubscriptionEvent) -> SubscriptionEvent:
        self.session.add(event)
        await self.session.flush()
        return event
