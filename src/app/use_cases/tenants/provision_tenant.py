"""ProvisionTenant Use Case

Creates a tenant with its owner, subscription record and signup credits
in one unit of work. Safe to replay.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.exc import IntegrityError
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.ledger_posting import LedgerPoster
from src.app.services.store_errors import raise_if_store_busy
from src.app.repositories.tenant_repository import TenantRepository
from src.app.repositories.tenant_balance_repository import TenantBalanceRepository
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from src.domain.ledger_entry import LedgerEntryKind
from src.domain.tenant import Tenant, TenantMember, SubscriptionEvent, TenantStatus, MemberRole
from src.domain.tenant_balance import TenantBalance, TierStatus
from .plans import get_plan, PLANS
from .dtos import ProvisionTenantCommandDTO, TenantRecordDTO

logger = logging.getLogger(__name__)

PROVISIONED_EVENT = "provisioned"


def signup_reference(tenant_id: str) -> str:
    return f"signup:{tenant_id}"


class ProvisionTenant:
    """
    Use Case: Provision a tenant

    Business Rules:
    1. Unknown plans are rejected before anything is written
    2. Tenant is found by idempotency_key, then by slug, on replay; a
       concurrent insert of the same key or slug is resolved by re-reading it
    2a. A key already used by another owner is rejected
    3. Owner membership and the provisioned event are get-or-create
    4. Signup credits are applied only while signup:<tenant_id> has not
       been posted, so replays never double-grant
    5. Everything commits together

    Flow:
    1. Resolve plan
    2. Get or create tenant
    3. Get or create owner membership
    4. Get or create provisioned event
    5. Upsert balance and post signup entry (first time only)
    6. Commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        tenant_repo: TenantRepository,
        balance_repo: TenantBalanceRepository,
        entry_repo: LedgerEntryRepository,
        trial_days: int = 14,
        free_grant_interval_days: int = 30,
    ):
        self.uow = uow
        self.tenant_repo = tenant_repo
        self.balance_repo = balance_repo
        self.entry_repo = entry_repo
        self.trial_days = trial_days
        self.free_grant_interval_days = free_grant_interval_days
        self.poster = LedgerPoster(balance_repo, entry_repo)

    async def execute(self, command: ProvisionTenantCommandDTO) -> Result[TenantRecordDTO]:
        # Step 1: Plan
        plan = get_plan(command.plan)
        if plan is None:
            return Return.err(
                Error(
                    code="UNKNOWN_PLAN",
                    message=f"Unknown plan '{command.plan}'",
                    reason=f"Available plans: {sorted(PLANS)}",
                )
            )

        now = datetime.utcnow()

        try:
            # Step 2: Tenant
            tenant, created = await self._get_or_create_tenant(command, plan, now)
            if tenant.owner_email != command.owner_email:
                key_reused = bool(command.idempotency_key) and tenant.provision_key == command.idempotency_key
                await self.uow.rollback()
                if key_reused:
                    return Return.err(
                        Error(
                            code="IDEMPOTENCY_KEY_REUSED",
                            message="idempotency_key was already used by another owner",
                        )
                    )
                return Return.err(
                    Error(
                        code="SLUG_TAKEN",
                        message=f"Slug '{command.slug}' is already used by another tenant",
                    )
                )

            # Step 3: Owner membership
            member = await self.tenant_repo.get_member(tenant.id, command.owner_user_id)
            if not member:
                await self.tenant_repo.create_member(
                    TenantMember(
                        tenant_id=tenant.id,
                        user_id=command.owner_user_id,
                        email=command.owner_email,
                        role=MemberRole.OWNER,
                    )
                )

            # Step 4: Provisioned event
            event_reference = f"provision:{tenant.id}"
            event = await self.tenant_repo.get_subscription_event(tenant.id, PROVISIONED_EVENT, event_reference)
            if not event:
                await self.tenant_repo.create_subscription_event(
                    SubscriptionEvent(
                        tenant_id=tenant.id,
                        event_type=PROVISIONED_EVENT,
                        plan=tenant.plan,
                        reference_id=event_reference,
                        event_metadata={"idempotency_key": command.idempotency_key, "owner": command.owner_user_id},
                    )
                )

            # Step 5: Balance and signup credits
            balance = await self._apply_signup_credits(tenant, plan, now)

            # Step 6: Commit
            await self.uow.commit()

        except Exception as e:
            await self.uow.rollback()
            raise_if_store_busy(e, "provision_tenant")
            raise

        if created:
            logger.info(f"Provisioned tenant {tenant.id} ({tenant.slug}) on plan {tenant.plan}")
        else:
            logger.info(f"Provisioning replay for tenant {tenant.id} ({tenant.slug})")

        return Return.ok(
            TenantRecordDTO(
                tenant_id=tenant.id,
                slug=tenant.slug,
                business_name=tenant.business_name,
                plan=tenant.plan,
                status=TenantStatus(tenant.status).value,
                limits=tenant.limits,
                trial_ends_at=tenant.trial_ends_at,
                balance=balance.balance,
                unlimited=balance.is_unlimited,
                created=created,
            )
        )

    async def _find_existing_tenant(self, command: ProvisionTenantCommandDTO) -> Optional[Tenant]:
        if command.idempotency_key:
            tenant = await self.tenant_repo.get_by_provision_key(command.idempotency_key)
            if tenant:
                return tenant
        return await self.tenant_repo.get_by_slug(command.slug)

    async def _get_or_create_tenant(self, command: ProvisionTenantCommandDTO, plan: dict, now: datetime):
        tenant = await self._find_existing_tenant(command)
        if tenant:
            return tenant, False

        trial_ends_at: Optional[datetime] = now + timedelta(days=self.trial_days) if plan["trial"] else None
        try:
            tenant = await self.tenant_repo.create(
                Tenant(
                    slug=command.slug,
                    provision_key=command.idempotency_key,
                    business_name=command.business_name,
                    owner_email=command.owner_email,
                    plan=command.plan,
                    status=TenantStatus.TRIAL if plan["trial"] else TenantStatus.ACTIVE,
                    limits=dict(plan["limits"]),
                    trial_ends_at=trial_ends_at,
                    created_at=now,
                )
            )
            return tenant, True
        except IntegrityError:
            # Same key or slug inserted concurrently; the tenant is the first write so nothing else is lost
            await self.uow.rollback()
            tenant = await self._find_existing_tenant(command)
            if tenant is None:
                raise
            return tenant, False

    async def _apply_signup_credits(self, tenant: Tenant, plan: dict, now: datetime) -> TenantBalance:
        reference_id = signup_reference(tenant.id)

        balance = await self.balance_repo.get_by_tenant_id(tenant.id, for_update=True)
        if balance is None:
            balance = await self.balance_repo.create(TenantBalance(tenant_id=tenant.id))

        if await self.poster.find_posted(tenant.id, LedgerEntryKind.SIGNUP_BONUS, reference_id):
            return balance

        balance.tier_status = TierStatus(plan["tier"])
        if plan["trial"]:
            balance.free_credits_expire_at = tenant.trial_ends_at
            balance.next_free_grant_at = None
        elif balance.tier_status == TierStatus.FREE:
            balance.next_free_grant_at = now + timedelta(days=self.free_grant_interval_days)
            balance.free_credits_expire_at = balance.next_free_grant_at

        await self.poster.post_signup(
            balance,
            plan["credits"],
            reference_id=reference_id,
            description=f"Signup credits for plan {tenant.plan}",
            metadata={"plan": tenant.plan},
        )
        return balance
