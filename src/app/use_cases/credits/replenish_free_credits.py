"""ReplenishFreeCredits Use Case

Periodic free-tier top-up, run by the replenishment worker.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional
from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.ledger_posting import LedgerPoster
from src.app.services.store_errors import raise_if_store_busy
from src.app.repositories.tenant_balance_repository import TenantBalanceRepository
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from src.domain.ledger_entry import LedgerEntryKind
from src.domain.tenant_balance import TierStatus
from src.domain.exceptions import StoreBusyError
from .dtos import ReplenishResultDTO

logger = logging.getLogger(__name__)


def free_grant_reference(due_at: datetime) -> str:
    """Deterministic grant reference, one per scheduled due date"""
    return f"free-grant:{due_at.strftime('%Y-%m-%d')}"


class ReplenishFreeCredits:
    """
    Use Case: Grant the monthly free credits to due free-tier tenants

    Business Rules:
    1. Only free-tier, finite balances whose next_free_grant_at <= now
    2. Reference free-grant:<YYYY-MM-DD> of the due date makes each
       scheduled grant happen once, however many fall in one month
    3. next_free_grant_at advances by interval_days past now
    4. One commit per tenant; a busy tenant is skipped and retried next run
    """

    def __init__(
        self,
        uow: UnitOfWork,
        balance_repo: TenantBalanceRepository,
        entry_repo: LedgerEntryRepository,
        monthly_credits: int = 10000,
        interval_days: int = 30,
        batch_size: int = 100,
    ):
        self.uow = uow
        self.balance_repo = balance_repo
        self.entry_repo = entry_repo
        self.monthly_credits = monthly_credits
        self.interval_days = interval_days
        self.batch_size = batch_size
        self.poster = LedgerPoster(balance_repo, entry_repo)

    async def execute(self, now: Optional[datetime] = None) -> Result[ReplenishResultDTO]:
        now = now or datetime.utcnow()

        due = await self.balance_repo.get_due_for_free_grant(now, limit=self.batch_size)
        # A rollback in _replenish expires every loaded row
        tenant_ids = [candidate.tenant_id for candidate in due]
        granted = skipped = 0
        failed_tenants: list[str] = []

        for tenant_id in tenant_ids:
            try:
                if await self._replenish(tenant_id, now):
                    granted += 1
                else:
                    skipped += 1
            except StoreBusyError as e:
                logger.warning(f"Skipping free grant for tenant {tenant_id}: {e}")
                failed_tenants.append(tenant_id)

        logger.info(
            f"Free credit replenishment: due={len(due)}, granted={granted}, "
            f"skipped={skipped}, failed={len(failed_tenants)}"
        )

        return Return.ok(
            ReplenishResultDTO(
                run_at=now,
                tenants_due=len(due),
                granted=granted,
                skipped=skipped,
                failed=len(failed_tenants),
                failed_tenants=failed_tenants,
            )
        )

    async def _replenish(self, tenant_id: str, now: datetime) -> bool:
        try:
            balance = await self.balance_repo.get_by_tenant_id(tenant_id, for_update=True)
            if (
                balance is None
                or balance.is_unlimited
                or TierStatus(balance.tier_status) != TierStatus.FREE
                or balance.next_free_grant_at is None
                or balance.next_free_grant_at > now
            ):
                await self.uow.rollback()
                return False

            due_at = balance.next_free_grant_at
            reference_id = free_grant_reference(due_at)

            already_granted = await self.poster.find_posted(tenant_id, LedgerEntryKind.GRANT, reference_id)
            if not already_granted:
                await self.poster.post_grant(
                    balance,
                    self.monthly_credits,
                    LedgerEntryKind.GRANT,
                    description=f"Free credits due {due_at.strftime('%Y-%m-%d')}",
                    reference_id=reference_id,
                    action_key="free_tier",
                )

            next_grant_at = due_at + timedelta(days=self.interval_days)
            while next_grant_at <= now:
                next_grant_at += timedelta(days=self.interval_days)
            balance.next_free_grant_at = next_grant_at
            balance.free_credits_expire_at = next_grant_at
            await self.balance_repo.save(balance)

            await self.uow.commit()

            if already_granted:
                logger.info(f"Free grant {reference_id} already posted for tenant {tenant_id}, schedule advanced")
                return False

            logger.info(
                f"Granted {self.monthly_credits} free credits to tenant {tenant_id}, "
                f"next grant at {next_grant_at.isoformat()}"
            )
            return True

        except Exception as e:
            await self.uow.rollback()
            raise_if_store_busy(e, "replenish_free_credits")
            raise
