"""ReconcileLedger Use Case

Replays every tenant's ledger against its cached balance to detect,
and optionally repair, projection drift.
"""

import logging
import time
from datetime import datetime
from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.ledger_posting import LedgerPoster
from src.app.services.store_errors import raise_if_store_busy
from src.app.repositories.tenant_balance_repository import TenantBalanceRepository
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from src.domain.tenant_balance import TenantBalance
from .dtos import LedgerDiscrepancyDTO, ReconciliationResultDTO

logger = logging.getLogger(__name__)


class ReconcileLedger:
    """
    Use Case: Reconcile tenant balances against the ledger

    Business Rules:
    1. Expected balance = sum of all entry amounts of the tenant
    2. The newest entry's balance_after must equal the cached balance
    3. Unlimited balances are not compared (no finite projection)
    4. Read-only unless repair=True
    5. Repair rewrites the projection to the ledger total and appends a
       zero-amount repair entry, one commit per tenant

    Flow:
    1. Get all balances
    2. For each finite balance:
       a. Replay the ledger (sum, last snapshot)
       b. Record a discrepancy on mismatch
       c. Repair under row lock if requested
    3. Return reconciliation result
    """

    def __init__(
        self,
        uow: UnitOfWork,
        balance_repo: TenantBalanceRepository,
        entry_repo: LedgerEntryRepository,
    ):
        self.uow = uow
        self.balance_repo = balance_repo
        self.entry_repo = entry_repo
        self.poster = LedgerPoster(balance_repo, entry_repo)

    async def execute(self, repair: bool = False) -> Result[ReconciliationResultDTO]:
        """
        Execute ledger reconciliation

        Args:
            repair: Rewrite drifted projections to the ledger total

        Returns:
            Result[ReconciliationResultDTO]: Reconciliation result with any discrepancies
        """
        start_time = time.time()
        reconciliation_time = datetime.utcnow()

        logger.info(f"Starting ledger reconciliation (repair={repair})")

        balances = await self.balance_repo.get_all()
        total_balances = len(balances)
        # A rollback in _repair expires every loaded row
        snapshots = [(b.tenant_id, b.balance) for b in balances if not b.is_unlimited]

        logger.info(f"Found {total_balances} balances to reconcile")

        discrepancies: list[LedgerDiscrepancyDTO] = []
        repaired_count = 0

        for tenant_id, cached in snapshots:
            ledger_total, last_snapshot, _ = await self.entry_repo.get_replay_totals(tenant_id)

            if cached == ledger_total and last_snapshot in (None, cached):
                continue

            discrepancy = LedgerDiscrepancyDTO(
                tenant_id=tenant_id,
                cached_balance=cached,
                ledger_total=ledger_total,
                last_snapshot=last_snapshot,
                discrepancy=cached - ledger_total,
            )

            logger.warning(
                f"Discrepancy found for tenant {tenant_id}: "
                f"cached_balance={cached}, ledger_total={ledger_total}, "
                f"last_snapshot={last_snapshot}"
            )

            if repair:
                discrepancy.repaired = await self._repair(tenant_id, reconciliation_time)
                if discrepancy.repaired:
                    repaired_count += 1

            discrepancies.append(discrepancy)

        execution_time_ms = int((time.time() - start_time) * 1000)

        response = ReconciliationResultDTO(
            total_balances_checked=total_balances,
            discrepancies_found=len(discrepancies),
            repaired=repaired_count,
            discrepancies=discrepancies,
            reconciliation_time=reconciliation_time,
            execution_time_ms=execution_time_ms,
        )

        if discrepancies:
            logger.warning(
                f"Reconciliation complete. Found {len(discrepancies)} discrepancies "
                f"out of {total_balances} balances ({repaired_count} repaired) in {execution_time_ms}ms"
            )
        else:
            logger.info(
                f"Reconciliation complete. All {total_balances} balances match their ledger "
                f"in {execution_time_ms}ms"
            )

        return Return.ok(response)

    async def _repair(self, tenant_id: str, run_time: datetime) -> bool:
        try:
            balance: TenantBalance = await self.balance_repo.get_by_tenant_id(tenant_id, for_update=True)

            # Re-read under lock, a concurrent operation may have moved both sides
            ledger_total, last_snapshot, _ = await self.entry_repo.get_replay_totals(tenant_id)
            if balance is None or balance.is_unlimited:
                await self.uow.rollback()
                return False
            if balance.balance == ledger_total and last_snapshot in (None, balance.balance):
                await self.uow.rollback()
                return False

            if ledger_total < 0:
                await self.uow.rollback()
                logger.error(
                    f"Cannot repair tenant {tenant_id}: ledger total {ledger_total} is negative"
                )
                return False

            await self.poster.post_repair(
                balance,
                ledger_total,
                reference_id=f"reconcile:{run_time.isoformat()}",
            )
            await self.uow.commit()

            logger.info(f"Repaired balance of tenant {tenant_id} to ledger total {ledger_total}")
            return True

        except Exception as e:
            await self.uow.rollback()
            raise_if_store_busy(e, "reconcile_ledger")
            raise
