"""Ledger Reconciliation Background Worker

Replays every tenant's credit ledger against its cached balance on a
schedule, optionally repairing drifted projections.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional

from config import ApplicationConfig
from src.adapter.repositories import SqlAlchemyTenantBalanceRepository, SqlAlchemyLedgerEntryRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.credits import ReconcileLedger, ReconciliationResultDTO
from src.worker.base import PeriodicWorker, configure_logging

logger = logging.getLogger(__name__)


class LedgerReconcilerWorker(PeriodicWorker):
    """
    Usage:
        worker = LedgerReconcilerWorker(repair=True)
        await worker.run_once()
        await worker.run_forever(interval_seconds=86400)
    """

    name = "LedgerReconcilerWorker"

    def __init__(self, db_uri: Optional[str] = None, repair: Optional[bool] = None):
        super().__init__(db_uri)
        self.repair = ApplicationConfig.RECONCILIATION_REPAIR if repair is None else repair
        logger.info(f"{self.name} initialized (repair={self.repair})")

    async def run_once(self) -> ReconciliationResultDTO:
        if not ApplicationConfig.RECONCILIATION_ENABLED:
            logger.info("Ledger reconciliation is disabled, skipping")
            return ReconciliationResultDTO(
                total_balances_checked=0,
                discrepancies_found=0,
                discrepancies=[],
                reconciliation_time=datetime.utcnow(),
                execution_time_ms=0,
            )

        async with self.async_session_factory() as session:
            use_case = ReconcileLedger(
                uow=SqlAlchemyUnitOfWork(session),
                balance_repo=SqlAlchemyTenantBalanceRepository(session),
                entry_repo=SqlAlchemyLedgerEntryRepository(session),
            )
            result = await use_case.execute(repair=self.repair)

        if result.is_err():
            raise RuntimeError(f"Reconciliation failed: {result.error.message}")

        report = result.value
        unrepaired = [d for d in report.discrepancies if not d.repaired]
        if unrepaired:
            logger.error(f"ALERT: {len(unrepaired)} unrepaired ledger discrepancies")
            for d in unrepaired:
                logger.error(
                    f"  - Tenant {d.tenant_id}: cached={d.cached_balance}, "
                    f"ledger={d.ledger_total}, diff={d.discrepancy}"
                )
        return report

    def summarize(self, result: ReconciliationResultDTO) -> str:
        return (
            f"Checked {result.total_balances_checked} balances, "
            f"found {result.discrepancies_found} discrepancies, "
            f"repaired {result.repaired} in {result.execution_time_ms}ms"
        )


async def main():
    """
    Usage:
        python -m src.worker.ledger_reconciler --once [--repair]
        python -m src.worker.ledger_reconciler --interval 3600
    """
    import argparse

    configure_logging()

    parser = argparse.ArgumentParser(description="Ledger Reconciliation Worker")
    parser.add_argument("--once", action="store_true", help="Run once and exit")
    parser.add_argument("--repair", action="store_true", help="Rewrite drifted balances to the ledger total")
    parser.add_argument(
        "--interval", type=int, default=ApplicationConfig.RECONCILIATION_INTERVAL_SECONDS,
        help="Seconds between runs"
    )
    args = parser.parse_args()

    worker = LedgerReconcilerWorker(repair=args.repair or None)
    try:
        if args.once:
            result = await worker.run_once()
            print(worker.summarize(result))
            for d in result.discrepancies:
                print(f"  {d.tenant_id}: cached={d.cached_balance} ledger={d.ledger_total} repaired={d.repaired}")
        else:
            await worker.run_forever(interval_seconds=args.interval)
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
