"""Free Credit Replenishment Background Worker

Grants the monthly free credits to free-tier tenants whose
next_free_grant_at is due. Each due date is granted once per tenant
however often the worker runs.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional

from config import ApplicationConfig
from src.adapter.repositories import SqlAlchemyTenantBalanceRepository, SqlAlchemyLedgerEntryRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.credits import ReplenishFreeCredits, ReplenishResultDTO
from src.worker.base import PeriodicWorker, configure_logging

logger = logging.getLogger(__name__)


class FreeCreditReplenisherWorker(PeriodicWorker):

    name = "FreeCreditReplenisherWorker"

    def __init__(
        self,
        db_uri: Optional[str] = None,
        monthly_credits: Optional[int] = None,
        interval_days: Optional[int] = None,
    ):
        super().__init__(db_uri)
        self.monthly_credits = monthly_credits or ApplicationConfig.FREE_TIER_MONTHLY_CREDITS
        self.interval_days = interval_days or ApplicationConfig.FREE_GRANT_INTERVAL_DAYS
        logger.info(f"{self.name} initialized ({self.monthly_credits} credits every {self.interval_days} days)")

    async def run_once(self, now: Optional[datetime] = None) -> ReplenishResultDTO:
        now = now or datetime.utcnow()

        if not ApplicationConfig.REPLENISH_ENABLED:
            logger.info("Free credit replenishment is disabled, skipping")
            return ReplenishResultDTO(run_at=now, tenants_due=0, granted=0, skipped=0, failed=0)

        async with self.async_session_factory() as session:
            use_case = ReplenishFreeCredits(
                uow=SqlAlchemyUnitOfWork(session),
                balance_repo=SqlAlchemyTenantBalanceRepository(session),
                entry_repo=SqlAlchemyLedgerEntryRepository(session),
                monthly_credits=self.monthly_credits,
                interval_days=self.interval_days,
            )
            result = await use_case.execute(now=now)

        if result.is_err():
            raise RuntimeError(f"Replenishment failed: {result.error.message}")
        return result.value

    def summarize(self, result: ReplenishResultDTO) -> str:
        return (
            f"Due={result.tenants_due}, granted={result.granted}, "
            f"skipped={result.skipped}, failed={result.failed}"
        )


async def main():
    """
    Usage:
        python -m src.worker.free_credit_replenisher --once
        python -m src.worker.free_credit_replenisher --interval 600
    """
    import argparse

    configure_logging()

    parser = argparse.ArgumentParser(description="Free Credit Replenishment Worker")
    parser.add_argument("--once", action="store_true", help="Run once and exit")
    parser.add_argument(
        "--interval", type=int, default=ApplicationConfig.REPLENISH_INTERVAL_SECONDS,
        help="Seconds between runs"
    )
    args = parser.parse_args()

    worker = FreeCreditReplenisherWorker()
    try:
        if args.once:
            print(worker.summarize(await worker.run_once()))
        else:
            await worker.run_forever(interval_seconds=args.interval)
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
