"""ConsumeCredits Use Case

Consumes credits from a tenant's balance under a row lock, appending
one consumption entry to the ledger.
"""

import logging
from datetime import datetime
from typing import Callable
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.ledger_posting import LedgerPoster
from src.app.services.store_errors import raise_if_store_busy
from src.app.repositories.tenant_balance_repository import TenantBalanceRepository
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from src.app.repositories.credit_cost_repository import CreditCostRepository
from src.domain.ledger_entry import LedgerEntry, LedgerEntryKind
from .dtos import ConsumeCreditsCommandDTO, ConsumeCreditsResponseDTO

logger = logging.getLogger(__name__)


class ConsumeCredits:
    """
    Use Case: Consume credits from tenant balance

    Business Rules:
    1. Idempotency: a repeated reference_id returns the original outcome
    2. Sufficient balance: balance >= cost, otherwise nothing changes
    3. Unlimited balances and zero-cost actions succeed without an entry
    3a. An unlimited trial past free_credits_expire_at is converted to a
        finite free-tier balance before the charge
    4. Free credits are spent before purchased credits
    5. Pessimistic locking: SELECT FOR UPDATE on the balance row

    Flow:
    1. Resolve cost (override, configured cost, default)
    2. Check idempotency (return existing if found)
    3. Get balance with lock
    4. Validate sufficient balance
    5. Post consumption (balance + entry)
    6. Commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        balance_repo: TenantBalanceRepository,
        entry_repo: LedgerEntryRepository,
        cost_repo: CreditCostRepository,
        default_action_cost: int = 1,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.uow = uow
        self.balance_repo = balance_repo
        self.entry_repo = entry_repo
        self.cost_repo = cost_repo
        self.default_action_cost = default_action_cost
        self.clock = clock
        self.poster = LedgerPoster(balance_repo, entry_repo)

    async def execute(self, command: ConsumeCreditsCommandDTO) -> Result[ConsumeCreditsResponseDTO]:
        """
        Execute credit consumption

        Returns:
            Result[ConsumeCreditsResponseDTO]: consumed credits and new balance,
            or INSUFFICIENT_CREDITS / NO_BALANCE_RECORD

        Raises:
            StoreBusyError: If the balance row could not be locked in time
        """
        try:
            # Step 1: Resolve cost
            cost = command.amount_override
            if cost is None:
                cost = await self.cost_repo.get_active_cost(command.action_key)
            if cost is None:
                cost = self.default_action_cost

            # Step 2: Idempotency
            existing_entry = await self.poster.find_posted(
                command.tenant_id, LedgerEntryKind.CONSUMPTION, command.reference_id
            )
            if existing_entry:
                return Return.ok(self._replayed(existing_entry))

            # Step 3: Lock balance row
            balance = await self.balance_repo.get_by_tenant_id(command.tenant_id, for_update=True)
            if not balance:
                await self.uow.rollback()
                logger.error(f"No balance record for tenant {command.tenant_id}")
                return Return.err(
                    Error(
                        code="NO_BALANCE_RECORD",
                        message=f"No credit balance found for tenant {command.tenant_id}",
                        reason="Tenant was never provisioned",
                    )
                )

            if command.reference_id:
                # Posted by a concurrent request while we waited for the lock
                existing_entry = await self.poster.find_posted(
                    command.tenant_id, LedgerEntryKind.CONSUMPTION, command.reference_id
                )
                if existing_entry:
                    replayed = self._replayed(existing_entry)
                    await self.uow.rollback()
                    return Return.ok(replayed)

            now = self.clock()
            if balance.trial_expired(now):
                await self.poster.expire_trial(balance, now)
                logger.info(f"Trial expired for tenant {command.tenant_id}, balance={balance.balance}")

            if balance.is_unlimited or cost == 0:
                await self.uow.commit()
                return Return.ok(
                    ConsumeCreditsResponseDTO(
                        tenant_id=command.tenant_id,
                        consumed=0,
                        new_balance=balance.balance,
                    )
                )

            # Step 4: Validate sufficient balance
            if balance.balance < cost:
                available = balance.balance
                await self.uow.rollback()
                logger.warning(
                    f"Insufficient credits for tenant {command.tenant_id}: "
                    f"action={command.action_key}, balance={available}, required={cost}"
                )
                return Return.err(
                    Error(
                        code="INSUFFICIENT_CREDITS",
                        message=f"Insufficient credits. Required: {cost}, Available: {available}",
                        reason=f"balance={available}, required={cost}",
                        details={"balance": available, "required": cost},
                    )
                )

            # Step 5: Post consumption
            entry = await self.poster.post_consumption(
                balance,
                cost,
                action_key=command.action_key,
                description=command.description,
                reference_id=command.reference_id,
                metadata=command.metadata,
            )

            # Step 6: Commit
            await self.uow.commit()

            logger.info(
                f"Consumed {cost} credits from tenant {command.tenant_id} "
                f"for {command.action_key}, balance={entry.balance_after}"
            )

            return Return.ok(
                ConsumeCreditsResponseDTO(
                    tenant_id=command.tenant_id,
                    consumed=cost,
                    new_balance=entry.balance_after,
                    entry_id=entry.id,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            raise_if_store_busy(e, "consume_credits")
            raise

    def _replayed(self, entry: LedgerEntry) -> ConsumeCreditsResponseDTO:
        return ConsumeCreditsResponseDTO(
            tenant_id=entry.tenant_id,
            consumed=-entry.amount,
            new_balance=entry.balance_after,
            entry_id=entry.id,
            replayed=True,
        )
