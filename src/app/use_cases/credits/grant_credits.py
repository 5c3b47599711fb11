"""GrantCredits Use Case

Adds credits to a tenant's balance (free grants, refunds, purchases).
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
from src.domain.ledger_entry import LedgerEntry, LedgerEntryKind, GRANT_KINDS
from .dtos import GrantCreditsCommandDTO, GrantCreditsResponseDTO

logger = logging.getLogger(__name__)


class GrantCredits:
    """
    Use Case: Grant credits to tenant balance

    Business Rules:
    1. Only grant kinds are accepted (grant, refund, signup_bonus, purchase)
    2. Idempotency: one reference_id credits a tenant at most once
    3. purchase credits land in purchased_balance, the rest in free_balance
    4. Unlimited balances keep the sentinel, the entry is still recorded
    5. An expired unlimited trial is converted to a finite balance first,
       so the grant lands on the converted balance
    """

    def __init__(
        self,
        uow: UnitOfWork,
        balance_repo: TenantBalanceRepository,
        entry_repo: LedgerEntryRepository,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.uow = uow
        self.balance_repo = balance_repo
        self.entry_repo = entry_repo
        self.clock = clock
        self.poster = LedgerPoster(balance_repo, entry_repo)

    async def execute(self, command: GrantCreditsCommandDTO) -> Result[GrantCreditsResponseDTO]:
        try:
            kind = LedgerEntryKind(command.kind)
        except ValueError:
            kind = None
        if kind not in GRANT_KINDS:
            return Return.err(
                Error(
                    code="INVALID_GRANT_KIND",
                    message=f"'{command.kind}' is not a grant kind",
                    reason=f"Allowed kinds: {sorted(k.value for k in GRANT_KINDS)}",
                )
            )

        try:
            existing_entry = await self.poster.find_posted(command.tenant_id, kind, command.reference_id)
            if existing_entry:
                return Return.ok(self._to_response_dto(existing_entry, replayed=True))

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
                existing_entry = await self.poster.find_posted(command.tenant_id, kind, command.reference_id)
                if existing_entry:
                    replayed = self._to_response_dto(existing_entry, replayed=True)
                    await self.uow.rollback()
                    return Return.ok(replayed)

            now = self.clock()
            if balance.trial_expired(now):
                await self.poster.expire_trial(balance, now)
                logger.info(f"Trial expired for tenant {command.tenant_id}, balance={balance.balance}")

            entry = await self.poster.post_grant(
                balance,
                command.amount,
                kind,
                description=command.description,
                reference_id=command.reference_id,
                metadata=command.metadata,
            )
            await self.uow.commit()

            logger.info(
                f"Granted {command.amount} credits ({kind.value}) to tenant {command.tenant_id}, "
                f"balance={entry.balance_after}"
            )
            return Return.ok(self._to_response_dto(entry))

        except Exception as e:
            await self.uow.rollback()
            raise_if_store_busy(e, "grant_credits")
            raise

    def _to_response_dto(self, entry: LedgerEntry, replayed: bool = False) -> GrantCreditsResponseDTO:
        return GrantCreditsResponseDTO(
            tenant_id=entry.tenant_id,
            entry_id=entry.id,
            amount=entry.amount,
            kind=LedgerEntryKind(entry.kind).value,
            new_balance=entry.balance_after,
            replayed=replayed,
        )
