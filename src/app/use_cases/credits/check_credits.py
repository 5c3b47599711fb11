"""CheckCredits Use Case

Read-only affordability check for an action.
"""

import logging
from datetime import datetime
from typing import Callable, Optional
from libs.result import Result, Return, Error
from src.app.repositories.tenant_balance_repository import TenantBalanceRepository
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from src.app.repositories.credit_cost_repository import CreditCostRepository
from .dtos import CheckCreditsResponseDTO

logger = logging.getLogger(__name__)


class CheckCredits:
    """
    Use Case: Check whether a tenant can afford an action

    Business Rules:
    1. Cost comes from the active credit_costs row, else default_action_cost
    2. Unlimited balances are always allowed while the trial runs
    3. An expired trial is reported as the finite balance it converts to
       on the next charge (ledger total, never negative)
    4. Nothing is locked or written
    """

    def __init__(
        self,
        balance_repo: TenantBalanceRepository,
        cost_repo: CreditCostRepository,
        entry_repo: Optional[LedgerEntryRepository] = None,
        default_action_cost: int = 1,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.balance_repo = balance_repo
        self.cost_repo = cost_repo
        self.entry_repo = entry_repo
        self.default_action_cost = default_action_cost
        self.clock = clock

    async def execute(self, tenant_id: str, action_key: str) -> Result[CheckCreditsResponseDTO]:
        balance = await self.balance_repo.get_by_tenant_id(tenant_id)
        if not balance:
            logger.error(f"No balance record for tenant {tenant_id}")
            return Return.err(
                Error(
                    code="NO_BALANCE_RECORD",
                    message=f"No credit balance found for tenant {tenant_id}",
                    reason="Tenant was never provisioned",
                )
            )

        cost = await self.cost_repo.get_active_cost(action_key)
        if cost is None:
            cost = self.default_action_cost

        available = balance.balance
        unlimited = balance.is_unlimited
        if balance.trial_expired(self.clock()):
            unlimited = False
            available = 0
            if self.entry_repo is not None:
                ledger_total, _, _ = await self.entry_repo.get_replay_totals(tenant_id)
                available = max(ledger_total, 0)

        return Return.ok(
            CheckCreditsResponseDTO(
                tenant_id=tenant_id,
                action_key=action_key,
                allowed=unlimited or available >= cost,
                balance=available,
                cost=cost,
                unlimited=unlimited,
            )
        )
