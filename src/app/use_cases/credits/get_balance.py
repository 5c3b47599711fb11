"""GetBalance Use Case

Retrieves the current credit balance projection of a tenant.
"""

from libs.result import Result, Return, Error
from src.app.repositories.tenant_balance_repository import TenantBalanceRepository
from src.domain.tenant_balance import TierStatus
from .dtos import BalanceResponseDTO


class GetBalance:
    """
    Use Case: Get tenant credit balance

    Read-only, no lock taken.
    """

    def __init__(self, balance_repo: TenantBalanceRepository):
        self.balance_repo = balance_repo

    async def execute(self, tenant_id: str) -> Result[BalanceResponseDTO]:
        balance = await self.balance_repo.get_by_tenant_id(tenant_id)

        if not balance:
            return Return.err(
                Error(
                    code="NO_BALANCE_RECORD",
                    message=f"No credit balance found for tenant {tenant_id}",
                    reason="Tenant was never provisioned",
                )
            )

        return Return.ok(
            BalanceResponseDTO(
                tenant_id=balance.tenant_id,
                balance=balance.balance,
                free_balance=balance.free_balance,
                purchased_balance=balance.purchased_balance,
                lifetime_earned=balance.lifetime_earned,
                lifetime_spent=balance.lifetime_spent,
                tier_status=TierStatus(balance.tier_status).value,
                unlimited=balance.is_unlimited,
                free_credits_expire_at=balance.free_credits_expire_at,
                next_free_grant_at=balance.next_free_grant_at,
                updated_at=balance.updated_at,
            )
        )
