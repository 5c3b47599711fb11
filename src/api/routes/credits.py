"""Credit API Routes

FastAPI routes for the tenant credit ledger.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.schemas.credit_request import ConsumeRequestSchema, GrantRequestSchema
from src.app.use_cases.credits import (
    CheckCredits,
    ConsumeCredits,
    GrantCredits,
    GetBalance,
    ListLedgerEntries,
    CheckCreditsResponseDTO,
    ConsumeCreditsCommandDTO,
    ConsumeCreditsResponseDTO,
    GrantCreditsCommandDTO,
    GrantCreditsResponseDTO,
    BalanceResponseDTO,
    ListLedgerEntriesResponseDTO,
)
from src.adapter.repositories import (
    SqlAlchemyTenantBalanceRepository,
    SqlAlchemyLedgerEntryRepository,
    SqlAlchemyCreditCostRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session
from src.api.error import raise_for_error

router = APIRouter(prefix="/credits", tags=["Credits"])


@router.get("/{tenant_id}/check", response_model=CheckCreditsResponseDTO)
async def check_credits(
    tenant_id: str,
    action_key: str = Query(..., min_length=1),
    session: AsyncSession = Depends(get_session),
):
    """
    Check whether the tenant can afford an action. Nothing is charged.

    **Returns:**
    - 200: allowed flag, balance and cost
    - 404: Tenant has no balance record
    """
    use_case = CheckCredits(
        SqlAlchemyTenantBalanceRepository(session),
        SqlAlchemyCreditCostRepository(session),
        SqlAlchemyLedgerEntryRepository(session),
        default_action_cost=ApplicationConfig.DEFAULT_ACTION_COST,
    )
    result = await use_case.execute(tenant_id, action_key)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/consume",
    response_model=ConsumeCreditsResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        402: {
            "description": "Insufficient credits",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INSUFFICIENT_CREDITS",
                            "message": "Insufficient credits. Required: 100, Available: 50",
                            "details": {"balance": 50, "required": 100}
                        }
                    }
                }
            }
        },
        503: {"description": "Balance row locked, retry later"},
    }
)
async def consume_credits(
    request: ConsumeRequestSchema,
    session: AsyncSession = Depends(get_session)
):
    """
    Consume credits for an action.

    The cost is the configured cost of `action_key` unless `amount` is
    given. Free credits are spent before purchased ones. Unlimited tenants
    are never charged. Repeating a request with the same `reference_id`
    returns the original outcome without charging again.

    **Returns:**
    - 200: Credits consumed
    - 402: Insufficient credits
    - 404: Tenant has no balance record
    - 503: Store busy, retry
    """
    uow = SqlAlchemyUnitOfWork(session)

    command = ConsumeCreditsCommandDTO(
        tenant_id=request.tenant_id,
        action_key=request.action_key,
        amount_override=request.amount,
        description=request.description,
        reference_id=request.reference_id,
        metadata=request.metadata,
    )

    use_case = ConsumeCredits(
        uow,
        SqlAlchemyTenantBalanceRepository(session),
        SqlAlchemyLedgerEntryRepository(session),
        SqlAlchemyCreditCostRepository(session),
        default_action_cost=ApplicationConfig.DEFAULT_ACTION_COST,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post("/grant", response_model=GrantCreditsResponseDTO, status_code=status.HTTP_200_OK)
async def grant_credits(
    request: GrantRequestSchema,
    session: AsyncSession = Depends(get_session)
):
    """
    Grant credits (free grant, refund, signup bonus or purchase).

    The same `reference_id` never credits a tenant twice.
    """
    uow = SqlAlchemyUnitOfWork(session)

    command = GrantCreditsCommandDTO(
        tenant_id=request.tenant_id,
        amount=request.amount,
        kind=request.kind,
        description=request.description,
        reference_id=request.reference_id,
        metadata=request.metadata,
    )

    use_case = GrantCredits(
        uow,
        SqlAlchemyTenantBalanceRepository(session),
        SqlAlchemyLedgerEntryRepository(session),
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/{tenant_id}/balance", response_model=BalanceResponseDTO)
async def get_balance(
    tenant_id: str,
    session: AsyncSession = Depends(get_session)
):
    """Current balance projection of the tenant."""
    use_case = GetBalance(SqlAlchemyTenantBalanceRepository(session))
    result = await use_case.execute(tenant_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/{tenant_id}/ledger", response_model=ListLedgerEntriesResponseDTO)
async def list_ledger_entries(
    tenant_id: str,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_session)
):
    """Ledger entries of the tenant, newest first."""
    use_case = ListLedgerEntries(SqlAlchemyLedgerEntryRepository(session))
    result = await use_case.execute(tenant_id, limit=limit, offset=offset)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
