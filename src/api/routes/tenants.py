"""Tenant API Routes"""

from fastapi import APIRouter, Depends, Response, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.schemas.tenant_request import ProvisionTenantRequestSchema
from src.app.use_cases.tenants import ProvisionTenant, ProvisionTenantCommandDTO, TenantRecordDTO
from src.adapter.repositories import (
    SqlAlchemyTenantRepository,
    SqlAlchemyTenantBalanceRepository,
    SqlAlchemyLedgerEntryRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session
from src.api.error import raise_for_error

router = APIRouter(prefix="/tenants", tags=["Tenants"])


@router.post("", response_model=TenantRecordDTO, status_code=status.HTTP_201_CREATED)
async def provision_tenant(
    request: ProvisionTenantRequestSchema,
    response: Response,
    session: AsyncSession = Depends(get_session),
):
    """
    Provision a tenant with its owner and signup credits.

    Replaying the request returns the existing tenant with status 200
    and grants nothing.
    """
    use_case = ProvisionTenant(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyTenantRepository(session),
        SqlAlchemyTenantBalanceRepository(session),
        SqlAlchemyLedgerEntryRepository(session),
        trial_days=ApplicationConfig.TRIAL_DAYS,
        free_grant_interval_days=ApplicationConfig.FREE_GRANT_INTERVAL_DAYS,
    )
    result = await use_case.execute(
        ProvisionTenantCommandDTO(
            owner_user_id=request.owner_user_id,
            owner_email=request.owner_email,
            business_name=request.business_name,
            slug=request.slug,
            plan=request.plan,
            idempotency_key=request.idempotency_key,
        )
    )

    if result.is_err():
        raise_for_error(result.error)

    if not result.value.created:
        response.status_code = status.HTTP_200_OK

    return result.value
