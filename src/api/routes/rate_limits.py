"""Rate Limit API Routes"""

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from libs.result import Error
from src.api.schemas.rate_limit_request import RateLimitRequestSchema
from src.app.use_cases.rate_limits import CheckRateLimit, CheckRateLimitCommandDTO, RateLimitResponseDTO
from src.adapter.repositories import SqlAlchemyActionLogRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session
from src.api.error import ClientError, raise_for_error

router = APIRouter(prefix="/rate-limits", tags=["Rate Limits"])


@router.post(
    "/check",
    response_model=RateLimitResponseDTO,
    responses={429: {"description": "Limit reached for the current window"}},
)
async def check_rate_limit(
    request: RateLimitRequestSchema,
    session: AsyncSession = Depends(get_session)
):
    """
    Check a rate limit and record the action when allowed.

    **Returns:**
    - 200: Allowed, action recorded
    - 429: Limit reached (Retry-After until the window frees a slot)
    """
    use_case = CheckRateLimit(SqlAlchemyUnitOfWork(session), SqlAlchemyActionLogRepository(session))
    result = await use_case.execute(
        CheckRateLimitCommandDTO(
            tenant_id=request.tenant_id,
            action_type=request.action_type,
            limit=request.limit,
            window_hours=request.window_hours,
            metadata=request.metadata,
        )
    )

    if result.is_err():
        raise_for_error(result.error)

    outcome = result.value
    if not outcome.allowed:
        raise ClientError(
            Error(
                code="RATE_LIMITED",
                message=f"Limit of {outcome.limit} reached for {request.action_type}",
                details=outcome.model_dump(mode="json"),
            ),
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            headers={"X-RateLimit-Reset": outcome.reset_at.isoformat()},
        )

    return outcome
