"""Sale API Routes

FastAPI routes for point-of-sale transactions.
"""

from decimal import Decimal
from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.schemas.sale_request import SaleRequestSchema, ConfirmSaleRequestSchema
from src.app.services.event_publisher import EventPublisher
from src.app.use_cases.sales import (
    ExecuteSale,
    ConfirmSale,
    ExecuteSaleCommandDTO,
    SaleLineCommandDTO,
    SaleResultDTO,
    ConfirmSaleResponseDTO,
)
from src.adapter.repositories import (
    SqlAlchemyInventoryRepository,
    SqlAlchemySaleTransactionRepository,
    SqlAlchemyPosShiftRepository,
    SqlAlchemyCustomerRepository,
    SqlAlchemyUnifiedOrderRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session, get_event_publisher
from src.api.error import raise_for_error

router = APIRouter(prefix="/sales", tags=["Sales"])


@router.post(
    "",
    response_model=SaleResultDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {
            "description": "Insufficient stock",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INSUFFICIENT_STOCK",
                            "message": "Insufficient stock for 1 product(s)",
                            "details": {
                                "items": [
                                    {"product_id": "prod_1", "requested": 5, "available": 2, "reason": "insufficient"}
                                ]
                            }
                        }
                    }
                }
            }
        },
        422: {"description": "Amount invariant violated"},
        503: {"description": "Inventory rows locked, retry later"},
    }
)
async def execute_sale(
    request: SaleRequestSchema,
    session: AsyncSession = Depends(get_session),
    event_publisher: EventPublisher = Depends(get_event_publisher),
):
    """
    Execute a sale atomically.

    Either every line is fulfilled (stock decremented, sale and audit rows
    written, shift and loyalty updated) or nothing changes.

    **Returns:**
    - 201: Sale created, with low-stock warnings
    - 409: Insufficient stock (every short line listed) or shift not open
    - 422: Amount invariant violated
    - 503: Store busy, retry
    """
    command = ExecuteSaleCommandDTO(
        tenant_id=request.tenant_id,
        line_items=[
            SaleLineCommandDTO(product_id=line.product_id, quantity=line.quantity, unit_price=line.unit_price)
            for line in request.line_items
        ],
        payment_method=request.payment_method,
        payment_status=request.payment_status,
        tax_amount=request.tax_amount,
        discount_amount=request.discount_amount,
        shift_id=request.shift_id,
        customer_id=request.customer_id,
    )

    use_case = ExecuteSale(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInventoryRepository(session),
        SqlAlchemySaleTransactionRepository(session),
        SqlAlchemyPosShiftRepository(session),
        SqlAlchemyCustomerRepository(session),
        SqlAlchemyUnifiedOrderRepository(session),
        event_publisher,
        transaction_number_prefix=ApplicationConfig.TRANSACTION_NUMBER_PREFIX,
        max_number_attempts=ApplicationConfig.TRANSACTION_NUMBER_MAX_ATTEMPTS,
        critical_ratio=ApplicationConfig.LOW_STOCK_CRITICAL_RATIO,
        loyalty_points_per_unit=Decimal(str(ApplicationConfig.LOYALTY_POINTS_PER_UNIT)),
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post("/{sale_id}/confirm", response_model=ConfirmSaleResponseDTO)
async def confirm_sale(
    sale_id: int,
    request: ConfirmSaleRequestSchema,
    session: AsyncSession = Depends(get_session),
    event_publisher: EventPublisher = Depends(get_event_publisher),
):
    """Confirm a pending sale once its payment settled."""
    use_case = ConfirmSale(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemySaleTransactionRepository(session),
        event_publisher,
    )
    result = await use_case.execute(request.tenant_id, sale_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
