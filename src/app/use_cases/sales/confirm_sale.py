"""ConfirmSale Use Case

Moves a pending sale to confirmed once its payment settled.
"""

import logging
from datetime import datetime
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.event_publisher import EventPublisher
from src.app.services.store_errors import raise_if_store_busy
from src.app.repositories.sale_transaction_repository import SaleTransactionRepository
from src.domain.sale_transaction import SaleTransaction, SaleStatus
from src.domain.events import SaleConfirmed
from .dtos import ConfirmSaleResponseDTO

logger = logging.getLogger(__name__)


class ConfirmSale:
    """
    Use Case: Confirm a pending sale

    Business Rules:
    1. pending -> confirmed under row lock
    2. Confirming a confirmed sale succeeds without a second event
    3. Cancelled sales cannot be confirmed
    """

    def __init__(
        self,
        uow: UnitOfWork,
        sale_repo: SaleTransactionRepository,
        event_publisher: EventPublisher,
    ):
        self.uow = uow
        self.sale_repo = sale_repo
        self.event_publisher = event_publisher

    async def execute(self, tenant_id: str, sale_id: int) -> Result[ConfirmSaleResponseDTO]:
        try:
            sale = await self.sale_repo.get_by_id(tenant_id, sale_id, for_update=True)

            if not sale:
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code="SALE_NOT_FOUND",
                        message=f"Sale {sale_id} not found",
                    )
                )

            status = SaleStatus(sale.status)
            if status == SaleStatus.CONFIRMED:
                response = self._to_response_dto(sale, already_confirmed=True)
                await self.uow.rollback()
                return Return.ok(response)

            if status != SaleStatus.PENDING:
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code="INVALID_SALE_STATUS",
                        message=f"Sale {sale_id} cannot be confirmed",
                        reason=f"status={status.value}",
                    )
                )

            sale.status = SaleStatus.CONFIRMED
            sale.payment_status = "completed"
            sale.confirmed_at = datetime.utcnow()
            await self.sale_repo.update(sale)
            await self.uow.commit()

        except Exception as e:
            await self.uow.rollback()
            raise_if_store_busy(e, "confirm_sale")
            raise

        logger.info(f"Sale {sale.transaction_number} confirmed for tenant {tenant_id}")

        await self.event_publisher.publish(
            SaleConfirmed(
                tenant_id=tenant_id,
                sale_id=sale.id,
                transaction_number=sale.transaction_number,
                total=sale.total,
            )
        )

        return Return.ok(self._to_response_dto(sale))

    def _to_response_dto(self, sale: SaleTransaction, already_confirmed: bool = False) -> ConfirmSaleResponseDTO:
        return ConfirmSaleResponseDTO(
            sale_id=sale.id,
            transaction_number=sale.transaction_number,
            status=SaleStatus(sale.status).value,
            total=sale.total,
            confirmed_at=sale.confirmed_at,
            already_confirmed=already_confirmed,
        )
