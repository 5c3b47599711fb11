"""RecordPlatformFee Use Case

Derives the platform commission of a confirmed sale. Runs as a
SaleConfirmed handler, in its own unit of work.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from sqlalchemy.exc import IntegrityError
from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.store_errors import raise_if_store_busy
from src.app.repositories.fee_transaction_repository import FeeTransactionRepository
from src.domain.events import SaleConfirmed
from src.domain.fee_transaction import FeeTransaction, FeeStatus
from .dtos import FeeTransactionDTO

logger = logging.getLogger(__name__)


def calculate_fee(total: Decimal, fee_percent: Decimal) -> Decimal:
    """fee = total * percent / 100, rounded half-up to cents"""
    return (Decimal(total) * fee_percent / Decimal("100")).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class RecordPlatformFee:
    """
    Use Case: Record the platform fee of a confirmed sale

    Business Rules:
    1. One fee per sale (unique sale_id); re-delivery returns the existing fee
    2. Fee is created pending; collection happens elsewhere
    """

    def __init__(
        self,
        uow: UnitOfWork,
        fee_repo: FeeTransactionRepository,
        fee_percent: Decimal = Decimal("2.0"),
    ):
        self.uow = uow
        self.fee_repo = fee_repo
        self.fee_percent = Decimal(str(fee_percent))

    async def execute(self, event: SaleConfirmed) -> Result[FeeTransactionDTO]:
        existing = await self.fee_repo.get_by_sale_id(event.sale_id)
        if existing:
            return Return.ok(self._to_dto(existing, replayed=True))

        fee = FeeTransaction(
            tenant_id=event.tenant_id,
            sale_id=event.sale_id,
            sale_total=event.total,
            fee_rate=self.fee_percent,
            fee_amount=calculate_fee(event.total, self.fee_percent),
            status=FeeStatus.PENDING,
        )

        try:
            created = await self.fee_repo.create(fee)
            await self.uow.commit()
        except IntegrityError:
            # Concurrent delivery of the same event won the insert
            await self.uow.rollback()
            existing = await self.fee_repo.get_by_sale_id(event.sale_id)
            if existing is None:
                raise
            return Return.ok(self._to_dto(existing, replayed=True))
        except Exception as e:
            await self.uow.rollback()
            raise_if_store_busy(e, "record_platform_fee")
            raise

        logger.info(
            f"Recorded platform fee {created.fee_amount} for sale {event.sale_id} "
            f"(tenant {event.tenant_id}, total {event.total})"
        )
        return Return.ok(self._to_dto(created))

    def _to_dto(self, fee: FeeTransaction, replayed: bool = False) -> FeeTransactionDTO:
        return FeeTransactionDTO(
            fee_id=fee.id,
            tenant_id=fee.tenant_id,
            sale_id=fee.sale_id,
            sale_total=fee.sale_total,
            fee_rate=fee.fee_rate,
            fee_amount=fee.fee_amount,
            status=FeeStatus(fee.status).value,
            created_at=fee.created_at,
            replayed=replayed,
        )
