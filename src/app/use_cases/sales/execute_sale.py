"""ExecuteSale Use Case

Executes a point-of-sale sale atomically: stock validation, inventory
decrement, sale records, shift and loyalty counters, low-stock warnings.
"""

import logging
import math
import secrets
from collections import OrderedDict
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, List, Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.event_publisher import EventPublisher
from src.app.services.store_errors import raise_if_store_busy
from src.app.repositories.inventory_repository import InventoryRepository
from src.app.repositories.sale_transaction_repository import SaleTransactionRepository
from src.app.repositories.pos_shift_repository import PosShiftRepository
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.unified_order_repository import UnifiedOrderRepository
from src.domain.inventory_item import InventoryItem, InventoryMovement
from src.domain.sale_transaction import SaleTransaction, SaleLineItem, SaleStatus, PaymentMethod
from src.domain.pos_shift import PosShift, ShiftStatus
from src.domain.customer import Customer
from src.domain.unified_order import UnifiedOrder
from src.domain.events import SaleConfirmed
from src.domain.exceptions import DuplicateTransactionNumberError
from .dtos import (
    ExecuteSaleCommandDTO,
    LowStockWarningDTO,
    SaleResultDTO,
    StockShortageDTO,
)

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def to_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


class ExecuteSale:
    """
    Use Case: Execute a POS sale

    Business Rules:
    1. Amount invariants are checked before anything is locked
    2. All-or-nothing: every line is fulfilled or nothing changes
    3. Every short line is reported, not just the first one
    4. Inventory rows are locked in ascending product_id order
    5. The stock decrement re-checks availability in the UPDATE itself
    6. A completed payment creates a confirmed sale and publishes
       SaleConfirmed after commit

    Flow:
    1. Validate invariants (no lock)
    2. Lock inventory rows, collect shortages
    3. Lock and validate shift and customer
    4. Insert the sale header under a unique transaction number
    5. Write line items
    6. Decrement stock, write movements, collect low-stock warnings
    7. Update shift totals, customer loyalty, unified order mirror
    8. Commit, then publish
    """

    def __init__(
        self,
        uow: UnitOfWork,
        inventory_repo: InventoryRepository,
        sale_repo: SaleTransactionRepository,
        shift_repo: PosShiftRepository,
        customer_repo: CustomerRepository,
        unified_order_repo: UnifiedOrderRepository,
        event_publisher: EventPublisher,
        transaction_number_prefix: str = "POS",
        max_number_attempts: int = 5,
        critical_ratio: float = 0.25,
        loyalty_points_per_unit: Decimal = Decimal("1"),
    ):
        self.uow = uow
        self.inventory_repo = inventory_repo
        self.sale_repo = sale_repo
        self.shift_repo = shift_repo
        self.customer_repo = customer_repo
        self.unified_order_repo = unified_order_repo
        self.event_publisher = event_publisher
        self.transaction_number_prefix = transaction_number_prefix
        self.max_number_attempts = max_number_attempts
        self.critical_ratio = critical_ratio
        self.loyalty_points_per_unit = Decimal(str(loyalty_points_per_unit))

    async def execute(self, command: ExecuteSaleCommandDTO) -> Result[SaleResultDTO]:
        """
        Execute the sale

        Returns:
            Result[SaleResultDTO]: the created sale, or INVARIANT_VIOLATION /
            INSUFFICIENT_STOCK / SHIFT_NOT_OPEN / CUSTOMER_NOT_FOUND

        Raises:
            StoreBusyError: If row locks could not be acquired in time
        """
        # Step 1: Invariants
        violations = self._check_invariants(command)
        if violations:
            return Return.err(
                Error(
                    code="INVARIANT_VIOLATION",
                    message="Sale request violates amount invariants",
                    reason="; ".join(violations),
                    details={"violations": violations},
                )
            )

        requested: Dict[str, int] = OrderedDict()
        for line in sorted(command.line_items, key=lambda line: line.product_id):
            requested[line.product_id] = requested.get(line.product_id, 0) + line.quantity

        subtotal = sum((to_money(line.unit_price * line.quantity) for line in command.line_items), Decimal("0"))
        tax_amount = to_money(command.tax_amount)
        discount_amount = to_money(command.discount_amount)
        total = subtotal + tax_amount - discount_amount

        try:
            # Step 2: Lock inventory, collect shortages
            items = await self.inventory_repo.lock_items(command.tenant_id, list(requested))

            shortages = self._find_shortages(requested, items)
            if shortages:
                await self.uow.rollback()
                return self._insufficient_stock(command.tenant_id, shortages)

            # Step 3: Shift and customer
            shift: Optional[PosShift] = None
            if command.shift_id is not None:
                shift = await self.shift_repo.get_by_id(command.tenant_id, command.shift_id, for_update=True)
                if not shift or ShiftStatus(shift.status) != ShiftStatus.OPEN:
                    await self.uow.rollback()
                    return Return.err(
                        Error(
                            code="SHIFT_NOT_OPEN",
                            message=f"Shift {command.shift_id} is not open",
                            reason="Shift not found or already closed",
                        )
                    )

            customer: Optional[Customer] = None
            if command.customer_id is not None:
                customer = await self.customer_repo.get_by_id(
                    command.tenant_id, command.customer_id, for_update=True
                )
                if not customer:
                    await self.uow.rollback()
                    return Return.err(
                        Error(
                            code="CUSTOMER_NOT_FOUND",
                            message=f"Customer {command.customer_id} not found",
                        )
                    )

            now = datetime.utcnow()

            # Step 4 and 5: Transaction number and sale header
            confirmed = command.payment_status == "completed"
            sale = await self._create_sale_header(
                lambda number: SaleTransaction(
                    tenant_id=command.tenant_id,
                    transaction_number=number,
                    status=SaleStatus.CONFIRMED if confirmed else SaleStatus.PENDING,
                    subtotal=subtotal,
                    tax_amount=tax_amount,
                    discount_amount=discount_amount,
                    total=total,
                    payment_method=command.payment_method,
                    payment_status=command.payment_status,
                    shift_id=command.shift_id,
                    customer_id=command.customer_id,
                    confirmed_at=now if confirmed else None,
                    created_at=now,
                ),
                now,
            )
            if sale is None:
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code="TRANSACTION_NUMBER_EXHAUSTED",
                        message="Could not allocate a unique transaction number",
                        reason=f"{self.max_number_attempts} attempts collided",
                    )
                )

            transaction_number = sale.transaction_number

            line_items = [
                SaleLineItem(
                    sale_id=sale.id,
                    product_id=line.product_id,
                    product_name=items[line.product_id].name,
                    quantity=line.quantity,
                    unit_price=to_money(line.unit_price),
                    line_total=to_money(line.unit_price * line.quantity),
                )
                for line in command.line_items
            ]
            await self.sale_repo.add_line_items(line_items)

            # Step 6: Stock
            warnings: List[LowStockWarningDTO] = []
            for product_id, quantity in requested.items():
                item = items[product_id]
                quantity_before = item.quantity_on_hand

                if not await self.inventory_repo.decrement_stock(item, quantity):
                    # Availability changed between the lock and the update
                    available = max(item.available, 0)
                    await self.uow.rollback()
                    return self._insufficient_stock(
                        command.tenant_id,
                        [
                            StockShortageDTO(
                                product_id=product_id,
                                requested=quantity,
                                available=available,
                                reason="insufficient",
                            )
                        ],
                    )

                await self.inventory_repo.add_movement(
                    InventoryMovement(
                        tenant_id=command.tenant_id,
                        inventory_item_id=item.id,
                        product_id=product_id,
                        movement_type="sale",
                        quantity_change=-quantity,
                        quantity_before=quantity_before,
                        quantity_after=item.quantity_on_hand,
                        reference=transaction_number,
                        created_at=now,
                    )
                )

                warning = self._low_stock_warning(item)
                if warning:
                    warnings.append(warning)

            if warnings:
                sale.low_stock_warnings = [w.model_dump() for w in warnings]
                await self.sale_repo.update(sale)

            # Step 7: Counters and mirror
            if shift:
                self._add_to_shift(shift, command.payment_method, total)
                await self.shift_repo.update(shift)

            if customer:
                customer.loyalty_points += math.floor(total * self.loyalty_points_per_unit)
                customer.total_spent += total
                customer.last_purchase_at = now
                await self.customer_repo.update(customer)

            await self.unified_order_repo.create(
                UnifiedOrder(
                    tenant_id=command.tenant_id,
                    order_number=transaction_number,
                    source_channel="pos",
                    source_id=str(sale.id),
                    status=SaleStatus(sale.status).value,
                    subtotal=subtotal,
                    tax_amount=tax_amount,
                    discount_amount=discount_amount,
                    total=total,
                    payment_method=PaymentMethod(command.payment_method).value,
                    payment_status=command.payment_status,
                    customer_id=command.customer_id,
                    items=[
                        {
                            "product_id": li.product_id,
                            "product_name": li.product_name,
                            "quantity": li.quantity,
                            "unit_price": str(li.unit_price),
                            "line_total": str(li.line_total),
                        }
                        for li in line_items
                    ],
                    created_at=now,
                )
            )

            # Step 8: Commit, then publish
            await self.uow.commit()

        except Exception as e:
            await self.uow.rollback()
            raise_if_store_busy(e, "execute_sale")
            raise

        logger.info(
            f"Sale {transaction_number} executed for tenant {command.tenant_id}: "
            f"total={total}, lines={len(line_items)}, warnings={len(warnings)}"
        )

        if confirmed:
            await self.event_publisher.publish(
                SaleConfirmed(
                    tenant_id=command.tenant_id,
                    sale_id=sale.id,
                    transaction_number=transaction_number,
                    total=total,
                )
            )

        return Return.ok(
            SaleResultDTO(
                sale_id=sale.id,
                transaction_number=transaction_number,
                status=SaleStatus(sale.status).value,
                subtotal=subtotal,
                tax_amount=tax_amount,
                discount_amount=discount_amount,
                total=total,
                warnings=warnings,
                created_at=sale.created_at,
            )
        )

    def _check_invariants(self, command: ExecuteSaleCommandDTO) -> List[str]:
        violations = []
        if not command.line_items:
            violations.append("sale must contain at least one line item")
        for index, line in enumerate(command.line_items):
            if line.quantity <= 0:
                violations.append(f"line {index}: quantity must be > 0")
            if line.unit_price < 0:
                violations.append(f"line {index}: unit_price must be >= 0")
        if command.tax_amount < 0:
            violations.append("tax_amount must be >= 0")
        if command.discount_amount < 0:
            violations.append("discount_amount must be >= 0")
        if not violations:
            subtotal = sum((line.unit_price * line.quantity for line in command.line_items), Decimal("0"))
            if subtotal + command.tax_amount - command.discount_amount < 0:
                violations.append("total must be >= 0")
        return violations

    def _find_shortages(
        self, requested: Dict[str, int], items: Dict[str, InventoryItem]
    ) -> List[StockShortageDTO]:
        shortages = []
        for product_id, quantity in requested.items():
            item = items.get(product_id)
            if item is None:
                shortages.append(
                    StockShortageDTO(product_id=product_id, requested=quantity, available=0, reason="not_found")
                )
            elif item.available < quantity:
                shortages.append(
                    StockShortageDTO(
                        product_id=product_id,
                        requested=quantity,
                        available=max(item.available, 0),
                        reason="insufficient",
                    )
                )
        return shortages

    def _insufficient_stock(self, tenant_id: str, shortages: List[StockShortageDTO]) -> Result:
        logger.warning(
            f"Sale rejected for tenant {tenant_id}: insufficient stock for "
            f"{[s.product_id for s in shortages]}"
        )
        return Return.err(
            Error(
                code="INSUFFICIENT_STOCK",
                message=f"Insufficient stock for {len(shortages)} product(s)",
                reason=", ".join(f"{s.product_id} ({s.reason})" for s in shortages),
                details={"items": [s.model_dump() for s in shortages]},
            )
        )

    def _low_stock_warning(self, item: InventoryItem) -> Optional[LowStockWarningDTO]:
        remaining = item.available
        threshold = item.low_stock_threshold

        if remaining <= 0:
            alert_level = "out_of_stock"
        elif remaining <= threshold * self.critical_ratio:
            alert_level = "critical"
        elif remaining <= threshold:
            alert_level = "warning"
        else:
            return None

        return LowStockWarningDTO(
            product_id=item.product_id,
            product_name=item.name,
            alert_level=alert_level,
            remaining=max(remaining, 0),
            threshold=threshold,
        )

    def _add_to_shift(self, shift: PosShift, payment_method: PaymentMethod, total: Decimal) -> None:
        shift.total_transactions += 1
        shift.total_sales += total
        method = PaymentMethod(payment_method)
        if method == PaymentMethod.CASH:
            shift.cash_sales += total
        elif method == PaymentMethod.CARD:
            shift.card_sales += total
        else:
            shift.other_sales += total

    async def _create_sale_header(
        self, build_sale: Callable[[str], SaleTransaction], now: datetime
    ) -> Optional[SaleTransaction]:
        """
        Insert the sale under a fresh transaction number

        A number is skipped when it already exists or when a concurrent sale
        inserts it first. Returns None once max_number_attempts are used up.
        """
        for _ in range(self.max_number_attempts):
            candidate = f"{self.transaction_number_prefix}-{now.strftime('%Y%m%d')}-{secrets.token_hex(3).upper()}"
            if await self.sale_repo.transaction_number_exists(candidate):
                logger.info(f"Transaction number {candidate} already taken, retrying")
                continue
            try:
                return await self.sale_repo.create(build_sale(candidate))
            except DuplicateTransactionNumberError:
                logger.info(f"Transaction number {candidate} inserted by a concurrent sale, retrying")
        return None
