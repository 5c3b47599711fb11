"""Integration tests for atomic POS sales

Tests cover:
- A completed sale writes every record and triggers the platform fee
- A short line leaves stock and sale tables untouched
- Concurrent sales for the last units never oversell
- Pending sale confirmed later records its fee once, re-confirming is a no-op
- Stock taken between the lock and the decrement aborts the sale
- A transaction number inserted concurrently is retried under a new one
"""

import asyncio
import pytest
from datetime import datetime
from decimal import Decimal
from sqlalchemy import update
from sqlmodel import select

import src.app.use_cases.sales.execute_sale as execute_sale_module

from src.adapter.repositories import (
    SqlAlchemyInventoryRepository,
    SqlAlchemySaleTransactionRepository,
    SqlAlchemyPosShiftRepository,
    SqlAlchemyCustomerRepository,
    SqlAlchemyUnifiedOrderRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.sales import ConfirmSale, ExecuteSale, ExecuteSaleCommandDTO, SaleLineCommandDTO
from src.depends import build_event_bus
from src.domain.customer import Customer
from src.domain.fee_transaction import FeeTransaction
from src.domain.inventory_item import InventoryItem, InventoryMovement
from src.domain.pos_shift import PosShift
from src.domain.sale_transaction import SaleTransaction, SaleLineItem, PaymentMethod
from src.domain.unified_order import UnifiedOrder


@pytest.fixture
def bus(session_factory):
    return build_event_bus(session_factory, fee_percent=2.0)


@pytest.fixture
def sale_use_case(bus):
    def build(session) -> ExecuteSale:
        return ExecuteSale(
            SqlAlchemyUnitOfWork(session),
            SqlAlchemyInventoryRepository(session),
            SqlAlchemySaleTransactionRepository(session),
            SqlAlchemyPosShiftRepository(session),
            SqlAlchemyCustomerRepository(session),
            SqlAlchemyUnifiedOrderRepository(session),
            bus,
        )

    return build


def sale_command(*lines, **kwargs) -> ExecuteSaleCommandDTO:
    return ExecuteSaleCommandDTO(
        tenant_id="t_shop",
        line_items=[
            SaleLineCommandDTO(product_id=pid, quantity=qty, unit_price=Decimal(price)) for pid, qty, price in lines
        ],
        **kwargs,
    )


def stock(product_id: str, on_hand: int, threshold: int = 10) -> InventoryItem:
    return InventoryItem(
        tenant_id="t_shop",
        product_id=product_id,
        name=f"Product {product_id}",
        quantity_on_hand=on_hand,
        low_stock_threshold=threshold,
    )


async def on_hand(fetch_all, product_id: str) -> int:
    rows = await fetch_all(select(InventoryItem).where(InventoryItem.product_id == product_id))
    return rows[0].quantity_on_hand


@pytest.mark.asyncio
class TestExecuteSaleIntegration:

    async def test_completed_sale_writes_every_record(self, run, seed, fetch_all, sale_use_case):
        """
        Given: Stock for two products, an open shift and a customer
        When: A card sale of 2 x 12.50 and 1 x 4.00 plus 1.00 tax is executed
        Then: Stock, movements, lines, shift, loyalty, unified order and a 2% fee are all written
        """
        # Arrange
        shift = PosShift(tenant_id="t_shop")
        customer = Customer(tenant_id="t_shop")
        await seed(stock("prod_a", 12), stock("prod_b", 3), shift, customer)

        # Act
        result = await run(
            sale_use_case,
            sale_command(
                ("prod_a", 2, "12.50"), ("prod_b", 1, "4.00"),
                tax_amount=Decimal("1.00"), payment_method=PaymentMethod.CARD,
                shift_id=shift.id, customer_id=customer.id,
            ),
        )

        # Assert
        assert result.is_ok()
        sale = result.value
        assert sale.total == Decimal("30.00")
        assert [(w.product_id, w.alert_level) for w in sale.warnings] == [("prod_a", "warning"), ("prod_b", "critical")]

        assert await on_hand(fetch_all, "prod_a") == 10
        assert await on_hand(fetch_all, "prod_b") == 2

        movements = await fetch_all(select(InventoryMovement).order_by(InventoryMovement.id))
        assert [(m.product_id, m.quantity_change) for m in movements] == [("prod_a", -2), ("prod_b", -1)]

        lines = await fetch_all(select(SaleLineItem).where(SaleLineItem.sale_id == sale.sale_id))
        assert len(lines) == 2

        saved_shift = (await fetch_all(select(PosShift)))[0]
        assert saved_shift.total_transactions == 1
        assert saved_shift.card_sales == Decimal("30.00")

        saved_customer = (await fetch_all(select(Customer)))[0]
        assert saved_customer.loyalty_points == 30

        orders = await fetch_all(select(UnifiedOrder))
        assert orders[0].order_number == sale.transaction_number
        assert orders[0].source_channel == "pos"

        fees = await fetch_all(select(FeeTransaction))
        assert len(fees) == 1
        assert fees[0].sale_id == sale.sale_id
        assert fees[0].fee_amount == Decimal("0.60")

    async def test_short_line_changes_nothing(self, run, seed, fetch_all, sale_use_case):
        # Arrange
        await seed(stock("prod_a", 12), stock("prod_b", 3))

        # Act
        result = await run(sale_use_case, sale_command(("prod_a", 2, "1.00"), ("prod_b", 4, "1.00")))

        # Assert
        assert result.error.code == "INSUFFICIENT_STOCK"
        assert [i["product_id"] for i in result.error.details["items"]] == ["prod_b"]
        assert await on_hand(fetch_all, "prod_a") == 12
        assert await fetch_all(select(SaleTransaction)) == []
        assert await fetch_all(select(InventoryMovement)) == []
        assert await fetch_all(select(FeeTransaction)) == []

    async def test_concurrent_sales_never_oversell(self, session_factory, seed, fetch_all, sale_use_case):
        """
        Given: 5 units left and four concurrent sales of 2 units, each in its own session
        When: They run at once
        Then: Exactly two succeed, stock ends at 1 and never goes negative
        """
        # Arrange
        await seed(stock("prod_last", 5))

        async def sell():
            async with session_factory() as session:
                return await sale_use_case(session).execute(sale_command(("prod_last", 2, "3.00")))

        # Act
        results = await asyncio.gather(*(sell() for _ in range(4)))

        # Assert
        assert sum(1 for r in results if r.is_ok()) == 2
        assert all(r.error.code == "INSUFFICIENT_STOCK" for r in results if r.is_err())
        assert await on_hand(fetch_all, "prod_last") == 1
        assert len(await fetch_all(select(SaleTransaction))) == 2

    async def test_pending_sale_fee_recorded_on_confirmation(self, run, seed, fetch_all, sale_use_case, bus):
        # Arrange
        await seed(stock("prod_a", 12))
        pending = await run(sale_use_case, sale_command(("prod_a", 1, "50.00"), payment_status="pending"))
        assert await fetch_all(select(FeeTransaction)) == []

        def confirm_use_case(session) -> ConfirmSale:
            return ConfirmSale(SqlAlchemyUnitOfWork(session), SqlAlchemySaleTransactionRepository(session), bus)

        # Act
        confirmed = await run(confirm_use_case, "t_shop", pending.value.sale_id)
        again = await run(confirm_use_case, "t_shop", pending.value.sale_id)

        # Assert
        assert confirmed.value.status == "confirmed"
        assert again.value.already_confirmed is True
        assert again.value.transaction_number == confirmed.value.transaction_number
        assert again.value.total == Decimal("50.00")
        assert again.value.confirmed_at == confirmed.value.confirmed_at
        fees = await fetch_all(select(FeeTransaction))
        assert len(fees) == 1
        assert fees[0].fee_amount == Decimal("1.00")

    async def test_stock_taken_before_decrement_rolls_back(self, run, seed, fetch_all, sale_use_case):
        """
        Given: Another writer reserves the stock after our lock was read but before the guarded decrement
        When: The sale executes
        Then: INSUFFICIENT_STOCK with the availability seen under the lock, nothing is written
        """
        # Arrange
        await seed(stock("prod_a", 4))

        def racing_use_case(session) -> ExecuteSale:
            use_case = sale_use_case(session)
            decrement = use_case.inventory_repo.decrement_stock

            async def reserve_then_decrement(item, quantity):
                await session.execute(
                    update(InventoryItem)
                    .where(InventoryItem.id == item.id)
                    .values(quantity_reserved=4)
                    .execution_options(synchronize_session=False)
                )
                return await decrement(item, quantity)

            use_case.inventory_repo.decrement_stock = reserve_then_decrement
            return use_case

        # Act
        result = await run(racing_use_case, sale_command(("prod_a", 3, "1.00")))

        # Assert
        assert result.error.code == "INSUFFICIENT_STOCK"
        assert result.error.details["items"] == [
            {"product_id": "prod_a", "requested": 3, "available": 4, "reason": "insufficient"}
        ]
        rows = await fetch_all(select(InventoryItem))
        assert (rows[0].quantity_on_hand, rows[0].quantity_reserved) == (4, 0)
        assert await fetch_all(select(SaleTransaction)) == []

    async def test_number_inserted_concurrently_gets_a_new_one(
        self, run, seed, fetch_all, sale_use_case, monkeypatch
    ):
        """
        Given: A sale numbered ...-AAAAAA committed after our existence check passed
        When: Our header insert hits the unique transaction number
        Then: The savepoint is rolled back and the sale commits as ...-BBBBBB with its stock movement
        """
        # Arrange
        day = datetime.utcnow().strftime("%Y%m%d")
        await seed(
            stock("prod_a", 12),
            SaleTransaction(
                tenant_id="t_shop", transaction_number=f"POS-{day}-AAAAAA",
                subtotal=Decimal("1.00"), total=Decimal("1.00"),
            ),
        )
        tokens = iter(["aaaaaa", "bbbbbb"])
        monkeypatch.setattr(execute_sale_module.secrets, "token_hex", lambda nbytes: next(tokens))

        def unchecked_use_case(session) -> ExecuteSale:
            use_case = sale_use_case(session)

            async def never_taken(transaction_number):
                return False

            use_case.sale_repo.transaction_number_exists = never_taken
            return use_case

        # Act
        result = await run(unchecked_use_case, sale_command(("prod_a", 2, "1.00")))

        # Assert
        assert result.is_ok()
        assert result.value.transaction_number == f"POS-{day}-BBBBBB"
        numbers = sorted(s.transaction_number for s in await fetch_all(select(SaleTransaction)))
        assert numbers == [f"POS-{day}-AAAAAA", f"POS-{day}-BBBBBB"]
        assert await on_hand(fetch_all, "prod_a") == 10
        movements = await fetch_all(select(InventoryMovement))
        assert [m.reference for m in movements] == [f"POS-{day}-BBBBBB"]
