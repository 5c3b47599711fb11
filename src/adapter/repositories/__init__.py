from .tenant_balance_repository import SqlAlchemyTenantBalanceRepository
from .ledger_entry_repository import SqlAlchemyLedgerEntryRepository
from .credit_cost_repository import SqlAlchemyCreditCostRepository
from .action_log_repository import SqlAlchemyActionLogRepository
from .inventory_repository import SqlAlchemyInventoryRepository
from .sale_transaction_repository import SqlAlchemySaleTransactionRepository
from .pos_shift_repository import SqlAlchemyPosShiftRepository
from .customer_repository import SqlAlchemyCustomerRepository
from .unified_order_repository import SqlAlchemyUnifiedOrderRepository
from .fee_transaction_repository import SqlAlchemyFeeTransactionRepository
from .tenant_repository import SqlAlchemyTenantRepository

__all__ = [
    "SqlAlchemyTenantBalanceRepository",
    "SqlAlchemyLedgerEntryRepository",
    "SqlAlchemyCreditCostRepository",
    "SqlAlchemyActionLogRepository",
    "SqlAlchemyInventoryRepository",
    "SqlAlchemySaleTransactionRepository",
    "SqlAlchemyPosShiftRepository",
    "SqlAlchemyCustomerRepository",
    "SqlAlchemyUnifiedOrderRepository",
    "SqlAlchemyFeeTransactionRepository",
    "SqlAlchemyTenantRepository",
]
