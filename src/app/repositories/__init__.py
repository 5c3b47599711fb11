from .tenant_balance_repository import TenantBalanceRepository
from .ledger_entry_repository import LedgerEntryRepository
from .credit_cost_repository import CreditCostRepository
from .action_log_repository import ActionLogRepository
from .inventory_repository import InventoryRepository
from .sale_transaction_repository import SaleTransactionRepository
from .pos_shift_repository import PosShiftRepository
from .customer_repository import CustomerRepository
from .unified_order_repository import UnifiedOrderRepository
from .fee_transaction_repository import FeeTransactionRepository
from .tenant_repository import TenantRepository

__all__ = [
    "TenantBalanceRepository",
    "LedgerEntryRepository",
    "CreditCostRepository",
    "ActionLogRepository",
    "InventoryRepository",
    "SaleTransactionRepository",
    "PosShiftRepository",
    "CustomerRepository",
    "UnifiedOrderRepository",
    "FeeTransactionRepository",
    "TenantRepository",
]
