from .base import BaseModel, generate_uuid
from .tenant_balance import TenantBalance, TierStatus, UNLIMITED_BALANCE
from .ledger_entry import LedgerEntry, LedgerEntryKind, GRANT_KINDS, build_idempotency_key
from .credit_cost import CreditCost
from .action_log import ActionLog
from .inventory_item import InventoryItem, InventoryMovement
from .sale_transaction import SaleTransaction, SaleLineItem, SaleStatus, PaymentMethod
from .pos_shift import PosShift, ShiftStatus
from .customer import Customer
from .unified_order import UnifiedOrder
from .fee_transaction import FeeTransaction, FeeStatus
from .tenant import Tenant, TenantMember, TenantStatus, MemberRole, SubscriptionEvent
from .exceptions import StoreBusyError
from .events import DomainEvent, SaleConfirmed

__all__ = [
    "BaseModel",
    "generate_uuid",
    "TenantBalance",
    "TierStatus",
    "UNLIMITED_BALANCE",
    "LedgerEntry",
    "LedgerEntryKind",
    "GRANT_KINDS",
    "build_idempotency_key",
    "CreditCost",
    "ActionLog",
    "InventoryItem",
    "InventoryMovement",
    "SaleTransaction",
    "SaleLineItem",
    "SaleStatus",
    "PaymentMethod",
    "PosShift",
    "ShiftStatus",
    "Customer",
    "UnifiedOrder",
    "FeeTransaction",
    "FeeStatus",
    "Tenant",
    "TenantMember",
    "TenantStatus",
    "MemberRole",
    "SubscriptionEvent",
    "StoreBusyError",
    "DomainEvent",
    "SaleConfirmed",
]
