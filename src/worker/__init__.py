"""Background workers for the commerce ledger service"""
from .ledger_reconciler import LedgerReconcilerWorker
from .free_credit_replenisher import FreeCreditReplenisherWorker

__all__ = ["LedgerReconcilerWorker", "FreeCreditReplenisherWorker"]
