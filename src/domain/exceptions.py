"""Domain exceptions

Expected business failures are returned as ``libs.result`` errors. Only
store-level failures surface as exceptions.
"""


class StoreBusyError(Exception):
    """
    A unit of work could not get its row locks in time

    Transient. The whole operation may be retried from scratch.
    """

    def __init__(self, operation: str, reason: str = ""):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} failed: store busy ({reason})" if reason else f"{operation} failed: store busy")


class DuplicateTransactionNumberError(Exception):
    """A concurrent sale inserted the same transaction number first"""

    def __init__(self, transaction_number: str):
        self.transaction_number = transaction_number
        super().__init__(f"transaction number {transaction_number} already exists")
