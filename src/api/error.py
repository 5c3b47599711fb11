"""API error types

ClientError wraps a use case Error with the HTTP status to answer with.
"""

from fastapi import status
from libs.result import Error


class ClientError(Exception):
    def __init__(self, error: Error, status_code: int = status.HTTP_400_BAD_REQUEST, headers: dict = None):
        self.error = error
        self.status_code = status_code
        self.headers = headers
        super().__init__(error.message)


# Use case error codes that are not plain 400s
ERROR_STATUS = {
    "INSUFFICIENT_CREDITS": status.HTTP_402_PAYMENT_REQUIRED,
    "NO_BALANCE_RECORD": status.HTTP_404_NOT_FOUND,
    "INSUFFICIENT_STOCK": status.HTTP_409_CONFLICT,
    "SHIFT_NOT_OPEN": status.HTTP_409_CONFLICT,
    "CUSTOMER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "SALE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INVALID_SALE_STATUS": status.HTTP_409_CONFLICT,
    "SLUG_TAKEN": status.HTTP_409_CONFLICT,
    "IDEMPOTENCY_KEY_REUSED": status.HTTP_409_CONFLICT,
    "INVARIANT_VIOLATION": status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def raise_for_error(error: Error) -> None:
    raise ClientError(error, status_code=ERROR_STATUS.get(error.code, status.HTTP_400_BAD_REQUEST))
