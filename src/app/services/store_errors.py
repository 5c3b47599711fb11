"""Translation of driver-level lock failures into StoreBusyError"""

from sqlalchemy.exc import DBAPIError, IntegrityError
from src.domain.exceptions import StoreBusyError

# Substrings of driver messages that indicate lock contention
BUSY_MARKERS = (
    "database is locked",
    "database table is locked",
    "lock timeout",
    "lock_not_available",
    "could not obtain lock",
    "deadlock",
    "could not serialize",
)

# PostgreSQL SQLSTATEs: lock_not_available, deadlock_detected, serialization_failure
BUSY_SQLSTATES = frozenset({"55P03", "40P01", "40001"})


def is_store_busy(exc: BaseException) -> bool:
    """
    Tell whether a store exception is transient lock contention

    PostgreSQL reports lock_not_available / deadlock_detected, SQLite
    reports "database is locked". Any other operational failure, such as
    a refused connection, is not contention.
    """
    if isinstance(exc, IntegrityError) or not isinstance(exc, DBAPIError):
        return False
    sqlstate = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
    if sqlstate in BUSY_SQLSTATES:
        return True
    message = str(exc.orig or exc).lower()
    return any(marker in message for marker in BUSY_MARKERS)


def raise_if_store_busy(exc: BaseException, operation: str) -> None:
    """Re-raise lock contention as StoreBusyError, leave anything else alone"""
    if is_store_busy(exc):
        raise StoreBusyError(operation, str(exc)) from exc
