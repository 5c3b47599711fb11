import pytest
from unittest.mock import AsyncMock, MagicMock

from src.domain.ledger_entry import LedgerEntry


@pytest.fixture
def mock_uow():
    """Mock unit of work"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock()
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def mock_balance_repo():
    """Mock tenant balance repository; save returns the saved balance"""
    repo = MagicMock()
    repo.save = AsyncMock(side_effect=lambda balance: balance)
    repo.create = AsyncMock(side_effect=lambda balance: balance)
    return repo


@pytest.fixture
def mock_entry_repo():
    """Mock ledger entry repository; create assigns sequential IDs"""
    repo = MagicMock()
    created = []

    async def create(entry: LedgerEntry):
        entry.id = len(created) + 1
        created.append(entry)
        return entry

    repo.create = AsyncMock(side_effect=create)
    repo.get_by_idempotency_key = AsyncMock(return_value=None)
    repo.created = created
    return repo
