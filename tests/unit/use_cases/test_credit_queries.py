"""Unit tests for read-only credit use cases

Tests cover:
- CheckCredits affordability, including ended trials
- GetBalance projection
- ListLedgerEntries pagination
"""

import pytest
from unittest.mock import AsyncMock, MagicMock
from datetime import datetime

from src.app.use_cases.credits.check_credits import CheckCredits
from src.app.use_cases.credits.get_balance import GetBalance
from src.app.use_cases.credits.list_ledger_entries import ListLedgerEntries
from src.domain.ledger_entry import LedgerEntry, LedgerEntryKind
from src.domain.tenant_balance import TenantBalance, TierStatus, UNLIMITED_BALANCE


@pytest.fixture
def mock_cost_repo():
    repo = MagicMock()
    repo.get_active_cost = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def finite_balance():
    return TenantBalance(
        id=1,
        tenant_id="tenant_123",
        balance=20,
        free_balance=20,
        purchased_balance=0,
        lifetime_earned=20,
        lifetime_spent=0,
        tier_status=TierStatus.FREE,
        updated_at=datetime(2026, 1, 1),
    )


@pytest.mark.asyncio
class TestCheckCredits:

    async def test_allowed_when_balance_covers_cost(self, mock_balance_repo, mock_cost_repo, finite_balance):
        """
        Given: Balance 20 and action cost 15
        When: CheckCredits is executed
        Then: allowed=True and nothing is locked
        """
        # Arrange
        mock_balance_repo.get_by_tenant_id = AsyncMock(return_value=finite_balance)
        mock_cost_repo.get_active_cost = AsyncMock(return_value=15)
        use_case = CheckCredits(mock_balance_repo, mock_cost_repo)

        # Act
        result = await use_case.execute("tenant_123", "ai.generate")

        # Assert
        assert result.is_ok()
        assert result.value.allowed is True
        assert result.value.cost == 15
        mock_balance_repo.get_by_tenant_id.assert_called_once_with("tenant_123")

    async def test_denied_when_cost_exceeds_balance(self, mock_balance_repo, mock_cost_repo, finite_balance):
        # Arrange
        mock_balance_repo.get_by_tenant_id = AsyncMock(return_value=finite_balance)
        mock_cost_repo.get_active_cost = AsyncMock(return_value=21)
        use_case = CheckCredits(mock_balance_repo, mock_cost_repo)

        # Act
        result = await use_case.execute("tenant_123", "ai.generate")

        # Assert
        assert result.value.allowed is False
        assert result.value.balance == 20

    async def test_unlimited_is_always_allowed(self, mock_balance_repo, mock_cost_repo):
        # Arrange
        mock_balance_repo.get_by_tenant_id = AsyncMock(
            return_value=TenantBalance(id=2, tenant_id="tenant_trial", balance=UNLIMITED_BALANCE)
        )
        mock_cost_repo.get_active_cost = AsyncMock(return_value=1_000_000)
        use_case = CheckCredits(mock_balance_repo, mock_cost_repo)

        # Act
        result = await use_case.execute("tenant_trial", "bulk")

        # Assert
        assert result.value.allowed is True
        assert result.value.unlimited is True

    async def test_expired_trial_reports_converted_balance(
        self, mock_balance_repo, mock_cost_repo, mock_entry_repo
    ):
        """
        Given: An unlimited trial that ended, with 5 credits on its ledger
        When: A 10 credit action is checked
        Then: Not unlimited, balance 5, denied, and the row is left untouched
        """
        # Arrange
        trial = TenantBalance(
            id=2, tenant_id="tenant_trial", balance=UNLIMITED_BALANCE,
            free_credits_expire_at=datetime(2026, 1, 31),
        )
        mock_balance_repo.get_by_tenant_id = AsyncMock(return_value=trial)
        mock_cost_repo.get_active_cost = AsyncMock(return_value=10)
        mock_entry_repo.get_replay_totals = AsyncMock(return_value=(5, 0, 2))
        use_case = CheckCredits(
            mock_balance_repo, mock_cost_repo, mock_entry_repo, clock=lambda: datetime(2026, 2, 1)
        )

        # Act
        result = await use_case.execute("tenant_trial", "bulk")

        # Assert
        assert result.value.unlimited is False
        assert result.value.balance == 5
        assert result.value.allowed is False
        assert trial.balance == UNLIMITED_BALANCE
        mock_balance_repo.save.assert_not_called()

    async def test_unconfigured_action_uses_default_cost(self, mock_balance_repo, mock_cost_repo, finite_balance):
        # Arrange
        mock_balance_repo.get_by_tenant_id = AsyncMock(return_value=finite_balance)
        use_case = CheckCredits(mock_balance_repo, mock_cost_repo, default_action_cost=3)

        # Act
        result = await use_case.execute("tenant_123", "unknown")

        # Assert
        assert result.value.cost == 3

    async def test_missing_balance_record(self, mock_balance_repo, mock_cost_repo):
        # Arrange
        mock_balance_repo.get_by_tenant_id = AsyncMock(return_value=None)
        use_case = CheckCredits(mock_balance_repo, mock_cost_repo)

        # Act
        result = await use_case.execute("ghost", "ai.generate")

        # Assert
        assert result.is_err()
        assert result.error.code == "NO_BALANCE_RECORD"


@pytest.mark.asyncio
class TestGetBalance:

    async def test_returns_projection(self, mock_balance_repo, finite_balance):
        # Arrange
        mock_balance_repo.get_by_tenant_id = AsyncMock(return_value=finite_balance)

        # Act
        result = await GetBalance(mock_balance_repo).execute("tenant_123")

        # Assert
        assert result.is_ok()
        assert result.value.balance == 20
        assert result.value.free_balance == 20
        assert result.value.tier_status == "free"
        assert result.value.unlimited is False

    async def test_missing_balance_record(self, mock_balance_repo):
        # Arrange
        mock_balance_repo.get_by_tenant_id = AsyncMock(return_value=None)

        # Act
        result = await GetBalance(mock_balance_repo).execute("ghost")

        # Assert
        assert result.is_err()
        assert result.error.code == "NO_BALANCE_RECORD"


@pytest.mark.asyncio
class TestListLedgerEntries:

    async def test_returns_page_with_total(self, mock_entry_repo):
        """
        Given: Tenant has 3 entries
        When: The first page of 2 is requested
        Then: 2 entries and total=3 are returned
        """
        # Arrange
        entries = [
            LedgerEntry(id=3, tenant_id="tenant_123", amount=-5, balance_after=15,
                        kind=LedgerEntryKind.CONSUMPTION, action_key="ai.generate",
                        created_at=datetime(2026, 1, 3)),
            LedgerEntry(id=2, tenant_id="tenant_123", amount=-5, balance_after=20,
                        kind=LedgerEntryKind.CONSUMPTION, action_key="ai.generate",
                        created_at=datetime(2026, 1, 2)),
        ]
        mock_entry_repo.get_by_tenant_id = AsyncMock(return_value=(entries, 3))

        # Act
        result = await ListLedgerEntries(mock_entry_repo).execute("tenant_123", limit=2, offset=0)

        # Assert
        assert result.is_ok()
        assert result.value.total == 3
        assert [e.id for e in result.value.entries] == [3, 2]
        assert result.value.entries[0].kind == "consumption"
        mock_entry_repo.get_by_tenant_id.assert_called_once_with("tenant_123", limit=2, offset=0)

    @pytest.mark.parametrize("limit,offset", [(0, 0), (101, 0), (10, -1)])
    async def test_invalid_pagination(self, mock_entry_repo, limit, offset):
        # Arrange
        mock_entry_repo.get_by_tenant_id = AsyncMock()

        # Act
        result = await ListLedgerEntries(mock_entry_repo).execute("tenant_123", limit=limit, offset=offset)

        # Assert
        assert result.is_err()
        assert result.error.code == "INVALID_PAGINATION"
        mock_entry_repo.get_by_tenant_id.assert_not_called()
