"""Unit tests for ProvisionTenant use case

Tests cover:
- New tenant on a finite plan (signup credits, free grant schedule)
- Trial plan (unlimited balance, trial end)
- Replay by slug or idempotency_key never grants twice
- Slug owned by someone else
- Unknown plan
- Concurrent slug insert resolved by re-reading
"""

import pytest
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.exc import IntegrityError

from src.app.use_cases.tenants.provision_tenant import ProvisionTenant, signup_reference, PROVISIONED_EVENT
from src.app.use_cases.tenants.dtos import ProvisionTenantCommandDTO
from src.domain.ledger_entry import LedgerEntry, LedgerEntryKind
from src.domain.tenant import Tenant, TenantMember, TenantStatus
from src.domain.tenant_balance import TenantBalance, TierStatus, UNLIMITED_BALANCE


@pytest.fixture
def mock_tenant_repo():
    repo = MagicMock()
    repo.get_by_slug = AsyncMock(return_value=None)
    repo.get_by_provision_key = AsyncMock(return_value=None)
    repo.create = AsyncMock(side_effect=lambda tenant: tenant)
    repo.get_member = AsyncMock(return_value=None)
    repo.create_member = AsyncMock(side_effect=lambda member: member)
    repo.get_subscription_event = AsyncMock(return_value=None)
    repo.create_subscription_event = AsyncMock(side_effect=lambda event: event)
    return repo


@pytest.fixture
def provision_use_case(mock_uow, mock_tenant_repo, mock_balance_repo, mock_entry_repo):
    mock_balance_repo.get_by_tenant_id = AsyncMock(return_value=None)
    return ProvisionTenant(
        uow=mock_uow,
        tenant_repo=mock_tenant_repo,
        balance_repo=mock_balance_repo,
        entry_repo=mock_entry_repo,
        trial_days=14,
        free_grant_interval_days=30,
    )


def provision_command(
    plan: str = "starter", email: str = "owner@example.com", slug: str = "corner-shop", key: str = None
) -> ProvisionTenantCommandDTO:
    return ProvisionTenantCommandDTO(
        owner_user_id="user_123",
        owner_email=email,
        business_name="Corner Shop",
        slug=slug,
        plan=plan,
        idempotency_key=key,
    )


@pytest.mark.asyncio
class TestProvisionNewTenant:

    async def test_paid_plan_gets_signup_credits(
        self, provision_use_case, mock_tenant_repo, mock_balance_repo, mock_entry_repo, mock_uow
    ):
        """
        Given: No tenant with slug corner-shop
        When: It is provisioned on the starter plan
        Then: Tenant, owner, provisioned event, 25000 credit balance and one signup entry, one commit
        """
        # Act
        result = await provision_use_case.execute(provision_command("starter"))

        # Assert
        assert result.is_ok()
        record = result.value
        assert record.created is True
        assert record.plan == "starter"
        assert record.status == "active"
        assert record.balance == 25000
        assert record.limits["max_users"] == 5

        member = mock_tenant_repo.create_member.call_args.args[0]
        assert isinstance(member, TenantMember)
        assert member.user_id == "user_123"
        event = mock_tenant_repo.create_subscription_event.call_args.args[0]
        assert event.event_type == PROVISIONED_EVENT
        assert event.reference_id == f"provision:{record.tenant_id}"

        balance = mock_balance_repo.create.call_args.args[0]
        assert balance.tier_status == TierStatus.PAID
        assert balance.next_free_grant_at is None

        entry = mock_entry_repo.created[0]
        assert entry.kind == LedgerEntryKind.SIGNUP_BONUS
        assert entry.amount == 25000
        assert entry.reference_id == signup_reference(record.tenant_id)
        mock_uow.commit.assert_called_once()

    async def test_free_plan_schedules_next_grant(self, provision_use_case, mock_balance_repo):
        # Act
        result = await provision_use_case.execute(provision_command("free"))

        # Assert
        assert result.value.balance == 10000
        balance = mock_balance_repo.create.call_args.args[0]
        assert balance.tier_status == TierStatus.FREE
        assert balance.next_free_grant_at > datetime.utcnow() + timedelta(days=29)

    async def test_trial_plan_is_unlimited(self, provision_use_case, mock_entry_repo):
        """
        Given: A new tenant
        When: It is provisioned on the trial plan
        Then: Unlimited balance, trial status ending in 14 days, zero-amount signup entry
        """
        # Act
        result = await provision_use_case.execute(provision_command("trial"))

        # Assert
        record = result.value
        assert record.status == "trial"
        assert record.unlimited is True
        assert record.balance == UNLIMITED_BALANCE
        assert record.trial_ends_at > datetime.utcnow() + timedelta(days=13)
        assert mock_entry_repo.created[0].amount == 0

    async def test_unknown_plan_writes_nothing(self, provision_use_case, mock_tenant_repo, mock_uow):
        # Act
        result = await provision_use_case.execute(provision_command("platinum"))

        # Assert
        assert result.error.code == "UNKNOWN_PLAN"
        mock_tenant_repo.get_by_slug.assert_not_called()
        mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
class TestProvisionReplay:

    async def test_replay_does_not_grant_again(
        self, provision_use_case, mock_tenant_repo, mock_balance_repo, mock_entry_repo
    ):
        """
        Given: corner-shop was provisioned and its signup credits posted; 300 were spent since
        When: Provisioning is replayed
        Then: The existing tenant is returned with created=False and the balance is untouched
        """
        # Arrange
        tenant = Tenant(
            id="tenant_abc", slug="corner-shop", business_name="Corner Shop",
            owner_email="owner@example.com", plan="starter", limits={"max_users": 5},
        )
        balance = TenantBalance(id=1, tenant_id="tenant_abc", balance=24700, free_balance=24700)
        mock_tenant_repo.get_by_slug = AsyncMock(return_value=tenant)
        mock_tenant_repo.get_member = AsyncMock(
            return_value=TenantMember(id=1, tenant_id="tenant_abc", user_id="user_123", email="owner@example.com")
        )
        mock_tenant_repo.get_subscription_event = AsyncMock(return_value=MagicMock())
        mock_balance_repo.get_by_tenant_id = AsyncMock(return_value=balance)
        mock_entry_repo.get_by_idempotency_key = AsyncMock(
            return_value=LedgerEntry(
                id=1, tenant_id="tenant_abc", amount=25000, balance_after=25000,
                kind=LedgerEntryKind.SIGNUP_BONUS, reference_id="signup:tenant_abc",
            )
        )

        # Act
        result = await provision_use_case.execute(provision_command("starter"))

        # Assert
        assert result.value.created is False
        assert result.value.tenant_id == "tenant_abc"
        assert result.value.balance == 24700
        assert mock_entry_repo.created == []
        mock_tenant_repo.create.assert_not_called()
        mock_tenant_repo.create_member.assert_not_called()
        mock_tenant_repo.create_subscription_event.assert_not_called()
        mock_entry_repo.get_by_idempotency_key.assert_called_with("tenant_abc:grant:signup:tenant_abc")

    async def test_slug_of_another_owner(self, provision_use_case, mock_tenant_repo, mock_uow):
        # Arrange
        mock_tenant_repo.get_by_slug = AsyncMock(
            return_value=Tenant(
                id="tenant_abc", slug="corner-shop", business_name="Other",
                owner_email="someone@else.com", plan="free",
            )
        )

        # Act
        result = await provision_use_case.execute(provision_command())

        # Assert
        assert result.error.code == "SLUG_TAKEN"
        mock_uow.commit.assert_not_called()

    async def test_replay_by_idempotency_key_with_changed_slug(
        self, provision_use_case, mock_tenant_repo, mock_balance_repo, mock_entry_repo
    ):
        """
        Given: Request signup-7f3a provisioned corner-shop
        When: The same key is replayed with the slug corner-shop-2
        Then: The original tenant is returned, no second tenant or signup grant is created
        """
        # Arrange
        tenant = Tenant(
            id="tenant_abc", slug="corner-shop", provision_key="signup-7f3a", business_name="Corner Shop",
            owner_email="owner@example.com", plan="starter", limits={},
        )
        mock_tenant_repo.get_by_provision_key = AsyncMock(return_value=tenant)
        mock_balance_repo.get_by_tenant_id = AsyncMock(
            return_value=TenantBalance(id=1, tenant_id="tenant_abc", balance=25000, free_balance=25000)
        )
        mock_entry_repo.get_by_idempotency_key = AsyncMock(return_value=MagicMock())

        # Act
        result = await provision_use_case.execute(provision_command(slug="corner-shop-2", key="signup-7f3a"))

        # Assert
        assert result.value.created is False
        assert result.value.slug == "corner-shop"
        mock_tenant_repo.get_by_provision_key.assert_called_once_with("signup-7f3a")
        mock_tenant_repo.get_by_slug.assert_not_called()
        mock_tenant_repo.create.assert_not_called()
        assert mock_entry_repo.created == []

    async def test_new_tenant_stores_idempotency_key(self, provision_use_case, mock_tenant_repo):
        # Act
        result = await provision_use_case.execute(provision_command(key="signup-7f3a"))

        # Assert
        assert result.value.created is True
        assert mock_tenant_repo.create.call_args.args[0].provision_key == "signup-7f3a"

    async def test_idempotency_key_of_another_owner(self, provision_use_case, mock_tenant_repo, mock_uow):
        # Arrange
        mock_tenant_repo.get_by_provision_key = AsyncMock(
            return_value=Tenant(
                id="tenant_abc", slug="other-shop", provision_key="signup-7f3a", business_name="Other",
                owner_email="someone@else.com", plan="free",
            )
        )

        # Act
        result = await provision_use_case.execute(provision_command(key="signup-7f3a"))

        # Assert
        assert result.error.code == "IDEMPOTENCY_KEY_REUSED"
        mock_uow.commit.assert_not_called()

    async def test_concurrent_slug_insert_is_reread(
        self, provision_use_case, mock_tenant_repo, mock_entry_repo, mock_uow
    ):
        """
        Given: A concurrent request inserted corner-shop between our lookup and insert
        When: Our insert violates the unique slug
        Then: The winner's tenant is re-read and provisioning completes as a replay
        """
        # Arrange
        winner = Tenant(
            id="tenant_win", slug="corner-shop", business_name="Corner Shop",
            owner_email="owner@example.com", plan="starter",
        )
        mock_tenant_repo.get_by_slug = AsyncMock(side_effect=[None, winner])
        mock_tenant_repo.create = AsyncMock(side_effect=IntegrityError("INSERT", {}, Exception("unique")))

        # Act
        result = await provision_use_case.execute(provision_command("starter"))

        # Assert
        assert result.is_ok()
        assert result.value.tenant_id == "tenant_win"
        assert result.value.created is False
        mock_uow.rollback.assert_called_once()
        mock_uow.commit.assert_called_once()
