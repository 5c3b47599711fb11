"""Integration tests for tenant provisioning

Tests cover:
- Provisioning writes tenant, owner, event, balance and signup entry together
- Replaying the same signup grants nothing twice
- Trial tenants get an unlimited balance that consumption never draws down
- An ended trial is charged against its ledger total
- Replays keyed on idempotency_key return the first tenant
- A slug owned by someone else is rejected
"""

import pytest
from datetime import datetime, timedelta
from sqlmodel import select

from src.adapter.repositories import (
    SqlAlchemyTenantRepository,
    SqlAlchemyTenantBalanceRepository,
    SqlAlchemyLedgerEntryRepository,
    SqlAlchemyCreditCostRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.credits import (
    CheckCredits,
    ConsumeCredits,
    ConsumeCreditsCommandDTO,
    GrantCredits,
    GrantCreditsCommandDTO,
)
from src.app.use_cases.tenants import ProvisionTenant, ProvisionTenantCommandDTO
from src.domain.ledger_entry import LedgerEntry, LedgerEntryKind
from src.domain.tenant import Tenant, TenantMember, SubscriptionEvent
from src.domain.tenant_balance import TenantBalance, TierStatus, UNLIMITED_BALANCE


def provision_use_case(session) -> ProvisionTenant:
    return ProvisionTenant(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyTenantRepository(session),
        SqlAlchemyTenantBalanceRepository(session),
        SqlAlchemyLedgerEntryRepository(session),
        trial_days=14,
        free_grant_interval_days=30,
    )


def signup(plan: str = "starter", slug: str = "corner-shop", email: str = "owner@example.com", key: str = None):
    return ProvisionTenantCommandDTO(
        owner_user_id="user_1",
        owner_email=email,
        business_name="Corner Shop",
        slug=slug,
        plan=plan,
        idempotency_key=key or f"signup:{slug}:{email}",
    )


@pytest.mark.asyncio
class TestProvisionTenantIntegration:

    async def test_provisioning_writes_everything(self, run, fetch_all):
        # Act
        result = await run(provision_use_case, signup("starter"))

        # Assert
        assert result.is_ok()
        record = result.value
        assert record.created is True
        assert record.balance == 25000
        assert record.limits["max_users"] == 5

        tenants = await fetch_all(select(Tenant))
        assert [t.slug for t in tenants] == ["corner-shop"]
        members = await fetch_all(select(TenantMember))
        assert [(m.user_id, m.tenant_id) for m in members] == [("user_1", record.tenant_id)]
        assert len(await fetch_all(select(SubscriptionEvent))) == 1

        balance = (await fetch_all(select(TenantBalance)))[0]
        assert balance.balance == 25000
        assert TierStatus(balance.tier_status) == TierStatus.PAID

        entries = await fetch_all(select(LedgerEntry))
        assert [(e.kind, e.amount, e.balance_after) for e in entries] == [
            (LedgerEntryKind.SIGNUP_BONUS, 25000, 25000)
        ]

    async def test_replay_grants_nothing_twice(self, run, fetch_all):
        """
        Given: A tenant already provisioned
        When: The same signup is submitted again
        Then: The original tenant is returned and no row is duplicated
        """
        # Arrange
        first = await run(provision_use_case, signup("free"))

        # Act
        replay = await run(provision_use_case, signup("free"))

        # Assert
        assert replay.value.created is False
        assert replay.value.tenant_id == first.value.tenant_id
        assert replay.value.balance == 10000
        assert len(await fetch_all(select(Tenant))) == 1
        assert len(await fetch_all(select(TenantMember))) == 1
        assert len(await fetch_all(select(SubscriptionEvent))) == 1
        assert len(await fetch_all(select(LedgerEntry))) == 1

    async def test_trial_balance_is_unlimited(self, run, fetch_all):
        # Arrange
        provisioned = await run(provision_use_case, signup("trial"))
        tenant_id = provisioned.value.tenant_id

        def consume_use_case(session) -> ConsumeCredits:
            return ConsumeCredits(
                SqlAlchemyUnitOfWork(session),
                SqlAlchemyTenantBalanceRepository(session),
                SqlAlchemyLedgerEntryRepository(session),
                SqlAlchemyCreditCostRepository(session),
            )

        # Act
        consumed = await run(
            consume_use_case,
            ConsumeCreditsCommandDTO(tenant_id=tenant_id, action_key="ai.generate", amount_override=500),
        )

        # Assert
        assert provisioned.value.unlimited is True
        assert provisioned.value.trial_ends_at is not None
        assert consumed.value.consumed == 0
        assert consumed.value.new_balance == UNLIMITED_BALANCE

        balance = (await fetch_all(select(TenantBalance)))[0]
        assert balance.balance == UNLIMITED_BALANCE
        assert balance.free_credits_expire_at == provisioned.value.trial_ends_at
        entries = await fetch_all(select(LedgerEntry))
        assert [(e.kind, e.amount) for e in entries] == [(LedgerEntryKind.SIGNUP_BONUS, 0)]

    async def test_ended_trial_is_no_longer_unlimited(self, run, fetch_all):
        """
        Given: A trial tenant whose 14 days have passed
        When: A check, a consumption and then a 100 credit refund run after the trial end
        Then: Check reports a finite zero balance, consumption is rejected,
              the refund converts the balance and lands on it
        """
        # Arrange
        provisioned = await run(provision_use_case, signup("trial"))
        tenant_id = provisioned.value.tenant_id
        after_trial = datetime.utcnow() + timedelta(days=15)

        def check_use_case(session) -> CheckCredits:
            return CheckCredits(
                SqlAlchemyTenantBalanceRepository(session),
                SqlAlchemyCreditCostRepository(session),
                SqlAlchemyLedgerEntryRepository(session),
                clock=lambda: after_trial,
            )

        def consume_use_case(session) -> ConsumeCredits:
            return ConsumeCredits(
                SqlAlchemyUnitOfWork(session),
                SqlAlchemyTenantBalanceRepository(session),
                SqlAlchemyLedgerEntryRepository(session),
                SqlAlchemyCreditCostRepository(session),
                clock=lambda: after_trial,
            )

        def grant_use_case(session) -> GrantCredits:
            return GrantCredits(
                SqlAlchemyUnitOfWork(session),
                SqlAlchemyTenantBalanceRepository(session),
                SqlAlchemyLedgerEntryRepository(session),
                clock=lambda: after_trial,
            )

        # Act
        checked = await run(check_use_case, tenant_id, "ai.generate")
        consumed = await run(
            consume_use_case,
            ConsumeCreditsCommandDTO(tenant_id=tenant_id, action_key="ai.generate", amount_override=5),
        )
        granted = await run(
            grant_use_case,
            GrantCreditsCommandDTO(tenant_id=tenant_id, amount=100, kind="refund", description="goodwill"),
        )

        # Assert
        assert checked.value.unlimited is False
        assert checked.value.balance == 0
        assert checked.value.allowed is False
        assert consumed.error.code == "INSUFFICIENT_CREDITS"
        assert consumed.error.details == {"balance": 0, "required": 5}
        assert granted.value.new_balance == 100

        balance = (await fetch_all(select(TenantBalance)))[0]
        assert balance.balance == 100
        assert balance.free_balance == 100
        assert balance.free_credits_expire_at is None
        assert TierStatus(balance.tier_status) == TierStatus.FREE
        entries = await fetch_all(select(LedgerEntry).order_by(LedgerEntry.id))
        assert [(e.kind, e.amount, e.balance_after) for e in entries] == [
            (LedgerEntryKind.SIGNUP_BONUS, 0, UNLIMITED_BALANCE),
            (LedgerEntryKind.TRIAL_EXPIRED, 0, 0),
            (LedgerEntryKind.REFUND, 100, 100),
        ]

    async def test_slug_of_another_owner_is_rejected(self, run, fetch_all):
        # Arrange
        await run(provision_use_case, signup("free"))

        # Act
        result = await run(provision_use_case, signup("free", email="someone@else.com"))

        # Assert
        assert result.error.code == "SLUG_TAKEN"
        assert len(await fetch_all(select(TenantMember))) == 1

    async def test_replay_by_idempotency_key_with_other_slug(self, run, fetch_all):
        """
        Given: Request signup-7f3a provisioned corner-shop
        When: The same key is submitted again with a different slug
        Then: The original tenant comes back, one balance row and one signup entry exist
        """
        # Arrange
        first = await run(provision_use_case, signup("starter", key="signup-7f3a"))

        # Act
        replay = await run(provision_use_case, signup("starter", slug="corner-shop-two", key="signup-7f3a"))

        # Assert
        assert replay.value.created is False
        assert replay.value.tenant_id == first.value.tenant_id
        assert replay.value.slug == "corner-shop"
        assert [t.slug for t in await fetch_all(select(Tenant))] == ["corner-shop"]
        assert len(await fetch_all(select(TenantBalance))) == 1
        assert len(await fetch_all(select(LedgerEntry))) == 1

    async def test_idempotency_key_of_another_owner_is_rejected(self, run, fetch_all):
        # Arrange
        await run(provision_use_case, signup("free", key="signup-7f3a"))

        # Act
        result = await run(
            provision_use_case, signup("free", slug="other-shop", email="someone@else.com", key="signup-7f3a")
        )

        # Assert
        assert result.error.code == "IDEMPOTENCY_KEY_REUSED"
        assert len(await fetch_all(select(Tenant))) == 1
