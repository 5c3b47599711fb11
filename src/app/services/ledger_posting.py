"""Ledger posting helpers

Every balance mutation goes through LedgerPoster so the cached
TenantBalance projection and the append-only ledger never diverge.
Callers must hold the balance row lock and own the commit.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from src.app.repositories.tenant_balance_repository import TenantBalanceRepository
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from src.domain.ledger_entry import LedgerEntry, LedgerEntryKind, build_idempotency_key
from src.domain.tenant_balance import TenantBalance, TierStatus, UNLIMITED_BALANCE


class LedgerPoster:
    def __init__(
        self,
        balance_repo: TenantBalanceRepository,
        entry_repo: LedgerEntryRepository,
    ):
        self.balance_repo = balance_repo
        self.entry_repo = entry_repo

    async def find_posted(
        self, tenant_id: str, kind: LedgerEntryKind, reference_id: Optional[str]
    ) -> Optional[LedgerEntry]:
        """Return the entry already posted for this reference, if any"""
        key = build_idempotency_key(tenant_id, kind, reference_id)
        if key is None:
            return None
        return await self.entry_repo.get_by_idempotency_key(key)

    async def post_grant(
        self,
        balance: TenantBalance,
        amount: int,
        kind: LedgerEntryKind,
        description: Optional[str] = None,
        reference_id: Optional[str] = None,
        action_key: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> LedgerEntry:
        """
        Add credits to a locked balance and append the matching entry

        Purchases land in purchased_balance, every other grant kind in
        free_balance. An unlimited balance keeps its sentinel; the entry
        is still recorded.
        """
        if not balance.is_unlimited:
            if kind == LedgerEntryKind.PURCHASE:
                balance.purchased_balance += amount
            else:
                balance.free_balance += amount
            balance.balance = balance.free_balance + balance.purchased_balance
        balance.lifetime_earned += amount

        await self.balance_repo.save(balance)
        return await self._append(balance, amount, kind, description, reference_id, action_key, metadata)

    async def post_consumption(
        self,
        balance: TenantBalance,
        cost: int,
        action_key: Optional[str] = None,
        description: Optional[str] = None,
        reference_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> LedgerEntry:
        """
        Draw credits from a locked finite balance, free credits first

        The caller has already checked balance >= cost.
        """
        from_free = min(balance.free_balance, cost)
        balance.free_balance -= from_free
        balance.purchased_balance -= cost - from_free
        balance.balance = balance.free_balance + balance.purchased_balance
        balance.lifetime_spent += cost

        await self.balance_repo.save(balance)
        return await self._append(
            balance, -cost, LedgerEntryKind.CONSUMPTION, description, reference_id, action_key, metadata
        )

    async def post_repair(
        self,
        balance: TenantBalance,
        ledger_total: int,
        reference_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> LedgerEntry:
        """
        Rewrite a locked projection to the ledger total

        The zero-amount repair entry documents the correction without
        changing the ledger sum. Purchased credits are kept where possible.
        """
        previous = balance.balance
        balance.purchased_balance = min(balance.purchased_balance, ledger_total)
        balance.free_balance = ledger_total - balance.purchased_balance
        balance.balance = ledger_total

        await self.balance_repo.save(balance)
        return await self._append(
            balance,
            0,
            LedgerEntryKind.REPAIR,
            f"Balance repaired from {previous} to {ledger_total}",
            reference_id,
            None,
            {"previous_balance": previous, "ledger_total": ledger_total, **(metadata or {})},
        )

    async def post_signup(
        self,
        balance: TenantBalance,
        credits: Optional[int],
        reference_id: str,
        description: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> LedgerEntry:
        """
        Set a locked balance to its signup values and append the bonus entry

        credits=None makes the balance unlimited. The entry amount is the
        finite grant, 0 for unlimited.
        """
        amount = credits or 0
        if credits is None:
            balance.balance = UNLIMITED_BALANCE
            balance.free_balance = 0
            balance.purchased_balance = 0
        else:
            balance.free_balance = credits
            balance.purchased_balance = 0
            balance.balance = credits
        balance.lifetime_earned = amount

        await self.balance_repo.save(balance)
        return await self._append(
            balance, amount, LedgerEntryKind.SIGNUP_BONUS, description, reference_id, "signup", metadata
        )

    async def expire_trial(self, balance: TenantBalance, now: datetime) -> Optional[LedgerEntry]:
        """
        Convert a locked, expired unlimited trial into a finite free-tier balance

        The finite balance is the ledger total: credits granted during the
        trial were recorded but never applied to the sentinel. Purchases stay
        purchased. The first free grant becomes due immediately.
        Returns None when the balance is not an expired trial.
        """
        if not balance.trial_expired(now):
            return None

        ledger_total, _, _ = await self.entry_repo.get_replay_totals(balance.tenant_id)
        ledger_total = max(ledger_total, 0)
        purchased = await self.entry_repo.sum_by_kind(balance.tenant_id, LedgerEntryKind.PURCHASE)

        balance.purchased_balance = min(max(purchased, 0), ledger_total)
        balance.free_balance = ledger_total - balance.purchased_balance
        balance.balance = ledger_total
        balance.tier_status = TierStatus.FREE
        balance.free_credits_expire_at = None
        balance.next_free_grant_at = now

        await self.balance_repo.save(balance)
        return await self._append(
            balance,
            0,
            LedgerEntryKind.TRIAL_EXPIRED,
            f"Trial ended, balance set to ledger total {ledger_total}",
            "trial",
            None,
            {"ledger_total": ledger_total, "expired_at": now.isoformat()},
        )

    async def _append(
        self,
        balance: TenantBalance,
        amount: int,
        kind: LedgerEntryKind,
        description: Optional[str],
        reference_id: Optional[str],
        action_key: Optional[str],
        metadata: Optional[Dict[str, Any]],
    ) -> LedgerEntry:
        entry = LedgerEntry(
            tenant_id=balance.tenant_id,
            amount=amount,
            balance_after=balance.balance,
            kind=kind,
            action_key=action_key,
            description=description,
            reference_id=reference_id,
            idempotency_key=build_idempotency_key(balance.tenant_id, kind, reference_id),
            entry_metadata=metadata,
        )
        return await self.entry_repo.create(entry)
