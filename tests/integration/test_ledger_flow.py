"""Integration tests for award and redeem against a real database

Tests cover:
- Earning and redeeming at default and updated rates
- Rates frozen on each entry
- Idempotent retries
- Balance equals the signed sum of entries
"""

import pytest
from decimal import Decimal
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories import SqlAlchemyAccountRepository, SqlAlchemyLedgerEntryRepository
from src.domain.account import Account
from src.domain.ledger_entry import EntryKind, LedgerEntry
from tests.integration.helpers import award, open_account, redeem, update_rates


async def stored_balance(session: AsyncSession, account_id: str) -> int:
    result = await session.execute(select(Account.points_balance).where(Account.id == account_id))
    return result.scalar_one()


@pytest.mark.asyncio
class TestAwardAndRedeem:

    async def test_walkthrough_at_default_rates(self, db_session: AsyncSession):
        """
        100.00 earns 100 points; redeeming 60 is worth 0.60 and leaves 40;
        redeeming 41 more is refused and changes nothing.
        """
        account_id = await open_account(db_session)

        earned = await award(db_session, account_id, "100.00", "pos-1:award")
        assert earned.is_ok()
        assert earned.value.points == 100
        assert earned.value.balance_after == 100

        redeemed = await redeem(db_session, account_id, 60, "pos-1:redeem")
        assert redeemed.is_ok()
        assert redeemed.value.cash_value == Decimal("0.60")
        assert redeemed.value.balance_before == 100
        assert redeemed.value.balance_after == 40

        refused = await redeem(db_session, account_id, 41, "pos-1:redeem-2")
        assert refused.is_err()
        assert refused.error.code == "INSUFFICIENT_BALANCE"

        assert await stored_balance(db_session, account_id) == 40
        entries, total = await SqlAlchemyLedgerEntryRepository(db_session).list_by_account(account_id)
        assert total == 2

    async def test_updated_rates_apply_to_new_entries_only(self, db_session: AsyncSession):
        account_id = await open_account(db_session)
        first = await award(db_session, account_id, "100.00")

        snapshot = await update_rates(db_session, "2", "0.02")
        assert snapshot.version == 1

        second = await award(db_session, account_id, "50.00")

        assert second.is_ok()
        assert second.value.points == 100
        assert second.value.rate_version == 1
        assert second.value.earn_rate == Decimal("2")

        # The earlier entry still records the rates it was computed with
        stored_first = await SqlAlchemyLedgerEntryRepository(db_session).get_by_id(first.value.entry_id)
        assert stored_first.rate_version == 0
        assert stored_first.earn_rate == Decimal("1")
        assert stored_first.points == 100

        redeemed = await redeem(db_session, account_id, 50)
        assert redeemed.value.cash_value == Decimal("1.00")

    async def test_redeem_keeps_its_cash_value_after_rate_change(self, db_session: AsyncSession):
        account_id = await open_account(db_session)
        await award(db_session, account_id, "100.00")
        redeemed = await redeem(db_session, account_id, 60)
        assert redeemed.value.cash_value == Decimal("0.60")

        await update_rates(db_session, "2", "0.05")
        db_session.expire_all()

        stored = await SqlAlchemyLedgerEntryRepository(db_session).get_by_id(redeemed.value.entry_id)
        assert stored.cash_value == Decimal("0.60")
        assert stored.redeem_rate == Decimal("0.01")
        assert stored.rate_version == 0

    async def test_floor_rounding(self, db_session: AsyncSession):
        account_id = await open_account(db_session)

        result = await award(db_session, account_id, "10.99")

        assert result.value.points == 10
        assert await stored_balance(db_session, account_id) == 10

    async def test_invalid_amounts_leave_no_trace(self, db_session: AsyncSession):
        account_id = await open_account(db_session)

        assert (await award(db_session, account_id, "0")).error.code == "INVALID_AMOUNT"
        assert (await redeem(db_session, account_id, -5)).error.code == "INVALID_AMOUNT"

        count = await db_session.execute(select(LedgerEntry.id))
        assert count.all() == []

    async def test_unknown_account(self, db_session: AsyncSession):
        result = await award(db_session, "99999999-9999-4999-8999-999999999999", "10.00")

        assert result.is_err()
        assert result.error.code == "ACCOUNT_NOT_FOUND"


@pytest.mark.asyncio
class TestIdempotency:

    async def test_retried_award_credits_once(self, db_session: AsyncSession):
        account_id = await open_account(db_session)

        first = await award(db_session, account_id, "100.00", "terminal-3:1704067200:award")
        retry = await award(db_session, account_id, "100.00", "terminal-3:1704067200:award")

        assert first.is_ok() and retry.is_ok()
        assert retry.value.entry_id == first.value.entry_id
        assert retry.value.replayed is True
        assert await stored_balance(db_session, account_id) == 100

    async def test_retried_redeem_debits_once(self, db_session: AsyncSession):
        account_id = await open_account(db_session)
        await award(db_session, account_id, "100.00")

        first = await redeem(db_session, account_id, 60, "terminal-3:redeem")
        retry = await redeem(db_session, account_id, 60, "terminal-3:redeem")

        assert retry.is_ok()
        assert retry.value.entry_id == first.value.entry_id
        assert await stored_balance(db_session, account_id) == 40

    async def test_same_key_on_different_accounts_is_independent(self, db_session: AsyncSession):
        jane = await open_account(db_session, email="jane@example.com")
        john = await open_account(db_session, email="john@example.com", name="John Roe")

        a = await award(db_session, jane, "10.00", "shared-key")
        b = await award(db_session, john, "20.00", "shared-key")

        assert a.value.entry_id != b.value.entry_id
        assert await stored_balance(db_session, john) == 20


@pytest.mark.asyncio
class TestBalanceReconstruction:

    async def test_balance_is_signed_sum_of_entries(self, db_session: AsyncSession):
        account_id = await open_account(db_session)
        await award(db_session, account_id, "100.00")
        await redeem(db_session, account_id, 30)
        await award(db_session, account_id, "12.50")
        await redeem(db_session, account_id, 82)
        await redeem(db_session, account_id, 1)  # refused, balance is 0

        entries = (await db_session.execute(
            select(LedgerEntry).where(LedgerEntry.account_id == account_id).order_by(LedgerEntry.sequence)
        )).scalars().all()

        running = 0
        for entry in entries:
            assert entry.balance_before == running
            running += entry.signed_delta
            assert entry.balance_after == running
            assert entry.balance_after >= 0

        assert [e.sequence for e in entries] == [1, 2, 3, 4]
        assert running == 0
        assert await stored_balance(db_session, account_id) == 0
        checks = await SqlAlchemyLedgerEntryRepository(db_session).get_balance_checks()
        assert [(c.account_id, c.stored_balance, c.entries_sum) for c in checks] == [(account_id, 0, 0)]

    async def test_new_account_has_zero_balance(self, db_session: AsyncSession):
        account_id = await open_account(db_session)

        account = await SqlAlchemyAccountRepository(db_session).get_by_id(account_id)

        assert account.points_balance == 0
        assert account.version == 0
