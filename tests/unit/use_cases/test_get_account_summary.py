"""Unit tests for GetAccountSummary use case"""

import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock

from src.app.repositories.ledger_entry_repository import AccountTotals
from src.app.use_cases.loyalty import GetAccountSummary
from tests.factories import ACCOUNT_ID, make_account


@pytest.mark.asyncio
class TestGetAccountSummary:

    async def test_lifetime_figures(self, mock_account_repo, mock_entry_repo, sample_account):
        mock_account_repo.get_by_id = AsyncMock(return_value=sample_account)
        mock_entry_repo.get_totals_by_account = AsyncMock(return_value={
            ACCOUNT_ID: AccountTotals(
                earn_count=2,
                redeem_count=1,
                points_earned=160,
                points_redeemed=60,
                total_spend=Decimal("160.00"),
                total_cash_value=Decimal("0.60"),
                last_earned_at=datetime(2024, 3, 1, 9),
            ),
        })

        result = await GetAccountSummary(mock_account_repo, mock_entry_repo).execute(ACCOUNT_ID)

        assert result.is_ok()
        summary = result.value
        assert summary.points_balance == 100
        assert summary.points_earned == 160
        assert summary.points_redeemed == 60
        assert summary.total_savings == Decimal("0.60")
        assert summary.total_spend == Decimal("160.00")
        assert summary.visit_count == 2
        mock_entry_repo.get_totals_by_account.assert_called_once_with([ACCOUNT_ID])

    async def test_account_without_activity(self, mock_account_repo, mock_entry_repo):
        mock_account_repo.get_by_id = AsyncMock(return_value=make_account(points_balance=0))
        mock_entry_repo.get_totals_by_account = AsyncMock(return_value={})

        result = await GetAccountSummary(mock_account_repo, mock_entry_repo).execute(ACCOUNT_ID)

        assert result.is_ok()
        assert result.value.points_redeemed == 0
        assert result.value.total_savings == Decimal("0")

    async def test_unknown_account(self, mock_account_repo, mock_entry_repo):
        mock_account_repo.get_by_id = AsyncMock(return_value=None)
        mock_entry_repo.get_totals_by_account = AsyncMock()

        result = await GetAccountSummary(mock_account_repo, mock_entry_repo).execute(ACCOUNT_ID)

        assert result.is_err()
        assert result.error.code == "ACCOUNT_NOT_FOUND"
        mock_entry_repo.get_totals_by_account.assert_not_called()

    async def test_storage_failure(self, mock_account_repo, mock_entry_repo):
        mock_account_repo.get_by_id = AsyncMock(side_effect=RuntimeError("connection reset"))

        result = await GetAccountSummary(mock_account_repo, mock_entry_repo).execute(ACCOUNT_ID)

        assert result.is_err()
        assert result.error.code == "REPORT_FAILED"
