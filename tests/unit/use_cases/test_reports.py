"""Unit tests for GetDailyClinicActivity and GetProgramSummary"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock
from sqlalchemy.exc import OperationalError

from src.app.repositories.ledger_entry_repository import AccountTotals, ClinicTotals
from src.app.use_cases.loyalty import (
    GetClinicStats,
    GetDailyClinicActivity,
    GetProgramSummary,
    ListCustomerActivity,
)
from src.domain.ledger_entry import EntryKind
from tests.factories import make_account, make_entry


@pytest.mark.asyncio
class TestGetDailyClinicActivity:

    async def test_totals_for_one_day(self, mock_entry_repo):
        entries = [
            make_entry(id="e1", points=100, bill_amount=Decimal("100.00"), created_at=datetime(2024, 3, 1, 9)),
            make_entry(id="e2", kind=EntryKind.REDEEM, points=60, bill_amount=None, cash_value=Decimal("0.60"),
                       balance_before=100, balance_after=40, sequence=2, created_at=datetime(2024, 3, 1, 10)),
            make_entry(id="e3", points=25, bill_amount=Decimal("25.50"), created_at=datetime(2024, 3, 1, 11)),
        ]
        mock_entry_repo.list_by_clinic_between = AsyncMock(return_value=entries)

        result = await GetDailyClinicActivity(mock_entry_repo, backoff_seconds=0).execute(
            "clinic_orchard", date(2024, 3, 1)
        )

        assert result.is_ok()
        report = result.value
        assert report.day == date(2024, 3, 1)
        assert [e.entry_id for e in report.entries] == ["e1", "e2", "e3"]
        assert report.earn_count == 2
        assert report.redeem_count == 1
        assert report.points_awarded == 125
        assert report.points_redeemed == 60
        assert report.bill_total == Decimal("125.50")
        assert report.cash_value_total == Decimal("0.60")

        mock_entry_repo.list_by_clinic_between.assert_called_once_with(
            "clinic_orchard", datetime(2024, 3, 1), datetime(2024, 3, 2), kind=None
        )

    async def test_empty_day(self, mock_entry_repo):
        mock_entry_repo.list_by_clinic_between = AsyncMock(return_value=[])

        result = await GetDailyClinicActivity(mock_entry_repo).execute("clinic_orchard", date(2024, 3, 1))

        assert result.is_ok()
        assert result.value.entries == []
        assert result.value.bill_total == Decimal("0")

    async def test_kind_filter_is_passed_through(self, mock_entry_repo):
        mock_entry_repo.list_by_clinic_between = AsyncMock(return_value=[])

        await GetDailyClinicActivity(mock_entry_repo).execute(
            "clinic_orchard", date(2024, 3, 1), kind=EntryKind.REDEEM
        )

        assert mock_entry_repo.list_by_clinic_between.call_args.kwargs["kind"] == EntryKind.REDEEM

    async def test_storage_unavailable(self, mock_entry_repo):
        locked = OperationalError("SELECT", {}, Exception("database is locked"))
        mock_entry_repo.list_by_clinic_between = AsyncMock(side_effect=[locked, locked])

        result = await GetDailyClinicActivity(mock_entry_repo, backoff_seconds=0).execute(
            "clinic_orchard", date(2024, 3, 1)
        )

        assert result.is_err()
        assert result.error.code == "REPORT_UNAVAILABLE"

    async def test_unexpected_failure(self, mock_entry_repo):
        mock_entry_repo.list_by_clinic_between = AsyncMock(side_effect=RuntimeError("connection reset"))

        result = await GetDailyClinicActivity(mock_entry_repo, backoff_seconds=0).execute(
            "clinic_orchard", date(2024, 3, 1)
        )

        assert result.is_err()
        assert result.error.code == "REPORT_FAILED"
        assert mock_entry_repo.list_by_clinic_between.call_count == 1


@pytest.mark.asyncio
class TestGetProgramSummary:

    async def test_summary(self, mock_account_repo, mock_entry_repo):
        mock_account_repo.get_totals = AsyncMock(return_value=(3, 140))
        mock_entry_repo.get_kind_totals = AsyncMock(return_value={
            EntryKind.EARN: (4, Decimal("200.00")),
            EntryKind.REDEEM: (1, Decimal("0.60")),
        })
        mock_entry_repo.get_clinic_totals = AsyncMock(return_value=[
            clinic_totals("clinic_orchard", "80.00", earn_count=3),
            clinic_totals("clinic_tampines", "120.00"),
        ])

        result = await GetProgramSummary(mock_account_repo, mock_entry_repo).execute()

        assert result.is_ok()
        summary = result.value
        assert summary.total_accounts == 3
        assert summary.points_in_circulation == 140
        assert summary.earn_count == 4
        assert summary.redeem_count == 1
        assert summary.total_spend == Decimal("200.00")
        assert summary.total_cash_value == Decimal("0.60")
        assert summary.top_clinic_id == "clinic_tampines"
        assert summary.average_spend_per_account == Decimal("66.67")

    async def test_empty_program(self, mock_account_repo, mock_entry_repo):
        mock_account_repo.get_totals = AsyncMock(return_value=(0, 0))
        mock_entry_repo.get_kind_totals = AsyncMock(return_value={
            EntryKind.EARN: (0, Decimal("0")),
            EntryKind.REDEEM: (0, Decimal("0")),
        })
        mock_entry_repo.get_clinic_totals = AsyncMock(return_value=[])

        result = await GetProgramSummary(mock_account_repo, mock_entry_repo).execute()

        assert result.is_ok()
        assert result.value.top_clinic_id is None
        assert result.value.average_spend_per_account == Decimal("0")

    async def test_storage_failure(self, mock_account_repo, mock_entry_repo):
        mock_account_repo.get_totals = AsyncMock(side_effect=RuntimeError("connection reset"))

        result = await GetProgramSummary(mock_account_repo, mock_entry_repo).execute()

        assert result.is_err()
        assert result.error.code == "REPORT_FAILED"


def clinic_totals(clinic_id, bill_total, earn_count=1):
    return ClinicTotals(
        clinic_id=clinic_id,
        earn_count=earn_count,
        redeem_count=0,
        points_awarded=int(bill_total),
        points_redeemed=0,
        bill_total=Decimal(bill_total),
        cash_value_total=Decimal("0"),
    )


@pytest.mark.asyncio
class TestGetClinicStats:

    async def test_highest_revenue_first(self, mock_entry_repo):
        mock_entry_repo.get_clinic_totals = AsyncMock(return_value=[
            clinic_totals("clinic_bedok", "50.00"),
            clinic_totals("clinic_tampines", "120.00", earn_count=3),
            clinic_totals("clinic_orchard", "50.00"),
        ])

        result = await GetClinicStats(mock_entry_repo).execute()

        assert result.is_ok()
        assert [c.clinic_id for c in result.value] == ["clinic_tampines", "clinic_bedok", "clinic_orchard"]
        assert result.value[0].earn_count == 3
        assert result.value[0].bill_total == Decimal("120.00")

    async def test_storage_failure(self, mock_entry_repo):
        mock_entry_repo.get_clinic_totals = AsyncMock(side_effect=RuntimeError("connection reset"))

        result = await GetClinicStats(mock_entry_repo).execute()

        assert result.is_err()
        assert result.error.code == "REPORT_FAILED"


@pytest.mark.asyncio
class TestListCustomerActivity:

    async def test_customers_with_their_totals(self, mock_account_repo, mock_entry_repo):
        jane = make_account()
        john = make_account(id="22222222-2222-4222-8222-222222222222", email="john@example.com", name="John Roe")
        mock_account_repo.list_recent = AsyncMock(return_value=([john, jane], 2))
        mock_entry_repo.get_totals_by_account = AsyncMock(return_value={
            jane.id: AccountTotals(
                earn_count=2,
                redeem_count=1,
                points_earned=150,
                points_redeemed=50,
                total_spend=Decimal("150.00"),
                total_cash_value=Decimal("0.50"),
                last_earned_at=datetime(2024, 3, 1, 9),
            ),
        })

        result = await ListCustomerActivity(mock_account_repo, mock_entry_repo).execute(limit=10)

        assert result.is_ok()
        page = result.value
        assert [c.account_id for c in page.customers] == [john.id, jane.id]
        assert page.customers[0].visit_count == 0
        assert page.customers[0].total_spend == Decimal("0")
        assert page.customers[0].last_visit is None
        assert page.customers[1].visit_count == 2
        assert page.customers[1].total_spend == Decimal("150.00")
        assert page.customers[1].last_visit == datetime(2024, 3, 1, 9)
        assert page.next_offset is None
        mock_account_repo.list_recent.assert_called_once_with(limit=10, offset=0)
        mock_entry_repo.get_totals_by_account.assert_called_once_with([john.id, jane.id])

    async def test_next_offset(self, mock_account_repo, mock_entry_repo):
        mock_account_repo.list_recent = AsyncMock(return_value=([make_account()], 3))
        mock_entry_repo.get_totals_by_account = AsyncMock(return_value={})

        result = await ListCustomerActivity(mock_account_repo, mock_entry_repo).execute(limit=1, offset=1)

        assert result.value.next_offset == 2

    async def test_storage_failure(self, mock_account_repo, mock_entry_repo):
        mock_account_repo.list_recent = AsyncMock(side_effect=RuntimeError("connection reset"))

        result = await ListCustomerActivity(mock_account_repo, mock_entry_repo).execute()

        assert result.is_err()
        assert result.error.code == "REPORT_FAILED"
