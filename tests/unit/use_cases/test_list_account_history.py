"""Unit tests for ListAccountHistory use case"""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock
from sqlalchemy.exc import OperationalError

from src.app.use_cases.loyalty import ListAccountHistory
from src.domain.ledger_entry import EntryKind
from tests.factories import ACCOUNT_ID, make_entry


def entries_page(sequences):
    return [
        make_entry(id=f"entry-{s}", sequence=s, balance_before=(s - 1) * 10, balance_after=s * 10, points=10)
        for s in sequences
    ]


@pytest.fixture
def history_use_case(mock_account_repo, mock_entry_repo, sample_account):
    mock_account_repo.get_by_id = AsyncMock(return_value=sample_account)
    return ListAccountHistory(mock_account_repo, mock_entry_repo, backoff_seconds=0)


@pytest.mark.asyncio
class TestListAccountHistory:

    async def test_first_page(self, history_use_case, mock_entry_repo):
        mock_entry_repo.list_by_account = AsyncMock(return_value=(entries_page([5, 4]), 5))

        result = await history_use_case.execute(ACCOUNT_ID, limit=2)

        assert result.is_ok()
        page = result.value
        assert [e.sequence for e in page.entries] == [5, 4]
        assert page.total == 5
        assert page.next_offset == 2
        mock_entry_repo.list_by_account.assert_called_once_with(
            account_id=ACCOUNT_ID, since=None, limit=2, offset=0
        )

    async def test_last_page_has_no_next_offset(self, history_use_case, mock_entry_repo):
        mock_entry_repo.list_by_account = AsyncMock(return_value=(entries_page([1]), 5))

        result = await history_use_case.execute(ACCOUNT_ID, limit=2, offset=4)

        assert result.is_ok()
        assert result.value.next_offset is None

    async def test_unknown_account(self, history_use_case, mock_account_repo, mock_entry_repo):
        mock_account_repo.get_by_id = AsyncMock(return_value=None)
        mock_entry_repo.list_by_account = AsyncMock()

        result = await history_use_case.execute(ACCOUNT_ID)

        assert result.is_err()
        assert result.error.code == "ACCOUNT_NOT_FOUND"
        mock_entry_repo.list_by_account.assert_not_called()

    async def test_transient_failure_retried_once(self, history_use_case, mock_entry_repo):
        locked = OperationalError("SELECT", {}, Exception("database is locked"))
        mock_entry_repo.list_by_account = AsyncMock(side_effect=[locked, (entries_page([1]), 1)])

        result = await history_use_case.execute(ACCOUNT_ID)

        assert result.is_ok()
        assert len(result.value.entries) == 1

    async def test_persistent_failure_is_history_unavailable(self, history_use_case, mock_entry_repo):
        locked = OperationalError("SELECT", {}, Exception("database is locked"))
        mock_entry_repo.list_by_account = AsyncMock(side_effect=[locked, locked])

        result = await history_use_case.execute(ACCOUNT_ID)

        assert result.is_err()
        assert result.error.code == "HISTORY_UNAVAILABLE"

    async def test_unexpected_failure(self, history_use_case, mock_entry_repo):
        mock_entry_repo.list_by_account = AsyncMock(side_effect=RuntimeError("connection reset"))

        result = await history_use_case.execute(ACCOUNT_ID)

        assert result.is_err()
        assert result.error.code == "LIST_HISTORY_FAILED"

    async def test_aware_since_is_converted_to_utc(self, history_use_case, mock_entry_repo):
        mock_entry_repo.list_by_account = AsyncMock(return_value=([], 0))
        since = datetime(2024, 3, 1, 17, 30, tzinfo=timezone(timedelta(hours=8)))

        await history_use_case.execute(ACCOUNT_ID, since=since)

        mock_entry_repo.list_by_account.assert_called_once_with(
            account_id=ACCOUNT_ID, since=datetime(2024, 3, 1, 9, 30), limit=20, offset=0
        )

    async def test_naive_since_is_taken_as_utc(self, history_use_case, mock_entry_repo):
        mock_entry_repo.list_by_account = AsyncMock(return_value=([], 0))

        await history_use_case.execute(ACCOUNT_ID, since=datetime(2024, 3, 1, 9, 30))

        assert mock_entry_repo.list_by_account.call_args.kwargs["since"] == datetime(2024, 3, 1, 9, 30)


@pytest.mark.asyncio
class TestIterateAccountHistory:

    async def test_walks_every_page(self, history_use_case, mock_entry_repo):
        mock_entry_repo.list_by_account = AsyncMock(side_effect=[
            (entries_page([3, 2]), 3),
            (entries_page([1]), 3),
        ])

        sequences = [e.sequence async for e in history_use_case.iterate(ACCOUNT_ID, page_size=2)]

        assert sequences == [3, 2, 1]
        assert mock_entry_repo.list_by_account.call_count == 2

    async def test_resumes_from_offset(self, history_use_case, mock_entry_repo):
        mock_entry_repo.list_by_account = AsyncMock(return_value=(entries_page([1]), 3))

        entries = [e async for e in history_use_case.iterate(ACCOUNT_ID, page_size=2, offset=2)]

        assert len(entries) == 1
        assert entries[0].kind == EntryKind.EARN.value

    async def test_read_failure_raises(self, history_use_case, mock_account_repo):
        mock_account_repo.get_by_id = AsyncMock(return_value=None)

        with pytest.raises(RuntimeError):
            async for _ in history_use_case.iterate(ACCOUNT_ID):
                pass
