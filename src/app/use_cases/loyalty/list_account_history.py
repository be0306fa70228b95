"""
List Account History Use Case

Per-account statement from the activity feed, newest first.
"""
import logging
from datetime import datetime, timezone
from typing import AsyncIterator, Optional
from libs.result import Result, Return, Error
from src.app.repositories.account_repository import AccountRepository
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from src.app.services.read_retry import retry_read_once, TRANSIENT_ERRORS
from src.app.services.unit_of_work import UnitOfWork
from . import errors
from .dtos import AccountHistoryResponseDTO, LedgerEntryDTO

logger = logging.getLogger(__name__)


def as_stored_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Entry timestamps are stored as naive UTC; convert aware values to match"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class ListAccountHistory:
    """
    Use case: Account statement

    Entries are ordered by their per-account sequence, newest first, which
    is the order they were applied to the balance. Reads use the caller's
    own session, so an entry the caller just committed is always included.
    """

    def __init__(
        self,
        account_repo: AccountRepository,
        entry_repo: LedgerEntryRepository,
        uow: Optional[UnitOfWork] = None,
        backoff_seconds: float = 0.2,
    ):
        self.account_repo = account_repo
        self.entry_repo = entry_repo
        self.uow = uow
        self.backoff_seconds = backoff_seconds

    async def execute(
        self,
        account_id: str,
        since: Optional[datetime] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Result[AccountHistoryResponseDTO]:
        """
        List one page of an account's history.

        Args:
            account_id: Account identifier
            since: Only entries created at or after this instant. Naive
                values are taken as UTC; aware values are converted.
            limit: Page size
            offset: Entries to skip (use next_offset from the previous page)

        Returns:
            Result[AccountHistoryResponseDTO]: Page of entries

        Errors:
            ACCOUNT_NOT_FOUND, HISTORY_UNAVAILABLE, LIST_HISTORY_FAILED
        """
        since_utc = as_stored_utc(since)

        async def read():
            account = await self.account_repo.get_by_id(account_id)
            if not account:
                return None
            return await self.entry_repo.list_by_account(
                account_id=account_id, since=since_utc, limit=limit, offset=offset
            )

        try:
            page = await retry_read_once(
                read,
                backoff_seconds=self.backoff_seconds,
                before_retry=self.uow.rollback if self.uow else None,
            )
        except TRANSIENT_ERRORS as e:
            logger.error(f"History for account {account_id} unavailable: {e}")
            return Return.err(
                Error(
                    code=errors.HISTORY_UNAVAILABLE,
                    message="History is temporarily unavailable",
                    reason=str(e),
                )
            )
        except Exception as e:
            logger.error(f"Reading history for account {account_id} failed: {e}")
            return Return.err(
                Error(
                    code=errors.LIST_HISTORY_FAILED,
                    message="Failed to read history",
                    reason=str(e),
                )
            )

        if page is None:
            return Return.err(
                Error(
                    code=errors.ACCOUNT_NOT_FOUND,
                    message="Customer not found",
                    reason=f"account_id={account_id}",
                )
            )

        entries, total = page
        next_offset = offset + len(entries)

        return Return.ok(
            AccountHistoryResponseDTO(
                account_id=account_id,
                entries=[LedgerEntryDTO.from_entry(e) for e in entries],
                total=total,
                limit=limit,
                offset=offset,
                next_offset=next_offset if next_offset < total else None,
            )
        )

    async def iterate(
        self,
        account_id: str,
        since: Optional[datetime] = None,
        page_size: int = 100,
        offset: int = 0,
    ) -> AsyncIterator[LedgerEntryDTO]:
        """
        Lazily walk the whole history page by page

        Restart from any point by passing the number of entries already
        consumed as `offset`.

        Raises:
            RuntimeError: If a page cannot be read
        """
        while True:
            result = await self.execute(account_id, since=since, limit=page_size, offset=offset)
            if result.is_err():
                raise RuntimeError(f"History read failed: {result.error.code}")
            page = result.value
            for entry in page.entries:
                yield entry
            if page.next_offset is None:
                return
            offset = page.next_offset
