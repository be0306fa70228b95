"""Ledger Entry Repository Interface

The activity feed: append-only storage of ledger entries plus the queries
behind account statements and clinic daily reports.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, NamedTuple, Optional, Tuple
from src.domain.ledger_entry import LedgerEntry, EntryKind


class AccountTotals(NamedTuple):
    """Lifetime activity of one account"""
    earn_count: int
    redeem_count: int
    points_earned: int
    points_redeemed: int
    total_spend: Decimal
    total_cash_value: Decimal
    last_earned_at: Optional[datetime]

    @classmethod
    def empty(cls) -> "AccountTotals":
        return cls(0, 0, 0, 0, Decimal("0"), Decimal("0"), None)


class ClinicTotals(NamedTuple):
    clinic_id: str
    earn_count: int
    redeem_count: int
    points_awarded: int
    points_redeemed: int
    bill_total: Decimal
    cash_value_total: Decimal


class BalanceCheck(NamedTuple):
    """Stored balance next to the signed sum of the account's entries"""
    account_id: str
    stored_balance: int
    entries_sum: int


class LedgerEntryRepository(ABC):
    """
    Repository interface for LedgerEntry persistence

    Entries are immutable and append-only. Idempotency is enforced via the
    unique (account_id, idempotency_key) pair.
    """

    @abstractmethod
    async def append(self, entry: LedgerEntry) -> LedgerEntry:
        """
        Append a new entry

        Raises:
            IntegrityError: If (account_id, idempotency_key) already exists
        """
        pass

    @abstractmethod
    async def get_by_idempotency_key(self, account_id: str, idempotency_key: str) -> Optional[LedgerEntry]:
        """Retrieve the entry produced by a previous request carrying this token"""
        pass

    @abstractmethod
    async def get_by_id(self, entry_id: str) -> Optional[LedgerEntry]:
        pass

    @abstractmethod
    async def list_by_account(
        self,
        account_id: str,
        since: Optional[datetime] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[LedgerEntry], int]:
        """
        Account history, newest first

        Args:
            account_id: Account identifier
            since: Only entries created at or after this instant
            limit: Page size
            offset: Entries to skip

        Returns:
            (page of entries, total matching entries)
        """
        pass

    @abstractmethod
    async def list_by_clinic_between(
        self,
        clinic_id: str,
        start: datetime,
        end: datetime,
        kind: Optional[EntryKind] = None,
    ) -> List[LedgerEntry]:
        """Entries for a clinic with start <= created_at < end, oldest first"""
        pass

    @abstractmethod
    async def get_totals_by_account(self, account_ids: List[str]) -> Dict[str, AccountTotals]:
        """
        Lifetime totals per account

        Accounts without entries are absent from the result.
        """
        pass

    @abstractmethod
    async def get_clinic_totals(self) -> List[ClinicTotals]:
        """Lifetime totals per clinic, in no particular order"""
        pass

    @abstractmethod
    async def get_balance_checks(self) -> List[BalanceCheck]:
        """
        Every account's stored balance with sum(EARN points) - sum(REDEEM points)

        Read in a single statement, so both sides come from the same
        snapshot even while mutations commit.
        """
        pass

    @abstractmethod
    async def get_kind_totals(self) -> Dict[EntryKind, Tuple[int, Decimal]]:
        """
        Returns:
            Per kind: (entry count, summed bill_amount for EARN or
            summed cash_value for REDEEM)
        """
        pass
