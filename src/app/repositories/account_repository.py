"""Account Repository Interface

Defines the contract for account persistence and the atomic balance update
the ledger relies on.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from src.domain.account import Account


class AccountRepository(ABC):
    """
    Repository interface for Account persistence

    apply_points_delta is the only path that changes points_balance. It must
    be a single conditional write at the storage layer so that concurrent
    callers compose instead of overwriting each other.
    """

    @abstractmethod
    async def get_by_id(self, account_id: str) -> Optional[Account]:
        """
        Retrieve account by exact id

        Args:
            account_id: Canonical account UUID

        Returns:
            Account if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[Account]:
        """Retrieve account by exact (case-insensitive) email"""
        pass

    @abstractmethod
    async def search(self, term: str, limit: int) -> List[Account]:
        """
        Substring search across email, name and phone number

        Never compares against the id column.

        Args:
            term: Free-text search term (matched case-insensitively, literally)
            limit: Maximum number of matches returned

        Returns:
            Matching accounts, most recently created first
        """
        pass

    @abstractmethod
    async def create(self, account: Account) -> Account:
        """
        Create a new account

        Raises:
            IntegrityError: If the id or email already exists
        """
        pass

    @abstractmethod
    async def apply_points_delta(self, account_id: str, delta: int) -> Optional[Tuple[int, int]]:
        """
        Atomically add `delta` to the balance if the result stays >= 0

        The row remains write-locked until the surrounding transaction ends.

        Args:
            account_id: Account to mutate
            delta: Signed point change (+ for EARN, - for REDEEM)

        Returns:
            (new balance, new version), or None when no row was updated (account
            missing, or the debit would make the balance negative)
        """
        pass

    @abstractmethod
    async def list_recent(self, limit: int, offset: int = 0) -> Tuple[List[Account], int]:
        """
        Page of accounts, most recently created first

        Returns:
            (page of accounts, total number of accounts)
        """
        pass

    @abstractmethod
    async def get_totals(self) -> Tuple[int, int]:
        """
        Returns:
            (number of accounts, sum of all point balances)
        """
        pass
