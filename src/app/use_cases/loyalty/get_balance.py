"""Get Balance Use Case

Retrieves an account's authoritative point balance.
"""

import logging
from libs.result import Result, Return, Error
from src.app.repositories.account_repository import AccountRepository
from src.app.repositories.rate_snapshot_repository import RateSnapshotRepository
from src.domain.ledger_entry import compute_cash_value
from . import errors
from .dtos import BalanceResponseDTO
from .get_current_rates import GetCurrentRates

logger = logging.getLogger(__name__)


class GetBalance:
    """
    Get Balance Use Case

    Read-only. Callers refresh their displayed balance from this (or from
    the entry returned by award/redeem), never from a local increment.
    """

    def __init__(
        self,
        account_repo: AccountRepository,
        rate_repo: RateSnapshotRepository,
        read_backoff_seconds: float = 0.2,
    ):
        self.account_repo = account_repo
        self.rate_repo = rate_repo
        self.read_backoff_seconds = read_backoff_seconds

    async def execute(self, account_id: str) -> Result[BalanceResponseDTO]:
        """
        Errors:
            ACCOUNT_NOT_FOUND, CONFIGURATION_UNAVAILABLE, GET_BALANCE_FAILED
        """
        try:
            account = await self.account_repo.get_by_id(account_id)
        except Exception as e:
            logger.error(f"Reading balance of account {account_id} failed: {e}")
            return Return.err(
                Error(
                    code=errors.GET_BALANCE_FAILED,
                    message="Failed to read balance",
                    reason=str(e),
                )
            )

        if not account:
            return Return.err(
                Error(
                    code=errors.ACCOUNT_NOT_FOUND,
                    message="Customer not found",
                    reason=f"account_id={account_id}",
                )
            )

        rates_result = await GetCurrentRates(
            self.rate_repo, backoff_seconds=self.read_backoff_seconds
        ).snapshot()
        if rates_result.is_err():
            return rates_result
        rates = rates_result.value

        return Return.ok(
            BalanceResponseDTO(
                account_id=account.id,
                points_balance=account.points_balance,
                cash_value=compute_cash_value(account.points_balance, rates.redeem_rate),
                rate_version=rates.version,
                last_updated=account.updated_at,
            )
        )
