"""
Quote Use Cases

Preview what an award or a redemption would produce at the current rates
without touching the balance or the ledger.
"""

import logging
from decimal import Decimal
from typing import Optional
from libs.result import Result, Return, Error
from src.app.repositories.account_repository import AccountRepository
from src.app.repositories.rate_snapshot_repository import RateSnapshotRepository
from src.domain.account import Account
from src.domain.ledger_entry import compute_cash_value, compute_points_earned
from . import errors
from .dtos import AwardQuoteDTO, RedeemQuoteDTO
from .get_current_rates import GetCurrentRates

logger = logging.getLogger(__name__)


class _Quote:
    def __init__(
        self,
        account_repo: AccountRepository,
        rate_repo: RateSnapshotRepository,
        read_backoff_seconds: float = 0.2,
    ):
        self.account_repo = account_repo
        self.rate_repo = rate_repo
        self.read_backoff_seconds = read_backoff_seconds

    async def _load_account(self, account_id: str) -> Result[Account]:
        try:
            account: Optional[Account] = await self.account_repo.get_by_id(account_id)
        except Exception as e:
            logger.error(f"Reading account {account_id} for a quote failed: {e}")
            return Return.err(
                Error(
                    code=errors.QUOTE_FAILED,
                    message="Failed to prepare quote",
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
        return Return.ok(account)

    async def _rates(self):
        return await GetCurrentRates(self.rate_repo, backoff_seconds=self.read_backoff_seconds).snapshot()


class QuoteAward(_Quote):
    """
    Use case: Preview the points a bill would earn

    Read-only. Shown on the staff terminal before the award is confirmed;
    the award itself prices the bill again with whatever snapshot is
    current when it commits.
    """

    async def execute(self, account_id: str, bill_amount: Decimal) -> Result[AwardQuoteDTO]:
        """
        Args:
            account_id: Account the bill belongs to
            bill_amount: Amount spent (must be > 0)

        Returns:
            Result[AwardQuoteDTO]: floor(bill_amount * earn_rate) and the rates used

        Errors:
            INVALID_AMOUNT, ACCOUNT_NOT_FOUND, CONFIGURATION_UNAVAILABLE, QUOTE_FAILED
        """
        if bill_amount is None or bill_amount <= 0:
            return Return.err(
                Error(
                    code=errors.INVALID_AMOUNT,
                    message="Bill amount must be greater than 0",
                    reason=f"bill_amount={bill_amount}",
                )
            )

        account_result = await self._load_account(account_id)
        if account_result.is_err():
            return account_result

        rates_result = await self._rates()
        if rates_result.is_err():
            return rates_result
        rates = rates_result.value

        return Return.ok(
            AwardQuoteDTO(
                account_id=account_id,
                bill_amount=bill_amount,
                points=compute_points_earned(bill_amount, rates.earn_rate),
                earn_rate=rates.earn_rate,
                rate_version=rates.version,
            )
        )


class QuoteRedeem(_Quote):
    """
    Use case: Preview the cash value of a redemption

    Read-only. `sufficient` reflects the balance at the time of the quote;
    the redemption itself is still refused if the balance has dropped since.
    """

    async def execute(self, account_id: str, points: int) -> Result[RedeemQuoteDTO]:
        """
        Errors:
            INVALID_AMOUNT, ACCOUNT_NOT_FOUND, CONFIGURATION_UNAVAILABLE, QUOTE_FAILED
        """
        if points is None or points <= 0:
            return Return.err(
                Error(
                    code=errors.INVALID_AMOUNT,
                    message="Points to redeem must be greater than 0",
                    reason=f"points={points}",
                )
            )

        account_result = await self._load_account(account_id)
        if account_result.is_err():
            return account_result
        account = account_result.value

        rates_result = await self._rates()
        if rates_result.is_err():
            return rates_result
        rates = rates_result.value

        return Return.ok(
            RedeemQuoteDTO(
                account_id=account_id,
                points=points,
                cash_value=compute_cash_value(points, rates.redeem_rate),
                redeem_rate=rates.redeem_rate,
                rate_version=rates.version,
                available_points=account.points_balance,
                sufficient=account.points_balance >= points,
            )
        )
