"""GetAccountSummary Use Case

A customer's lifetime figures: points earned and redeemed, savings, spend.
"""

import logging
from libs.result import Result, Return, Error
from src.app.repositories.account_repository import AccountRepository
from src.app.repositories.ledger_entry_repository import AccountTotals, LedgerEntryRepository
from . import errors
from .dtos import AccountSummaryDTO

logger = logging.getLogger(__name__)


class GetAccountSummary:
    """
    Use case: Lifetime summary of one account

    Savings are summed from the cash values frozen on each redeem entry,
    so a later rate change never alters them.
    """

    def __init__(self, account_repo: AccountRepository, entry_repo: LedgerEntryRepository):
        self.account_repo = account_repo
        self.entry_repo = entry_repo

    async def execute(self, account_id: str) -> Result[AccountSummaryDTO]:
        """
        Errors:
            ACCOUNT_NOT_FOUND, REPORT_FAILED
        """
        try:
            account = await self.account_repo.get_by_id(account_id)
            if account:
                totals = await self.entry_repo.get_totals_by_account([account_id])
        except Exception as e:
            logger.error(f"Summarizing account {account_id} failed: {e}")
            return Return.err(
                Error(
                    code=errors.REPORT_FAILED,
                    message="Failed to build report",
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

        activity = totals.get(account_id, AccountTotals.empty())
        return Return.ok(
            AccountSummaryDTO(
                account_id=account.id,
                points_balance=account.points_balance,
                points_earned=activity.points_earned,
                points_redeemed=activity.points_redeemed,
                total_savings=activity.total_cash_value,
                total_spend=activity.total_spend,
                visit_count=activity.earn_count,
            )
        )
