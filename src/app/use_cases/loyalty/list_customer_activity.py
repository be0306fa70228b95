"""ListCustomerActivity Use Case"""

import logging
from libs.result import Result, Return, Error
from src.app.repositories.account_repository import AccountRepository
from src.app.repositories.ledger_entry_repository import AccountTotals, LedgerEntryRepository
from . import errors
from .dtos import CustomerActivityDTO, CustomerActivityPageDTO

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class ListCustomerActivity:
    """
    Use case: Customer list for the admin overview

    Business Rules:
    1. Customers are listed most recently joined first
    2. visit_count counts awarded bills; redemptions are not visits
    3. Customers with no activity are listed with zero totals
    """

    def __init__(self, account_repo: AccountRepository, entry_repo: LedgerEntryRepository):
        self.account_repo = account_repo
        self.entry_repo = entry_repo

    async def execute(self, limit: int = 20, offset: int = 0) -> Result[CustomerActivityPageDTO]:
        limit = max(1, min(limit, MAX_PAGE_SIZE))
        offset = max(0, offset)

        try:
            accounts, total = await self.account_repo.list_recent(limit=limit, offset=offset)
            totals = await self.entry_repo.get_totals_by_account([a.id for a in accounts])
        except Exception as e:
            logger.error(f"Listing customer activity failed: {e}")
            return Return.err(
                Error(
                    code=errors.REPORT_FAILED,
                    message="Failed to build report",
                    reason=str(e),
                )
            )

        customers = []
        for account in accounts:
            activity = totals.get(account.id, AccountTotals.empty())
            customers.append(
                CustomerActivityDTO(
                    account_id=account.id,
                    name=account.name,
                    email=account.email,
                    points_balance=account.points_balance,
                    created_at=account.created_at,
                    total_spend=activity.total_spend,
                    visit_count=activity.earn_count,
                    last_visit=activity.last_earned_at,
                )
            )

        next_offset = offset + len(accounts)
        return Return.ok(
            CustomerActivityPageDTO(
                customers=customers,
                total=total,
                limit=limit,
                offset=offset,
                next_offset=next_offset if next_offset < total else None,
            )
        )
