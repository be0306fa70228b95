"""GetProgramSummary Use Case"""

import logging
from decimal import Decimal
from libs.result import Result, Return, Error
from src.app.repositories.account_repository import AccountRepository
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from src.domain.ledger_entry import EntryKind
from . import errors
from .dtos import ProgramSummaryDTO

logger = logging.getLogger(__name__)


class GetProgramSummary:
    """
    Use case: Program-wide totals for the admin overview

    Computed directly from the store on each call. The top clinic is the
    one with the highest billed total; ties go to the smaller clinic id.
    """

    def __init__(self, account_repo: AccountRepository, entry_repo: LedgerEntryRepository):
        self.account_repo = account_repo
        self.entry_repo = entry_repo

    async def execute(self) -> Result[ProgramSummaryDTO]:
        try:
            total_accounts, points_in_circulation = await self.account_repo.get_totals()
            kind_totals = await self.entry_repo.get_kind_totals()
            clinic_totals = await self.entry_repo.get_clinic_totals()
        except Exception as e:
            logger.error(f"Building program summary failed: {e}")
            return Return.err(
                Error(
                    code=errors.REPORT_FAILED,
                    message="Failed to build report",
                    reason=str(e),
                )
            )

        earn_count, total_spend = kind_totals[EntryKind.EARN]
        redeem_count, total_cash_value = kind_totals[EntryKind.REDEEM]

        top_clinic_id = None
        if clinic_totals:
            top = min(clinic_totals, key=lambda c: (-c.bill_total, c.clinic_id))
            top_clinic_id = top.clinic_id

        average_spend = Decimal("0")
        if total_accounts:
            average_spend = (total_spend / total_accounts).quantize(Decimal("0.01"))

        return Return.ok(
            ProgramSummaryDTO(
                total_accounts=total_accounts,
                points_in_circulation=points_in_circulation,
                earn_count=earn_count,
                redeem_count=redeem_count,
                total_spend=total_spend,
                total_cash_value=total_cash_value,
                top_clinic_id=top_clinic_id,
                average_spend_per_account=average_spend,
            )
        )
