"""GetClinicStats Use Case"""

import logging
from typing import List
from libs.result import Result, Return, Error
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from . import errors
from .dtos import ClinicStatsDTO

logger = logging.getLogger(__name__)


class GetClinicStats:
    """
    Use case: Lifetime transaction count and revenue per clinic

    Ordered by billed total, highest first; ties by clinic id. Clinics
    that never logged an entry do not appear.
    """

    def __init__(self, entry_repo: LedgerEntryRepository):
        self.entry_repo = entry_repo

    async def execute(self) -> Result[List[ClinicStatsDTO]]:
        try:
            totals = await self.entry_repo.get_clinic_totals()
        except Exception as e:
            logger.error(f"Reading clinic totals failed: {e}")
            return Return.err(
                Error(
                    code=errors.REPORT_FAILED,
                    message="Failed to build report",
                    reason=str(e),
                )
            )

        ordered = sorted(totals, key=lambda t: (-t.bill_total, t.clinic_id))
        return Return.ok([ClinicStatsDTO(**t._asdict()) for t in ordered])
