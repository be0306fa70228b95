"""GetDailyClinicActivity Use Case

Per-clinic daily report from the activity feed.
"""

import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional
from libs.result import Result, Return, Error
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from src.app.services.read_retry import retry_read_once, TRANSIENT_ERRORS
from src.domain.ledger_entry import EntryKind
from . import errors
from .dtos import DailyClinicActivityDTO, LedgerEntryDTO

logger = logging.getLogger(__name__)


class GetDailyClinicActivity:
    """
    Use case: Everything a clinic awarded and redeemed on one UTC day

    Entries are ordered by timestamp, oldest first. Totals are computed
    from the same entries that are returned.
    """

    def __init__(self, entry_repo: LedgerEntryRepository, backoff_seconds: float = 0.2):
        self.entry_repo = entry_repo
        self.backoff_seconds = backoff_seconds

    async def execute(
        self,
        clinic_id: str,
        day: date,
        kind: Optional[EntryKind] = None,
    ) -> Result[DailyClinicActivityDTO]:
        start = datetime.combine(day, time.min)
        end = start + timedelta(days=1)

        try:
            entries = await retry_read_once(
                lambda: self.entry_repo.list_by_clinic_between(clinic_id, start, end, kind=kind),
                backoff_seconds=self.backoff_seconds,
            )
        except TRANSIENT_ERRORS as e:
            logger.error(f"Daily report for clinic {clinic_id} on {day} unavailable: {e}")
            return Return.err(
                Error(
                    code=errors.REPORT_UNAVAILABLE,
                    message="Report is temporarily unavailable",
                    reason=str(e),
                )
            )
        except Exception as e:
            logger.error(f"Daily report for clinic {clinic_id} on {day} failed: {e}")
            return Return.err(
                Error(
                    code=errors.REPORT_FAILED,
                    message="Failed to build report",
                    reason=str(e),
                )
            )

        earns = [e for e in entries if e.kind == EntryKind.EARN]
        redeems = [e for e in entries if e.kind == EntryKind.REDEEM]

        return Return.ok(
            DailyClinicActivityDTO(
                clinic_id=clinic_id,
                day=day,
                entries=[LedgerEntryDTO.from_entry(e) for e in entries],
                earn_count=len(earns),
                redeem_count=len(redeems),
                points_awarded=sum(e.points for e in earns),
                points_redeemed=sum(e.points for e in redeems),
                bill_total=sum((e.bill_amount or Decimal("0") for e in earns), Decimal("0")),
                cash_value_total=sum((e.cash_value or Decimal("0") for e in redeems), Decimal("0")),
            )
        )
