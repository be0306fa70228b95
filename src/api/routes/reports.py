"""Report API Routes

Clinic activity and totals, the customer list, program-wide summary and
on-demand reconciliation.
"""

from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from libs.result import Error
from src.api.caller import Caller, CallerRole, require_admin, require_staff
from src.api.error import ClientError, raise_for_error
from src.app.use_cases.loyalty import errors
from src.app.use_cases.loyalty import (
    GetClinicStats,
    GetDailyClinicActivity,
    GetProgramSummary,
    ListCustomerActivity,
    ReconcileLedger,
)
from src.app.use_cases.loyalty.dtos import (
    ClinicStatsDTO,
    CustomerActivityPageDTO,
    DailyClinicActivityDTO,
    ProgramSummaryDTO,
    ReconciliationResultDTO,
)
from src.adapter.repositories import SqlAlchemyAccountRepository, SqlAlchemyLedgerEntryRepository
from src.domain.ledger_entry import EntryKind
from src.depends import get_session

router = APIRouter(prefix="/loyalty/reports", tags=["Reports"])


@router.get(
    "/clinics/{clinic_id}/daily",
    response_model=DailyClinicActivityDTO,
    status_code=status.HTTP_200_OK,
)
async def get_daily_clinic_activity(
    clinic_id: str,
    day: date = Query(..., alias="date", description="UTC calendar day (YYYY-MM-DD)"),
    kind: Optional[EntryKind] = Query(default=None),
    caller: Caller = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
):
    """
    Entries a clinic logged on one day, oldest first, with totals.

    Staff may only read their own clinic.
    """
    if caller.role != CallerRole.ADMIN and caller.require_clinic() != clinic_id:
        raise ClientError(
            Error(code=errors.FORBIDDEN, message="Not allowed to read another clinic's activity"),
            status_code=status.HTTP_403_FORBIDDEN,
        )

    use_case = GetDailyClinicActivity(
        SqlAlchemyLedgerEntryRepository(session),
        backoff_seconds=ApplicationConfig.READ_RETRY_BACKOFF_SECONDS,
    )
    result = await use_case.execute(clinic_id, day, kind=kind)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get("/summary", response_model=ProgramSummaryDTO, status_code=status.HTTP_200_OK)
async def get_program_summary(
    caller: Caller = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    use_case = GetProgramSummary(
        SqlAlchemyAccountRepository(session),
        SqlAlchemyLedgerEntryRepository(session),
    )
    result = await use_case.execute()

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get("/clinics", response_model=List[ClinicStatsDTO], status_code=status.HTTP_200_OK)
async def get_clinic_stats(
    caller: Caller = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """
    Lifetime transaction count and revenue per clinic, highest revenue first.
    """
    use_case = GetClinicStats(SqlAlchemyLedgerEntryRepository(session))
    result = await use_case.execute()

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get("/customers", response_model=CustomerActivityPageDTO, status_code=status.HTTP_200_OK)
async def list_customers(
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    caller: Caller = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """
    Customers, most recently joined first, with total spend and visit count.
    """
    use_case = ListCustomerActivity(
        SqlAlchemyAccountRepository(session),
        SqlAlchemyLedgerEntryRepository(session),
    )
    result = await use_case.execute(limit=limit, offset=offset)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post("/reconcile", response_model=ReconciliationResultDTO, status_code=status.HTTP_200_OK)
async def reconcile_ledger(
    caller: Caller = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """
    Compare every stored balance with the sum of its ledger entries.

    Read-only: discrepancies are reported, not corrected.
    """
    use_case = ReconcileLedger(SqlAlchemyLedgerEntryRepository(session))
    result = await use_case.execute()

    if result.is_err():
        raise_for_error(result.error)
    return result.value
