"""Rate API Routes

Current earn/redeem rates, their history, and the admin update.
"""

from typing import List
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.caller import Caller, get_caller, require_admin
from src.api.error import raise_for_error
from src.api.schemas.loyalty_request import UpdateRatesRequestSchema
from src.app.use_cases.loyalty import GetCurrentRates, ListRateHistory, UpdateRates
from src.app.use_cases.loyalty.dtos import RateSnapshotDTO, UpdateRatesCommandDTO
from src.adapter.repositories import SqlAlchemyRateSnapshotRepository
from src.adapter.services import SqlAlchemyUnitOfWork
from src.depends import get_session

router = APIRouter(prefix="/loyalty/rates", tags=["Rates"])


@router.get("", response_model=RateSnapshotDTO, status_code=status.HTTP_200_OK)
async def get_current_rates(
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
):
    """
    Rates applied to new entries. Defaults (earn 1, redeem 0.01) when none were set.
    """
    use_case = GetCurrentRates(
        SqlAlchemyRateSnapshotRepository(session),
        uow=SqlAlchemyUnitOfWork(session),
        backoff_seconds=ApplicationConfig.READ_RETRY_BACKOFF_SECONDS,
    )
    result = await use_case.execute()

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get("/history", response_model=List[RateSnapshotDTO], status_code=status.HTTP_200_OK)
async def list_rate_history(
    limit: int = Query(default=50, ge=1, le=500),
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
):
    use_case = ListRateHistory(SqlAlchemyRateSnapshotRepository(session))
    result = await use_case.execute(limit=limit)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.put(
    "",
    response_model=RateSnapshotDTO,
    status_code=status.HTTP_200_OK,
    responses={
        400: {
            "description": "Negative rate",
            "content": {
                "application/json": {
                    "example": {"error": {"code": "INVALID_RATE", "message": "Rates must be zero or greater"}}
                }
            }
        },
        409: {"description": "Concurrent updates kept conflicting"},
    }
)
async def update_rates(
    request: UpdateRatesRequestSchema,
    caller: Caller = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """
    Make new rates current. Entries already logged keep the rates they used.

    **Example request:**
    ```json
    {"earn_rate": "2", "redeem_rate": "0.02"}
    ```
    """
    command = UpdateRatesCommandDTO(
        earn_rate=request.earn_rate,
        redeem_rate=request.redeem_rate,
        updated_by=caller.caller_id,
    )

    use_case = UpdateRates(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyRateSnapshotRepository(session),
        max_attempts=ApplicationConfig.RATE_UPDATE_MAX_ATTEMPTS,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)
    return result.value
