"""Account API Routes

FastAPI routes for customer lookup, balances, statements and the two
ledger mutations (award, redeem).

Clients render the balance returned by these endpoints; they never apply
a local increment before the response arrives.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from fastapi import APIRouter, Depends, Header, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from libs.result import Error
from src.api.caller import Caller, CallerRole, get_caller, require_staff
from src.api.error import raise_for_error
from src.api.schemas.loyalty_request import (
    AwardRequestSchema,
    OpenAccountRequestSchema,
    RedeemRequestSchema,
)
from src.app.use_cases.loyalty import errors
from src.app.use_cases.loyalty import (
    AwardPoints,
    GetAccountSummary,
    GetBalance,
    ListAccountHistory,
    OpenAccount,
    QuoteAward,
    QuoteRedeem,
    RedeemPoints,
    ResolveAccount,
)
from src.app.use_cases.loyalty.dtos import (
    AccountHistoryResponseDTO,
    AccountSummaryDTO,
    AwardPointsCommandDTO,
    AwardQuoteDTO,
    BalanceResponseDTO,
    LedgerEntryDTO,
    OpenAccountCommandDTO,
    OpenAccountResponseDTO,
    RedeemPointsCommandDTO,
    RedeemQuoteDTO,
    ResolvedAccountDTO,
)
from src.adapter.repositories import (
    SqlAlchemyAccountRepository,
    SqlAlchemyLedgerEntryRepository,
    SqlAlchemyRateSnapshotRepository,
)
from src.adapter.services import JsonQrPayloadDecoder, SqlAlchemyUnitOfWork
from src.depends import get_session

router = APIRouter(prefix="/loyalty/accounts", tags=["Accounts"])


@router.post(
    "",
    response_model=OpenAccountResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def open_account(
    request: OpenAccountRequestSchema,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
):
    """
    Open the loyalty account for a customer identity (idempotent).

    Customers always open their own account: their caller id is used as the
    account id.
    """
    account_id = request.account_id
    if caller.role == CallerRole.CUSTOMER and caller.caller_id:
        account_id = caller.caller_id

    command = OpenAccountCommandDTO(
        account_id=account_id,
        email=request.email,
        name=request.name,
        phone_number=request.phone_number,
    )

    use_case = OpenAccount(SqlAlchemyUnitOfWork(session), SqlAlchemyAccountRepository(session))
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get(
    "/resolve",
    response_model=ResolvedAccountDTO,
    status_code=status.HTTP_200_OK,
    responses={
        404: {
            "description": "No matching customer",
            "content": {
                "application/json": {
                    "example": {"error": {"code": "ACCOUNT_NOT_FOUND", "message": "Customer not found"}}
                }
            }
        }
    }
)
async def resolve_account(
    token: str = Query(..., min_length=1, description="Account id, email/name/phone fragment, or scanned QR text"),
    caller: Caller = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
):
    """
    Identify the customer at the counter from a typed search or a QR scan.
    """
    use_case = ResolveAccount(
        SqlAlchemyAccountRepository(session),
        JsonQrPayloadDecoder(),
        tie_break=ApplicationConfig.RESOLVER_TIE_BREAK,
        search_limit=ApplicationConfig.RESOLVER_SEARCH_LIMIT,
    )
    result = await use_case.execute(token)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get(
    "/{account_id}/balance",
    response_model=BalanceResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def get_balance(
    account_id: str,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
):
    """
    Authoritative balance and its cash value at the current redeem rate.
    """
    caller.require_self_or_staff(account_id)

    use_case = GetBalance(
        SqlAlchemyAccountRepository(session),
        SqlAlchemyRateSnapshotRepository(session),
        read_backoff_seconds=ApplicationConfig.READ_RETRY_BACKOFF_SECONDS,
    )
    result = await use_case.execute(account_id)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get(
    "/{account_id}/history",
    response_model=AccountHistoryResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def get_history(
    account_id: str,
    since: Optional[datetime] = Query(default=None, description="Only entries at or after this instant"),
    limit: int = Query(default=ApplicationConfig.HISTORY_PAGE_SIZE, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
):
    """
    Account statement, newest first. Follow `next_offset` for more pages.
    """
    caller.require_self_or_staff(account_id)

    use_case = ListAccountHistory(
        SqlAlchemyAccountRepository(session),
        SqlAlchemyLedgerEntryRepository(session),
        uow=SqlAlchemyUnitOfWork(session),
        backoff_seconds=ApplicationConfig.READ_RETRY_BACKOFF_SECONDS,
    )
    result = await use_case.execute(account_id, since=since, limit=limit, offset=offset)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get(
    "/{account_id}/summary",
    response_model=AccountSummaryDTO,
    status_code=status.HTTP_200_OK,
)
async def get_account_summary(
    account_id: str,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
):
    """
    Lifetime points earned and redeemed, total savings and spend.
    """
    caller.require_self_or_staff(account_id)

    use_case = GetAccountSummary(
        SqlAlchemyAccountRepository(session),
        SqlAlchemyLedgerEntryRepository(session),
    )
    result = await use_case.execute(account_id)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get(
    "/{account_id}/quote/award",
    response_model=AwardQuoteDTO,
    status_code=status.HTTP_200_OK,
)
async def quote_award(
    account_id: str,
    bill_amount: Decimal = Query(..., description="Amount the customer is about to pay"),
    caller: Caller = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
):
    """
    Points this bill would earn at the current rates. Nothing is written.
    """
    use_case = QuoteAward(
        SqlAlchemyAccountRepository(session),
        SqlAlchemyRateSnapshotRepository(session),
        read_backoff_seconds=ApplicationConfig.READ_RETRY_BACKOFF_SECONDS,
    )
    result = await use_case.execute(account_id, bill_amount)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get(
    "/{account_id}/quote/redeem",
    response_model=RedeemQuoteDTO,
    status_code=status.HTTP_200_OK,
)
async def quote_redeem(
    account_id: str,
    points: int = Query(..., description="Points the customer wants to redeem"),
    caller: Caller = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
):
    """
    Cash value of redeeming `points` now, and whether the balance covers it.
    """
    use_case = QuoteRedeem(
        SqlAlchemyAccountRepository(session),
        SqlAlchemyRateSnapshotRepository(session),
        read_backoff_seconds=ApplicationConfig.READ_RETRY_BACKOFF_SECONDS,
    )
    result = await use_case.execute(account_id, points)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get(
    "/{account_id}/qr-payload",
    status_code=status.HTTP_200_OK,
)
async def get_qr_payload(
    account_id: str,
    caller: Caller = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
):
    """
    Text a customer's QR code should carry. Rendering the image is up to the client.
    """
    caller.require_self_or_staff(account_id)

    account = await SqlAlchemyAccountRepository(session).get_by_id(account_id)
    if not account:
        raise_for_error(Error(code=errors.ACCOUNT_NOT_FOUND, message="Customer not found"))

    return {"payload": JsonQrPayloadDecoder().encode(account.id, account.email, account.name)}


@router.post(
    "/{account_id}/award",
    response_model=LedgerEntryDTO,
    status_code=status.HTTP_200_OK,
    responses={
        400: {
            "description": "Invalid amount",
            "content": {
                "application/json": {
                    "example": {"error": {"code": "INVALID_AMOUNT", "message": "Bill amount must be greater than 0"}}
                }
            }
        },
        404: {"description": "Customer not found"},
    }
)
async def award_points(
    account_id: str,
    request: AwardRequestSchema,
    idempotency_key: Optional[str] = Header(default=None),
    caller: Caller = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
):
    """
    Award points for a bill paid at the caller's clinic.

    Send the same `idempotency_key` (body field or `Idempotency-Key` header)
    when retrying after a timeout: the original entry is returned and the
    balance changes only once.

    **Example request:**
    ```json
    {"bill_amount": "100.00", "idempotency_key": "terminal-3:1704067200:award"}
    ```
    """
    command = AwardPointsCommandDTO(
        account_id=account_id,
        clinic_id=caller.require_clinic(),
        bill_amount=request.bill_amount,
        idempotency_key=request.idempotency_key or idempotency_key,
    )

    use_case = AwardPoints(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyAccountRepository(session),
        SqlAlchemyLedgerEntryRepository(session),
        SqlAlchemyRateSnapshotRepository(session),
        read_backoff_seconds=ApplicationConfig.READ_RETRY_BACKOFF_SECONDS,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post(
    "/{account_id}/redeem",
    response_model=LedgerEntryDTO,
    status_code=status.HTTP_200_OK,
    responses={
        409: {
            "description": "Insufficient points",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INSUFFICIENT_BALANCE",
                            "message": "Insufficient points. Requested: 41, Available: 40"
                        }
                    }
                }
            }
        },
        404: {"description": "Customer not found"},
    }
)
async def redeem_points(
    account_id: str,
    request: RedeemRequestSchema,
    idempotency_key: Optional[str] = Header(default=None),
    caller: Caller = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
):
    """
    Redeem points for a cash-value discount at the caller's clinic.

    **Example request:**
    ```json
    {"points": 60, "idempotency_key": "terminal-3:1704067260:redeem"}
    ```
    """
    command = RedeemPointsCommandDTO(
        account_id=account_id,
        clinic_id=caller.require_clinic(),
        points=request.points,
        idempotency_key=request.idempotency_key or idempotency_key,
    )

    use_case = RedeemPoints(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyAccountRepository(session),
        SqlAlchemyLedgerEntryRepository(session),
        SqlAlchemyRateSnapshotRepository(session),
        read_backoff_seconds=ApplicationConfig.READ_RETRY_BACKOFF_SECONDS,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)
    return result.value
