"""Wiring shared by integration tests"""

from decimal import Decimal
from typing import Optional

from src.adapter.repositories import (
    SqlAlchemyAccountRepository,
    SqlAlchemyLedgerEntryRepository,
    SqlAlchemyRateSnapshotRepository,
)
from src.adapter.services import SqlAlchemyUnitOfWork
from src.app.use_cases.loyalty import (
    AwardPoints,
    AwardPointsCommandDTO,
    OpenAccount,
    OpenAccountCommandDTO,
    RedeemPoints,
    RedeemPointsCommandDTO,
    UpdateRates,
    UpdateRatesCommandDTO,
)

CLINIC_ID = "clinic_orchard"


async def open_account(session, email="jane@example.com", name="Jane Doe", phone_number=None):
    result = await OpenAccount(SqlAlchemyUnitOfWork(session), SqlAlchemyAccountRepository(session)).execute(
        OpenAccountCommandDTO(email=email, name=name, phone_number=phone_number)
    )
    assert result.is_ok(), result.error
    return result.value.account.account_id


def ledger_use_case(cls, session):
    return cls(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyAccountRepository(session),
        SqlAlchemyLedgerEntryRepository(session),
        SqlAlchemyRateSnapshotRepository(session),
        read_backoff_seconds=0,
    )


async def award(session, account_id, bill_amount, idempotency_key: Optional[str] = None, clinic_id=CLINIC_ID):
    return await ledger_use_case(AwardPoints, session).execute(
        AwardPointsCommandDTO(
            account_id=account_id,
            clinic_id=clinic_id,
            bill_amount=Decimal(bill_amount),
            idempotency_key=idempotency_key,
        )
    )


async def redeem(session, account_id, points, idempotency_key: Optional[str] = None, clinic_id=CLINIC_ID):
    return await ledger_use_case(RedeemPoints, session).execute(
        RedeemPointsCommandDTO(
            account_id=account_id,
            clinic_id=clinic_id,
            points=points,
            idempotency_key=idempotency_key,
        )
    )


async def update_rates(session, earn_rate, redeem_rate):
    result = await UpdateRates(SqlAlchemyUnitOfWork(session), SqlAlchemyRateSnapshotRepository(session)).execute(
        UpdateRatesCommandDTO(earn_rate=Decimal(earn_rate), redeem_rate=Decimal(redeem_rate))
    )
    assert result.is_ok(), result.error
    return result.value
