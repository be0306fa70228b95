"""Data Transfer Objects for Loyalty Use Cases

Pydantic models for command inputs and response outputs.

Command DTOs deliberately do not constrain amounts: non-positive values
must reach the use case so they are rejected with INVALID_AMOUNT instead
of surfacing as a validation fault.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field
from src.domain.account import Account
from src.domain.ledger_entry import LedgerEntry, OperationState
from src.domain.rate_snapshot import RateSnapshot


class OpenAccountCommandDTO(BaseModel):
    """
    Command DTO for opening a customer account

    Issued on a customer's first successful authentication.
    """

    account_id: Optional[str] = Field(
        default=None,
        description="Identity-provider subject id (UUID); generated when omitted"
    )

    email: str = Field(
        ...,
        min_length=3,
        description="Contact email"
    )

    name: str = Field(
        ...,
        min_length=1,
        description="Display name"
    )

    phone_number: Optional[str] = Field(
        default=None,
        description="Optional phone number"
    )


class AccountDTO(BaseModel):
    """Account as seen by staff and customers"""

    account_id: str = Field(..., description="Account identifier")
    email: str = Field(..., description="Contact email")
    name: str = Field(..., description="Display name")
    phone_number: Optional[str] = Field(default=None, description="Phone number")
    points_balance: int = Field(..., description="Authoritative point balance")
    created_at: datetime = Field(..., description="Account creation timestamp")

    @classmethod
    def from_account(cls, account: Account) -> "AccountDTO":
        return cls(
            account_id=account.id,
            email=account.email,
            name=account.name,
            phone_number=account.phone_number,
            points_balance=account.points_balance,
            created_at=account.created_at,
        )


class OpenAccountResponseDTO(BaseModel):
    account: AccountDTO
    created: bool = Field(..., description="False when the account already existed")


class ResolvedAccountDTO(BaseModel):
    """
    Response DTO for account resolution

    match_type:
    - "qr": exact id taken from a structured QR payload
    - "id": the token itself was an account id
    - "search": substring match on email, name or phone
    """

    account: AccountDTO
    match_type: str = Field(..., description="How the account was identified (qr, id, search)")
    match_count: int = Field(..., description="Number of candidate matches before tie-break")


class BalanceResponseDTO(BaseModel):
    """
    Response DTO for get balance operation

    Returned by GetBalance use case.
    """

    account_id: str = Field(
        ...,
        description="Account identifier"
    )

    points_balance: int = Field(
        ...,
        description="Current point balance"
    )

    cash_value: Decimal = Field(
        ...,
        description="Cash value of the balance at the current redeem rate"
    )

    rate_version: int = Field(
        ...,
        description="Rate snapshot used for cash_value"
    )

    last_updated: datetime = Field(
        ...,
        description="Timestamp of last balance update"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "account_id": "0b6a1c1e-5f0e-4d3b-9c59-3c1f8f2a7d11",
                "points_balance": 40,
                "cash_value": "0.40",
                "rate_version": 1,
                "last_updated": "2024-01-01T00:00:00Z"
            }
        }


class RateSnapshotDTO(BaseModel):
    version: int = Field(..., description="Snapshot version (0 = built-in default)")
    earn_rate: Decimal = Field(..., description="Points earned per currency unit spent")
    redeem_rate: Decimal = Field(..., description="Cash value per point redeemed")
    effective_at: datetime = Field(..., description="When the snapshot became current")
    updated_by: Optional[str] = Field(default=None, description="Administrator who set the rates")
    is_default: bool = Field(..., description="True when no rates were ever configured")

    @classmethod
    def from_snapshot(cls, snapshot: RateSnapshot) -> "RateSnapshotDTO":
        return cls(
            version=snapshot.version,
            earn_rate=snapshot.earn_rate,
            redeem_rate=snapshot.redeem_rate,
            effective_at=snapshot.effective_at,
            updated_by=snapshot.updated_by,
            is_default=snapshot.is_default,
        )


class UpdateRatesCommandDTO(BaseModel):
    """
    Command DTO for changing the earn/redeem rates

    Used as input to UpdateRates use case.
    """

    earn_rate: Decimal = Field(
        ...,
        description="Points earned per currency unit spent (must be >= 0)"
    )

    redeem_rate: Decimal = Field(
        ...,
        description="Cash value per point redeemed (must be >= 0)"
    )

    updated_by: Optional[str] = Field(
        default=None,
        description="Administrator making the change"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "earn_rate": "2",
                "redeem_rate": "0.02",
                "updated_by": "admin_7"
            }
        }


class AwardQuoteDTO(BaseModel):
    """
    Points a bill would earn at the current rates

    A preview only: nothing is written, and an award made later may use
    a newer rate snapshot.
    """

    account_id: str
    bill_amount: Decimal
    points: int = Field(..., description="floor(bill_amount * earn_rate)")
    earn_rate: Decimal
    rate_version: int


class RedeemQuoteDTO(BaseModel):
    """Cash value of a redemption at the current rates, without redeeming"""

    account_id: str
    points: int
    cash_value: Decimal = Field(..., description="points * redeem_rate")
    redeem_rate: Decimal
    rate_version: int
    available_points: int = Field(..., description="Current balance")
    sufficient: bool = Field(..., description="False when the balance cannot cover the redemption")


class AwardPointsCommandDTO(BaseModel):
    """
    Command DTO for awarding points on a bill

    Used as input to AwardPoints use case.
    """

    account_id: str = Field(
        ...,
        description="Account to credit"
    )

    clinic_id: str = Field(
        ...,
        description="Clinic where the bill was paid (from the caller's session)"
    )

    bill_amount: Decimal = Field(
        ...,
        description="Amount spent (must be > 0)"
    )

    idempotency_key: Optional[str] = Field(
        default=None,
        description="Client-generated token; a retry with the same token returns the original entry"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "account_id": "0b6a1c1e-5f0e-4d3b-9c59-3c1f8f2a7d11",
                "clinic_id": "clinic_orchard",
                "bill_amount": "100.00",
                "idempotency_key": "terminal-3:1704067200:award"
            }
        }


class RedeemPointsCommandDTO(BaseModel):
    """
    Command DTO for redeeming points

    Used as input to RedeemPoints use case.
    """

    account_id: str = Field(
        ...,
        description="Account to debit"
    )

    clinic_id: str = Field(
        ...,
        description="Clinic where the discount is applied (from the caller's session)"
    )

    points: int = Field(
        ...,
        description="Points to redeem (must be > 0)"
    )

    idempotency_key: Optional[str] = Field(
        default=None,
        description="Client-generated token; a retry with the same token returns the original entry"
    )


class LedgerEntryDTO(BaseModel):
    """
    Ledger entry as returned by award, redeem and the activity feed

    `replayed` is True when an idempotent retry returned an existing entry.
    """

    entry_id: str
    account_id: str
    clinic_id: str
    kind: str = Field(..., description="earn or redeem")
    points: int = Field(..., description="Points credited or debited")
    bill_amount: Optional[Decimal] = Field(default=None, description="Amount spent (earn)")
    cash_value: Optional[Decimal] = Field(default=None, description="Cash value (redeem)")
    rate_version: int
    earn_rate: Decimal
    redeem_rate: Decimal
    balance_before: int
    balance_after: int
    sequence: int
    idempotency_key: Optional[str] = None
    created_at: datetime
    state: OperationState = OperationState.LOGGED
    replayed: bool = False

    @classmethod
    def from_entry(cls, entry: LedgerEntry, replayed: bool = False) -> "LedgerEntryDTO":
        return cls(
            entry_id=entry.id,
            account_id=entry.account_id,
            clinic_id=entry.clinic_id,
            kind=entry.kind.value if hasattr(entry.kind, "value") else entry.kind,
            points=entry.points,
            bill_amount=entry.bill_amount,
            cash_value=entry.cash_value,
            rate_version=entry.rate_version,
            earn_rate=entry.earn_rate,
            redeem_rate=entry.redeem_rate,
            balance_before=entry.balance_before,
            balance_after=entry.balance_after,
            sequence=entry.sequence,
            idempotency_key=entry.idempotency_key,
            created_at=entry.created_at,
            replayed=replayed,
        )


class AccountHistoryResponseDTO(BaseModel):
    """
    Page of an account's history, newest first

    Pass next_offset back as `offset` to continue; it is None on the last page.
    """

    account_id: str
    entries: List[LedgerEntryDTO]
    total: int
    limit: int
    offset: int
    next_offset: Optional[int] = None


class DailyClinicActivityDTO(BaseModel):
    """Clinic activity for one calendar day (UTC), oldest first"""

    clinic_id: str
    day: date
    entries: List[LedgerEntryDTO]
    earn_count: int
    redeem_count: int
    points_awarded: int
    points_redeemed: int
    bill_total: Decimal
    cash_value_total: Decimal


class ProgramSummaryDTO(BaseModel):
    total_accounts: int
    points_in_circulation: int
    earn_count: int
    redeem_count: int
    total_spend: Decimal
    total_cash_value: Decimal
    top_clinic_id: Optional[str] = Field(default=None, description="Clinic with the highest billed total")
    average_spend_per_account: Decimal = Field(default=Decimal("0"), description="Total spend divided by the number of accounts")


class ClinicStatsDTO(BaseModel):
    """Lifetime activity of one clinic"""

    clinic_id: str
    earn_count: int = Field(..., description="Bills awarded at this clinic")
    redeem_count: int
    points_awarded: int
    points_redeemed: int
    bill_total: Decimal = Field(..., description="Revenue recorded through awards")
    cash_value_total: Decimal


class CustomerActivityDTO(BaseModel):
    account_id: str
    name: str
    email: str
    points_balance: int
    created_at: datetime
    total_spend: Decimal
    visit_count: int = Field(..., description="Number of awarded bills")
    last_visit: Optional[datetime] = Field(default=None, description="Most recent award")


class CustomerActivityPageDTO(BaseModel):
    """Page of customers, most recently joined first"""

    customers: List[CustomerActivityDTO]
    total: int
    limit: int
    offset: int
    next_offset: Optional[int] = None


class AccountSummaryDTO(BaseModel):
    """
    Lifetime figures for one customer

    total_savings is the sum of the cash values frozen on the redeem
    entries, not the balance revalued at today's rate.
    """

    account_id: str
    points_balance: int
    points_earned: int
    points_redeemed: int
    total_savings: Decimal
    total_spend: Decimal
    visit_count: int


class LedgerDiscrepancyDTO(BaseModel):
    """An account whose materialized balance disagrees with its entries"""

    account_id: str
    ledger_balance: int
    calculated_balance: int
    discrepancy: int


class ReconciliationResultDTO(BaseModel):
    total_accounts_checked: int
    discrepancies_found: int
    discrepancies: List[LedgerDiscrepancyDTO]
    reconciliation_time: datetime
    execution_time_ms: int
