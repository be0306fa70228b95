"""Ledger Entry Domain Entity

Immutable append-only record of one balance mutation. Each entry freezes
the rate snapshot it was computed with, so later rate changes never alter
its recorded values.
"""

from datetime import datetime
from decimal import Decimal, ROUND_FLOOR
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, ForeignKey, Integer, Numeric, String, UniqueConstraint
from src.domain.base import BaseModel, generate_uuid


class EntryKind(str, Enum):
    """Ledger entry kinds"""
    EARN = "earn"        # Points credited for spend
    REDEEM = "redeem"    # Points debited for a cash-value offset


class OperationState(str, Enum):
    """Lifecycle of an in-flight ledger operation

    REQUESTED -> VALIDATED -> APPLIED -> LOGGED, or REQUESTED -> REJECTED.
    Only LOGGED and REJECTED are ever observed by callers.
    """
    REQUESTED = "requested"
    VALIDATED = "validated"
    APPLIED = "applied"
    LOGGED = "logged"
    REJECTED = "rejected"


def compute_points_earned(bill_amount: Decimal, earn_rate: Decimal) -> int:
    """floor(bill_amount * earn_rate)"""
    return int((bill_amount * earn_rate).to_integral_value(rounding=ROUND_FLOOR))


def compute_cash_value(points: int, redeem_rate: Decimal) -> Decimal:
    return Decimal(points) * redeem_rate


class LedgerEntry(BaseModel, table=True):
    """
    Ledger Entry - Immutable audit record of a point balance mutation

    Domain Rules:
    - Entries are immutable (append-only)
    - points is the unsigned magnitude; the signed delta is +points for
      EARN and -points for REDEEM
    - balance_after == balance_before + signed delta, and is never negative
    - (account_id, idempotency_key) is unique, so a retried request maps
      back to the entry it originally produced
    - rate_version/earn_rate/redeem_rate record the snapshot used at commit
    - sequence is the account version produced by this entry; per account it
      orders entries exactly as they were applied to the balance
    """

    __tablename__ = "ledger_entries"
    __table_args__ = (
        CheckConstraint('points >= 0', name='points_non_negative'),
        CheckConstraint('balance_after >= 0', name='balance_after_non_negative'),
        UniqueConstraint('account_id', 'idempotency_key', name='uq_ledger_entries_account_idempotency'),
        UniqueConstraint('account_id', 'sequence', name='uq_ledger_entries_account_sequence'),
        Index('ix_ledger_entries_account_created', 'account_id', 'created_at'),
        Index('ix_ledger_entries_clinic_created', 'clinic_id', 'created_at'),
    )

    id: str = Field(
        default_factory=generate_uuid,
        sa_column=Column(String(36), primary_key=True),
        description="Unique entry identifier (UUID)"
    )

    account_id: str = Field(
        sa_column=Column(String(36), ForeignKey("accounts.id"), nullable=False),
        description="Account whose balance this entry mutated"
    )

    clinic_id: str = Field(
        sa_column=Column(String(64), nullable=False),
        description="Clinic/location where the operation was performed"
    )

    kind: EntryKind = Field(
        description="Entry kind (earn, redeem)"
    )

    points: int = Field(
        sa_column=Column(Integer, nullable=False),
        description="Points credited (EARN) or debited (REDEEM)"
    )

    bill_amount: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(18, 2), nullable=True),
        description="Amount spent (EARN only)"
    )

    cash_value: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(18, 6), nullable=True),
        description="Cash-value equivalent of redeemed points (REDEEM only)"
    )

    rate_version: int = Field(
        sa_column=Column(Integer, nullable=False),
        description="Version of the rate snapshot used (0 = built-in default)"
    )

    earn_rate: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Earn rate frozen at commit time"
    )

    redeem_rate: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Redeem rate frozen at commit time"
    )

    balance_before: int = Field(
        sa_column=Column(Integer, nullable=False),
        description="Account balance immediately before this entry"
    )

    balance_after: int = Field(
        sa_column=Column(Integer, nullable=False),
        description="Account balance after this entry"
    )

    sequence: int = Field(
        sa_column=Column(Integer, nullable=False),
        description="Per-account position in apply order (account version after this entry)"
    )

    idempotency_key: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
        description="Caller-supplied token for safe retries"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Entry timestamp (immutable)"
    )

    @property
    def signed_delta(self) -> int:
        return self.points if self.kind == EntryKind.EARN else -self.points

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": "6f1f0c5e-8a0b-4c7e-a1d3-2b9f3a0c4e55",
                "account_id": "0b6a1c1e-5f0e-4d3b-9c59-3c1f8f2a7d11",
                "clinic_id": "clinic_orchard",
                "kind": "redeem",
                "points": 60,
                "bill_amount": None,
                "cash_value": "0.600000",
                "rate_version": 1,
                "earn_rate": "1.000000",
                "redeem_rate": "0.010000",
                "balance_before": 100,
                "balance_after": 40,
                "sequence": 2,
                "idempotency_key": "terminal-3:1704067200:redeem",
                "created_at": "2024-01-01T00:00:00Z"
            }
        }
