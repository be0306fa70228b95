"""Rate Snapshot Domain Entity

Versioned earn/redeem conversion rates. Snapshots are append-only: the
current snapshot is the one with the highest version, older ones are kept
so past ledger entries stay interpretable.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import CheckConstraint, Integer, Numeric
from src.domain.base import BaseModel

DEFAULT_EARN_RATE = Decimal("1")
DEFAULT_REDEEM_RATE = Decimal("0.01")

# Version reported for the built-in default, which is never persisted
DEFAULT_RATE_VERSION = 0


class RateSnapshot(BaseModel, table=True):
    """
    Rate Snapshot - earn/redeem rates in effect from `effective_at`

    Domain Rules:
    - version is the primary key, so two writers can never both create
      the same "next" snapshot
    - Rates are non-negative
    - Snapshots are never updated or deleted
    """

    __tablename__ = "rate_snapshots"
    __table_args__ = (
        CheckConstraint('earn_rate >= 0', name='earn_rate_non_negative'),
        CheckConstraint('redeem_rate >= 0', name='redeem_rate_non_negative'),
    )

    version: int = Field(
        sa_column=Column(Integer, primary_key=True, autoincrement=False),
        description="Monotonic snapshot version (1 = first configured snapshot)"
    )

    earn_rate: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Points earned per currency unit spent"
    )

    redeem_rate: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Cash value per point redeemed"
    )

    updated_by: Optional[str] = Field(
        default=None,
        description="Identity of the administrator who set these rates"
    )

    effective_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="When this snapshot became current"
    )

    @classmethod
    def default(cls) -> "RateSnapshot":
        """Rates used when nothing has ever been configured"""
        return cls(
            version=DEFAULT_RATE_VERSION,
            earn_rate=DEFAULT_EARN_RATE,
            redeem_rate=DEFAULT_REDEEM_RATE,
            effective_at=datetime(1970, 1, 1),
        )

    @property
    def is_default(self) -> bool:
        return self.version == DEFAULT_RATE_VERSION
