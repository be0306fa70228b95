from .base import BaseModel, generate_uuid
from .account import Account
from .ledger_entry import (
    LedgerEntry,
    EntryKind,
    OperationState,
    compute_points_earned,
    compute_cash_value,
)
from .rate_snapshot import (
    RateSnapshot,
    DEFAULT_EARN_RATE,
    DEFAULT_REDEEM_RATE,
    DEFAULT_RATE_VERSION,
)

__all__ = [
    "BaseModel",
    "generate_uuid",
    "Account",
    "LedgerEntry",
    "EntryKind",
    "OperationState",
    "compute_points_earned",
    "compute_cash_value",
    "RateSnapshot",
    "DEFAULT_EARN_RATE",
    "DEFAULT_REDEEM_RATE",
    "DEFAULT_RATE_VERSION",
]
