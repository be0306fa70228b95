from .account_repository import AccountRepository
from .ledger_entry_repository import LedgerEntryRepository
from .rate_snapshot_repository import RateSnapshotRepository

__all__ = [
    "AccountRepository",
    "LedgerEntryRepository",
    "RateSnapshotRepository",
]
