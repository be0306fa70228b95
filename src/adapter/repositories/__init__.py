from .account_repository import SqlAlchemyAccountRepository
from .ledger_entry_repository import SqlAlchemyLedgerEntryRepository
from .rate_snapshot_repository import SqlAlchemyRateSnapshotRepository

__all__ = [
    "SqlAlchemyAccountRepository",
    "SqlAlchemyLedgerEntryRepository",
    "SqlAlchemyRateSnapshotRepository",
]
