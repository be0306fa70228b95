"""Rate Snapshot Repository Interface"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.rate_snapshot import RateSnapshot


class RateSnapshotRepository(ABC):
    """
    Repository interface for RateSnapshot persistence

    Snapshots are append-only and keyed by version. The current snapshot is
    the one with the highest version.
    """

    @abstractmethod
    async def get_current(self) -> Optional[RateSnapshot]:
        """
        Returns:
            Highest-version snapshot, or None if rates were never configured
        """
        pass

    @abstractmethod
    async def create(self, snapshot: RateSnapshot) -> RateSnapshot:
        """
        Persist a new snapshot

        Raises:
            IntegrityError: If a snapshot with the same version already exists
        """
        pass

    @abstractmethod
    async def list_history(self, limit: int = 50) -> List[RateSnapshot]:
        """Snapshots, newest version first"""
        pass
