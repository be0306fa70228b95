"""ListRateHistory Use Case"""

import logging
from typing import List
from libs.result import Result, Return, Error
from src.app.repositories.rate_snapshot_repository import RateSnapshotRepository
from . import errors
from .dtos import RateSnapshotDTO

logger = logging.getLogger(__name__)


class ListRateHistory:
    """Use case: all configured rate snapshots, newest version first"""

    def __init__(self, rate_repo: RateSnapshotRepository):
        self.rate_repo = rate_repo

    async def execute(self, limit: int = 50) -> Result[List[RateSnapshotDTO]]:
        try:
            snapshots = await self.rate_repo.list_history(limit=limit)
        except Exception as e:
            logger.error(f"Listing rate history failed: {e}")
            return Return.err(
                Error(
                    code=errors.LIST_RATE_HISTORY_FAILED,
                    message="Failed to list rate history",
                    reason=str(e),
                )
            )
        return Return.ok([RateSnapshotDTO.from_snapshot(s) for s in snapshots])
