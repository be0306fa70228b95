"""GetCurrentRates Use Case

Returns the rate snapshot currently in effect, falling back to the
documented default when rates were never configured.
"""

import logging
from typing import Optional
from libs.result import Result, Return, Error
from src.app.repositories.rate_snapshot_repository import RateSnapshotRepository
from src.app.services.read_retry import retry_read_once, TRANSIENT_ERRORS
from src.app.services.unit_of_work import UnitOfWork
from src.domain.rate_snapshot import RateSnapshot
from . import errors
from .dtos import RateSnapshotDTO

logger = logging.getLogger(__name__)


class GetCurrentRates:
    """
    Use Case: Read the current earn/redeem rates

    Business Rules:
    1. Always yields a valid snapshot: default is earn=1, redeem=0.01
    2. Transient storage failures are retried once with backoff
    3. A second failure, or any other storage error, is
       CONFIGURATION_UNAVAILABLE
    """

    def __init__(
        self,
        rate_repo: RateSnapshotRepository,
        uow: Optional[UnitOfWork] = None,
        backoff_seconds: float = 0.2,
    ):
        self.rate_repo = rate_repo
        self.uow = uow
        self.backoff_seconds = backoff_seconds

    async def snapshot(self) -> Result[RateSnapshot]:
        """Current snapshot as a domain entity (used by the ledger engine)"""
        try:
            current = await retry_read_once(
                self.rate_repo.get_current,
                backoff_seconds=self.backoff_seconds,
                before_retry=self.uow.rollback if self.uow else None,
            )
        except TRANSIENT_ERRORS as e:
            logger.error(f"Rate configuration unavailable: {e}")
            return Return.err(
                Error(
                    code=errors.CONFIGURATION_UNAVAILABLE,
                    message="Rate configuration is temporarily unavailable",
                    reason=str(e),
                )
            )
        except Exception as e:
            logger.error(f"Reading rate configuration failed: {e}")
            return Return.err(
                Error(
                    code=errors.CONFIGURATION_UNAVAILABLE,
                    message="Rate configuration is temporarily unavailable",
                    reason=str(e),
                )
            )

        return Return.ok(current or RateSnapshot.default())

    async def execute(self) -> Result[RateSnapshotDTO]:
        result = await self.snapshot()
        if result.is_err():
            return result
        return Return.ok(RateSnapshotDTO.from_snapshot(result.value))
