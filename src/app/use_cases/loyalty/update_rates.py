"""UpdateRates Use Case

Makes a new rate snapshot current. Snapshots are append-only; the
"upsert" is a compare-and-set on the version number.
"""

import logging
from libs.result import Result, Return, Error
from sqlalchemy.exc import IntegrityError
from src.app.repositories.rate_snapshot_repository import RateSnapshotRepository
from src.app.services.unit_of_work import UnitOfWork
from src.domain.rate_snapshot import RateSnapshot
from . import errors
from .dtos import RateSnapshotDTO, UpdateRatesCommandDTO

logger = logging.getLogger(__name__)


class UpdateRates:
    """
    Use Case: Replace the current earn/redeem rates

    Business Rules:
    1. Rates must be non-negative
    2. The new snapshot gets version current+1 (1 when nothing exists yet)
    3. Version is the primary key, so a concurrent update that read the
       same current version fails on insert; it re-reads and retries
    4. Previous snapshots are kept, so logged entries stay interpretable

    Flow:
    1. Validate rates
    2. Read current snapshot
    3. Insert snapshot with next version
    4. Commit, or on version conflict roll back and go to 2
    """

    def __init__(
        self,
        uow: UnitOfWork,
        rate_repo: RateSnapshotRepository,
        max_attempts: int = 3,
    ):
        self.uow = uow
        self.rate_repo = rate_repo
        self.max_attempts = max_attempts

    async def execute(self, command: UpdateRatesCommandDTO) -> Result[RateSnapshotDTO]:
        if command.earn_rate < 0 or command.redeem_rate < 0:
            return Return.err(
                Error(
                    code=errors.INVALID_RATE,
                    message="Rates must be zero or greater",
                    reason=f"earn_rate={command.earn_rate}, redeem_rate={command.redeem_rate}",
                )
            )

        try:
            for attempt in range(1, self.max_attempts + 1):
                current = await self.rate_repo.get_current()
                next_version = (current.version if current else 0) + 1

                snapshot = RateSnapshot(
                    version=next_version,
                    earn_rate=command.earn_rate,
                    redeem_rate=command.redeem_rate,
                    updated_by=command.updated_by,
                )

                try:
                    created = await self.rate_repo.create(snapshot)
                    await self.uow.commit()
                except IntegrityError:
                    await self.uow.rollback()
                    logger.warning(
                        f"Rate version {next_version} taken by a concurrent update "
                        f"(attempt {attempt}/{self.max_attempts})"
                    )
                    continue

                logger.info(
                    f"Rates updated to version {created.version}: "
                    f"earn_rate={created.earn_rate}, redeem_rate={created.redeem_rate}"
                )
                return Return.ok(RateSnapshotDTO.from_snapshot(created))

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Rate update failed: {e}")
            return Return.err(
                Error(
                    code=errors.RATE_UPDATE_FAILED,
                    message="Failed to update rates",
                    reason=str(e),
                )
            )

        return Return.err(
            Error(
                code=errors.RATE_UPDATE_CONFLICT,
                message="Rates were changed concurrently, please retry",
                reason=f"gave up after {self.max_attempts} attempts",
            )
        )
