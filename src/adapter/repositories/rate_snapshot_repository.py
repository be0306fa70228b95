"""SQLAlchemy implementation of RateSnapshotRepository"""

from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.rate_snapshot_repository import RateSnapshotRepository
from src.domain.rate_snapshot import RateSnapshot


class SqlAlchemyRateSnapshotRepository(RateSnapshotRepository):
    """
    SQLAlchemy implementation of RateSnapshotRepository

    Uniqueness of the current snapshot comes from the version primary key:
    two writers racing to create version N+1 cannot both succeed.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_current(self) -> Optional[RateSnapshot]:
        stmt = select(RateSnapshot).order_by(RateSnapshot.version.desc()).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, snapshot: RateSnapshot) -> RateSnapshot:
        """
        Raises:
            IntegrityError: If the version is already taken
        """
        self.session.add(snapshot)
        await self.session.flush()
        await self.session.refresh(snapshot)
        return snapshot

    async def list_history(self, limit: int = 50) -> List[RateSnapshot]:
        stmt = select(RateSnapshot).order_by(RateSnapshot.version.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
