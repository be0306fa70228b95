"""SQLAlchemy implementation of AccountRepository

The balance update is a single conditional UPDATE, so it is atomic on any
engine that supports row-level write locking or serialized writers
(PostgreSQL, SQLite).
"""

from typing import List, Optional, Tuple
from datetime import datetime
from sqlalchemy import func, or_, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.account_repository import AccountRepository
from src.domain.account import Account


class SqlAlchemyAccountRepository(AccountRepository):
    """
    SQLAlchemy implementation of AccountRepository

    Features:
    - Atomic conditional balance update (no read-then-write)
    - Entity reads overwrite identity-map state, since the balance update
      bypasses the ORM
    - Escaped, case-insensitive substring search that never touches the id column
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, account_id: str) -> Optional[Account]:
        stmt = select(Account).where(Account.id == account_id).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[Account]:
        stmt = (
            select(Account)
            .where(func.lower(Account.email) == email.lower())
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def search(self, term: str, limit: int) -> List[Account]:
        """
        Case-insensitive substring match on email, name and phone number

        LIKE wildcards in `term` are escaped so the term is matched literally.
        """
        stmt = (
            select(Account)
            .where(
                or_(
                    Account.email.icontains(term, autoescape=True),
                    Account.name.icontains(term, autoescape=True),
                    Account.phone_number.icontains(term, autoescape=True),
                )
            )
            .order_by(Account.created_at.desc(), Account.id.desc())
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, account: Account) -> Account:
        self.session.add(account)
        await self.session.flush()
        await self.session.refresh(account)
        return account

    async def apply_points_delta(self, account_id: str, delta: int) -> Optional[Tuple[int, int]]:
        """
        UPDATE accounts
           SET points_balance = points_balance + :delta, version = version + 1
         WHERE id = :id AND points_balance + :delta >= 0

        Balance and version are read back inside the same transaction, while
        the row is still locked by the update, so they are exactly the
        post-update values.

        Note:
            Must be called inside a transaction that the caller commits or
            rolls back through the UnitOfWork.
        """
        stmt = (
            update(Account)
            .where(Account.id == account_id)
            .where(Account.points_balance + delta >= 0)
            .values(
                points_balance=Account.points_balance + delta,
                version=Account.version + 1,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return None

        state_stmt = select(Account.points_balance, Account.version).where(Account.id == account_id)
        state_result = await self.session.execute(state_stmt)
        balance, version = state_result.one()
        return balance, version

    async def list_recent(self, limit: int, offset: int = 0) -> Tuple[List[Account], int]:
        count_result = await self.session.execute(select(func.count(Account.id)))
        total = count_result.scalar_one()

        stmt = (
            select(Account)
            .order_by(Account.created_at.desc(), Account.id.desc())
            .limit(limit)
            .offset(offset)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def get_totals(self) -> Tuple[int, int]:
        stmt = select(
            func.count(Account.id),
            func.coalesce(func.sum(Account.points_balance), 0),
        )
        result = await self.session.execute(stmt)
        count, total = result.one()
        return int(count), int(total)
