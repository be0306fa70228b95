"""SQLAlchemy implementation of LedgerEntryRepository

Provides the activity feed: append-only entry storage with idempotency
enforcement via the unique (account_id, idempotency_key) constraint.
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from sqlalchemy import case, func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.ledger_entry_repository import (
    AccountTotals,
    BalanceCheck,
    ClinicTotals,
    LedgerEntryRepository,
)
from src.domain.account import Account
from src.domain.ledger_entry import LedgerEntry, EntryKind


class SqlAlchemyLedgerEntryRepository(LedgerEntryRepository):
    """
    SQLAlchemy implementation of LedgerEntryRepository

    All reads go through the same session (and therefore the same primary
    connection) as the writes, so a committed append is always visible to
    the caller's next read.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(self, entry: LedgerEntry) -> LedgerEntry:
        """
        Raises:
            IntegrityError: If (account_id, idempotency_key) already exists
        """
        self.session.add(entry)
        await self.session.flush()
        await self.session.refresh(entry)
        return entry

    async def get_by_idempotency_key(self, account_id: str, idempotency_key: str) -> Optional[LedgerEntry]:
        stmt = select(LedgerEntry).where(
            LedgerEntry.account_id == account_id,
            LedgerEntry.idempotency_key == idempotency_key,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, entry_id: str) -> Optional[LedgerEntry]:
        stmt = select(LedgerEntry).where(LedgerEntry.id == entry_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_account(
        self,
        account_id: str,
        since: Optional[datetime] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[LedgerEntry], int]:
        conditions = [LedgerEntry.account_id == account_id]
        if since is not None:
            conditions.append(LedgerEntry.created_at >= since)

        count_stmt = select(func.count(LedgerEntry.id)).where(*conditions)
        count_result = await self.session.execute(count_stmt)
        total = count_result.scalar_one()

        stmt = (
            select(LedgerEntry)
            .where(*conditions)
            .order_by(LedgerEntry.sequence.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def list_by_clinic_between(
        self,
        clinic_id: str,
        start: datetime,
        end: datetime,
        kind: Optional[EntryKind] = None,
    ) -> List[LedgerEntry]:
        stmt = select(LedgerEntry).where(
            LedgerEntry.clinic_id == clinic_id,
            LedgerEntry.created_at >= start,
            LedgerEntry.created_at < end,
        )
        if kind is not None:
            stmt = stmt.where(LedgerEntry.kind == kind)
        stmt = stmt.order_by(LedgerEntry.created_at, LedgerEntry.id)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_totals_by_account(self, account_ids: List[str]) -> Dict[str, AccountTotals]:
        if not account_ids:
            return {}

        is_earn = LedgerEntry.kind == EntryKind.EARN
        stmt = (
            select(
                LedgerEntry.account_id,
                func.sum(case((is_earn, 1), else_=0)),
                func.sum(case((is_earn, 0), else_=1)),
                func.sum(case((is_earn, LedgerEntry.points), else_=0)),
                func.sum(case((is_earn, 0), else_=LedgerEntry.points)),
                func.coalesce(func.sum(LedgerEntry.bill_amount), 0),
                func.coalesce(func.sum(LedgerEntry.cash_value), 0),
            )
            .where(LedgerEntry.account_id.in_(account_ids))
            .group_by(LedgerEntry.account_id)
        )
        rows = (await self.session.execute(stmt)).all()

        last_stmt = (
            select(LedgerEntry.account_id, func.max(LedgerEntry.created_at))
            .where(LedgerEntry.account_id.in_(account_ids), is_earn)
            .group_by(LedgerEntry.account_id)
        )
        last_earned = {account_id: at for account_id, at in (await self.session.execute(last_stmt)).all()}

        return {
            account_id: AccountTotals(
                earn_count=int(earn_count),
                redeem_count=int(redeem_count),
                points_earned=int(points_earned),
                points_redeemed=int(points_redeemed),
                total_spend=Decimal(str(spend)),
                total_cash_value=Decimal(str(cash)),
                last_earned_at=last_earned.get(account_id),
            )
            for account_id, earn_count, redeem_count, points_earned, points_redeemed, spend, cash in rows
        }

    async def get_clinic_totals(self) -> List[ClinicTotals]:
        is_earn = LedgerEntry.kind == EntryKind.EARN
        stmt = select(
            LedgerEntry.clinic_id,
            func.sum(case((is_earn, 1), else_=0)),
            func.sum(case((is_earn, 0), else_=1)),
            func.sum(case((is_earn, LedgerEntry.points), else_=0)),
            func.sum(case((is_earn, 0), else_=LedgerEntry.points)),
            func.coalesce(func.sum(LedgerEntry.bill_amount), 0),
            func.coalesce(func.sum(LedgerEntry.cash_value), 0),
        ).group_by(LedgerEntry.clinic_id)
        result = await self.session.execute(stmt)

        return [
            ClinicTotals(
                clinic_id=clinic_id,
                earn_count=int(earn_count),
                redeem_count=int(redeem_count),
                points_awarded=int(points_awarded),
                points_redeemed=int(points_redeemed),
                bill_total=Decimal(str(bill_total)),
                cash_value_total=Decimal(str(cash_total)),
            )
            for clinic_id, earn_count, redeem_count, points_awarded, points_redeemed, bill_total, cash_total
            in result.all()
        ]

    async def get_balance_checks(self) -> List[BalanceCheck]:
        signed_points = case(
            (LedgerEntry.kind == EntryKind.EARN, LedgerEntry.points),
            else_=-LedgerEntry.points,
        )
        sums = (
            select(
                LedgerEntry.account_id.label("account_id"),
                func.sum(signed_points).label("entries_sum"),
            )
            .group_by(LedgerEntry.account_id)
            .subquery()
        )
        stmt = (
            select(Account.id, Account.points_balance, func.coalesce(sums.c.entries_sum, 0))
            .select_from(Account)
            .outerjoin(sums, sums.c.account_id == Account.id)
            .order_by(Account.created_at, Account.id)
        )
        result = await self.session.execute(stmt)

        return [
            BalanceCheck(account_id=account_id, stored_balance=int(balance), entries_sum=int(entries_sum))
            for account_id, balance, entries_sum in result.all()
        ]

    async def get_kind_totals(self) -> Dict[EntryKind, Tuple[int, Decimal]]:
        stmt = select(
            LedgerEntry.kind,
            func.count(LedgerEntry.id),
            func.coalesce(func.sum(LedgerEntry.bill_amount), 0),
            func.coalesce(func.sum(LedgerEntry.cash_value), 0),
        ).group_by(LedgerEntry.kind)
        result = await self.session.execute(stmt)

        totals: Dict[EntryKind, Tuple[int, Decimal]] = {
            EntryKind.EARN: (0, Decimal("0")),
            EntryKind.REDEEM: (0, Decimal("0")),
        }
        for kind, count, bill_total, cash_total in result.all():
            kind = EntryKind(kind)
            amount = bill_total if kind == EntryKind.EARN else cash_total
            totals[kind] = (int(count), Decimal(str(amount)))
        return totals
