"""Ledger engine core shared by AwardPoints and RedeemPoints

Each operation moves REQUESTED -> VALIDATED -> APPLIED -> LOGGED, or ends
REQUESTED -> REJECTED. The balance update and the entry append happen in
one transaction: callers see either both or neither.
"""

import logging
from decimal import Decimal
from typing import Optional, Tuple
from libs.result import Result, Return, Error
from sqlalchemy.exc import IntegrityError
from src.app.repositories.account_repository import AccountRepository
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from src.app.repositories.rate_snapshot_repository import RateSnapshotRepository
from src.app.services.unit_of_work import UnitOfWork
from src.domain.ledger_entry import EntryKind, LedgerEntry, OperationState
from src.domain.rate_snapshot import RateSnapshot
from . import errors
from .dtos import LedgerEntryDTO
from .get_current_rates import GetCurrentRates

logger = logging.getLogger(__name__)


class LedgerMutation:
    """
    Base use case for a single balance mutation

    Subclasses define the entry kind and how the command is validated and
    priced; the concurrency handling lives here:

    - Idempotency: a known (account_id, idempotency_key) returns the
      original entry. A concurrent duplicate loses on the unique constraint,
      is rolled back, and also returns the winner's entry.
    - No lost updates: the balance changes through one conditional UPDATE
      (apply_points_delta), never read-then-write.
    - No overdraft: the same UPDATE only matches while the resulting
      balance stays >= 0, so sufficiency is re-checked at commit time.
    """

    kind: EntryKind
    failure_code: str

    def __init__(
        self,
        uow: UnitOfWork,
        account_repo: AccountRepository,
        entry_repo: LedgerEntryRepository,
        rate_repo: RateSnapshotRepository,
        read_backoff_seconds: float = 0.2,
    ):
        self.uow = uow
        self.account_repo = account_repo
        self.entry_repo = entry_repo
        self.rate_repo = rate_repo
        self.read_backoff_seconds = read_backoff_seconds

    def _validate(self, command) -> Optional[Error]:
        raise NotImplementedError

    def _price(self, command, rates: RateSnapshot) -> Tuple[int, Optional[Decimal], Optional[Decimal]]:
        """Returns (points, bill_amount, cash_value) for the entry"""
        raise NotImplementedError

    def _check_balance(self, command, balance: int, points: int) -> Optional[Error]:
        return None

    def _on_update_refused(self, command, points: int) -> Error:
        """Error when the conditional balance update matched no row"""
        raise NotImplementedError

    def _matches(self, command, entry: LedgerEntry) -> bool:
        raise NotImplementedError

    async def _execute(self, command) -> Result[LedgerEntryDTO]:
        state = OperationState.REQUESTED

        rejection = self._validate(command)
        if rejection:
            return self._reject(command, rejection)

        try:
            if command.idempotency_key:
                existing = await self.entry_repo.get_by_idempotency_key(
                    command.account_id, command.idempotency_key
                )
                if existing:
                    return self._replay(command, existing)

            account = await self.account_repo.get_by_id(command.account_id)
            if not account:
                return self._reject(command, self._account_not_found(command))
            balance_seen = account.points_balance

            rates_result = await GetCurrentRates(
                self.rate_repo, self.uow, self.read_backoff_seconds
            ).snapshot()
            if rates_result.is_err():
                await self.uow.rollback()
                return self._reject(command, rates_result.error)
            rates = rates_result.value
            rate_version, earn_rate, redeem_rate = rates.version, rates.earn_rate, rates.redeem_rate

            points, bill_amount, cash_value = self._price(command, rates)
            rejection = self._check_balance(command, balance_seen, points)
            if rejection:
                await self.uow.rollback()
                return self._reject(command, rejection)
            state = OperationState.VALIDATED

            delta = points if self.kind == EntryKind.EARN else -points
            applied = await self.account_repo.apply_points_delta(command.account_id, delta)
            if applied is None:
                await self.uow.rollback()
                return self._reject(command, self._on_update_refused(command, points))
            balance_after, sequence = applied
            state = OperationState.APPLIED

            entry = LedgerEntry(
                account_id=command.account_id,
                clinic_id=command.clinic_id,
                kind=self.kind,
                points=points,
                bill_amount=bill_amount,
                cash_value=cash_value,
                rate_version=rate_version,
                earn_rate=earn_rate,
                redeem_rate=redeem_rate,
                balance_before=balance_after - delta,
                balance_after=balance_after,
                sequence=sequence,
                idempotency_key=command.idempotency_key,
            )
            created = await self.entry_repo.append(entry)
            await self.uow.commit()
            state = OperationState.LOGGED

            logger.info(
                f"{self.kind.value} {points} points on account {command.account_id} "
                f"at clinic {command.clinic_id}: balance {balance_after - delta} -> {balance_after} "
                f"(rate v{rate_version})"
            )
            return Return.ok(LedgerEntryDTO.from_entry(created))

        except IntegrityError as e:
            await self.uow.rollback()
            if command.idempotency_key:
                existing = await self.entry_repo.get_by_idempotency_key(
                    command.account_id, command.idempotency_key
                )
                if existing:
                    return self._replay(command, existing)
            logger.error(f"{self.kind.value} on account {command.account_id} violated a constraint in state {state.value}: {e}")
            return self._failure(e)

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"{self.kind.value} on account {command.account_id} failed in state {state.value}: {e}")
            return self._failure(e)

    def _replay(self, command, entry: LedgerEntry) -> Result[LedgerEntryDTO]:
        if not self._matches(command, entry):
            logger.warning(
                f"Idempotency key {command.idempotency_key!r} reused with different parameters "
                f"on account {command.account_id}; returning original entry {entry.id}"
            )
        return Return.ok(LedgerEntryDTO.from_entry(entry, replayed=True))

    def _reject(self, command, error: Error) -> Result[LedgerEntryDTO]:
        logger.info(
            f"{self.kind.value} on account {command.account_id} {OperationState.REJECTED.value}: {error.code}"
        )
        return Return.err(error)

    def _account_not_found(self, command) -> Error:
        return Error(
            code=errors.ACCOUNT_NOT_FOUND,
            message="Customer not found",
            reason=f"account_id={command.account_id}",
        )

    def _failure(self, e: Exception) -> Result[LedgerEntryDTO]:
        return Return.err(
            Error(
                code=self.failure_code,
                message=f"Failed to {self.kind.value} points",
                reason=str(e),
            )
        )
