"""RedeemPoints Use Case

Debits points in exchange for a cash-value discount.
"""

from decimal import Decimal
from typing import Optional, Tuple
from libs.result import Result, Error
from src.domain.ledger_entry import EntryKind, LedgerEntry, compute_cash_value
from src.domain.rate_snapshot import RateSnapshot
from . import errors
from .dtos import RedeemPointsCommandDTO, LedgerEntryDTO
from .ledger_mutation import LedgerMutation


class RedeemPoints(LedgerMutation):
    """
    Use Case: Redeem points (REDEEM)

    Business Rules:
    1. points must be > 0
    2. points <= authoritative balance, checked on read AND at commit
    3. cash_value = points * redeem_rate using the current snapshot
    4. Of concurrent redemptions that together overdraw the account, the
       losers get INSUFFICIENT_BALANCE; the balance never goes negative
    5. Idempotency: same (account, idempotency_key) returns the same entry
    """

    kind = EntryKind.REDEEM
    failure_code = errors.REDEEM_POINTS_FAILED

    async def execute(self, command: RedeemPointsCommandDTO) -> Result[LedgerEntryDTO]:
        """
        Execute point redemption

        Args:
            command: RedeemPointsCommandDTO with account_id, clinic_id, points

        Returns:
            Result[LedgerEntryDTO]: The REDEEM entry (with resulting balance) or error

        Errors:
            INVALID_AMOUNT, ACCOUNT_NOT_FOUND, INSUFFICIENT_BALANCE,
            CONFIGURATION_UNAVAILABLE
        """
        return await self._execute(command)

    def _validate(self, command: RedeemPointsCommandDTO) -> Optional[Error]:
        if command.points is None or command.points <= 0:
            return Error(
                code=errors.INVALID_AMOUNT,
                message="Points to redeem must be greater than 0",
                reason=f"points={command.points}",
            )
        return None

    def _price(
        self, command: RedeemPointsCommandDTO, rates: RateSnapshot
    ) -> Tuple[int, Optional[Decimal], Optional[Decimal]]:
        return command.points, None, compute_cash_value(command.points, rates.redeem_rate)

    def _check_balance(self, command: RedeemPointsCommandDTO, balance: int, points: int) -> Optional[Error]:
        if points > balance:
            return Error(
                code=errors.INSUFFICIENT_BALANCE,
                message=f"Insufficient points. Requested: {points}, Available: {balance}",
                reason=f"balance={balance}, requested={points}",
            )
        return None

    def _on_update_refused(self, command: RedeemPointsCommandDTO, points: int) -> Error:
        return Error(
            code=errors.INSUFFICIENT_BALANCE,
            message=f"Insufficient points. Requested: {points}",
            reason="balance changed by a concurrent operation before commit",
        )

    def _matches(self, command: RedeemPointsCommandDTO, entry: LedgerEntry) -> bool:
        return entry.kind == EntryKind.REDEEM and entry.points == command.points
