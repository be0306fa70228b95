"""AwardPoints Use Case

Credits points for a bill paid at a clinic.
"""

from decimal import Decimal
from typing import Optional, Tuple
from libs.result import Result, Error
from src.domain.ledger_entry import EntryKind, LedgerEntry, compute_points_earned
from src.domain.rate_snapshot import RateSnapshot
from . import errors
from .dtos import AwardPointsCommandDTO, LedgerEntryDTO
from .ledger_mutation import LedgerMutation


class AwardPoints(LedgerMutation):
    """
    Use Case: Award points for spend (EARN)

    Business Rules:
    1. bill_amount must be > 0
    2. points = floor(bill_amount * earn_rate) using the current snapshot
    3. Concurrent awards on one account all land (atomic increment)
    4. Idempotency: same (account, idempotency_key) returns the same entry

    A bill small enough to earn zero points is still logged, so the spend
    shows up in the clinic's daily report.
    """

    kind = EntryKind.EARN
    failure_code = errors.AWARD_POINTS_FAILED

    async def execute(self, command: AwardPointsCommandDTO) -> Result[LedgerEntryDTO]:
        """
        Execute point award

        Args:
            command: AwardPointsCommandDTO with account_id, clinic_id, bill_amount

        Returns:
            Result[LedgerEntryDTO]: The EARN entry (with resulting balance) or error

        Errors:
            INVALID_AMOUNT, ACCOUNT_NOT_FOUND, CONFIGURATION_UNAVAILABLE
        """
        return await self._execute(command)

    def _validate(self, command: AwardPointsCommandDTO) -> Optional[Error]:
        if command.bill_amount is None or command.bill_amount <= 0:
            return Error(
                code=errors.INVALID_AMOUNT,
                message="Bill amount must be greater than 0",
                reason=f"bill_amount={command.bill_amount}",
            )
        return None

    def _price(
        self, command: AwardPointsCommandDTO, rates: RateSnapshot
    ) -> Tuple[int, Optional[Decimal], Optional[Decimal]]:
        return compute_points_earned(command.bill_amount, rates.earn_rate), command.bill_amount, None

    def _on_update_refused(self, command: AwardPointsCommandDTO, points: int) -> Error:
        # A credit can only miss the row if the account disappeared
        return self._account_not_found(command)

    def _matches(self, command: AwardPointsCommandDTO, entry: LedgerEntry) -> bool:
        return entry.kind == EntryKind.EARN and entry.bill_amount == command.bill_amount
