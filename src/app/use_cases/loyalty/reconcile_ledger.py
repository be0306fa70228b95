"""ReconcileLedger Use Case

Reconciles account balances against their ledger entries to detect discrepancies.
"""

import logging
import time
from datetime import datetime
from libs.result import Result, Return, Error
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from . import errors
from .dtos import LedgerDiscrepancyDTO, ReconciliationResultDTO

logger = logging.getLogger(__name__)


class ReconcileLedger:
    """
    Use Case: Reconcile account balances against ledger entries

    Business Rules:
    1. For each account, expected balance = sum(EARN points) - sum(REDEEM points)
    2. Any account whose points_balance differs is reported
    3. Balances and sums are read together in one statement, so a mutation
       committing mid-run cannot show up as a false discrepancy
    4. Read-only: nothing is corrected automatically
    """

    def __init__(self, entry_repo: LedgerEntryRepository):
        self.entry_repo = entry_repo

    async def execute(self) -> Result[ReconciliationResultDTO]:
        """
        Execute ledger reconciliation

        Returns:
            Result[ReconciliationResultDTO]: Reconciliation result with any discrepancies
        """
        start_time = time.time()
        reconciliation_time = datetime.utcnow()

        try:
            logger.info("Starting loyalty ledger reconciliation")

            checks = await self.entry_repo.get_balance_checks()
            total_accounts = len(checks)

            discrepancies: list[LedgerDiscrepancyDTO] = []

            for check in checks:
                if check.stored_balance != check.entries_sum:
                    discrepancy = LedgerDiscrepancyDTO(
                        account_id=check.account_id,
                        ledger_balance=check.stored_balance,
                        calculated_balance=check.entries_sum,
                        discrepancy=check.stored_balance - check.entries_sum,
                    )
                    discrepancies.append(discrepancy)

                    logger.warning(
                        f"Discrepancy found for account {check.account_id}: "
                        f"balance={check.stored_balance}, "
                        f"entries_sum={check.entries_sum}, "
                        f"discrepancy={discrepancy.discrepancy}"
                    )

            execution_time_ms = int((time.time() - start_time) * 1000)

            response = ReconciliationResultDTO(
                total_accounts_checked=total_accounts,
                discrepancies_found=len(discrepancies),
                discrepancies=discrepancies,
                reconciliation_time=reconciliation_time,
                execution_time_ms=execution_time_ms,
            )

            if discrepancies:
                logger.warning(
                    f"Reconciliation complete. Found {len(discrepancies)} discrepancies "
                    f"out of {total_accounts} accounts in {execution_time_ms}ms"
                )
            else:
                logger.info(
                    f"Reconciliation complete. All {total_accounts} accounts balanced "
                    f"in {execution_time_ms}ms"
                )

            return Return.ok(response)

        except Exception as e:
            logger.error(f"Ledger reconciliation failed: {e}")
            return Return.err(
                Error(
                    code=errors.RECONCILIATION_FAILED,
                    message="Failed to reconcile loyalty ledger",
                    reason=str(e),
                )
            )
