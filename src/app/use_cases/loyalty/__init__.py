"""Loyalty ledger use cases"""
from .resolve_account import ResolveAccount, is_account_id
from .open_account import OpenAccount
from .get_balance import GetBalance
from .get_current_rates import GetCurrentRates
from .update_rates import UpdateRates
from .list_rate_history import ListRateHistory
from .award_points import AwardPoints
from .redeem_points import RedeemPoints
from .list_account_history import ListAccountHistory
from .get_daily_clinic_activity import GetDailyClinicActivity
from .get_program_summary import GetProgramSummary
from .reconcile_ledger import ReconcileLedger
from .quote_points import QuoteAward, QuoteRedeem
from .get_clinic_stats import GetClinicStats
from .list_customer_activity import ListCustomerActivity
from .get_account_summary import GetAccountSummary
from .dtos import (
    OpenAccountCommandDTO,
    OpenAccountResponseDTO,
    AccountDTO,
    ResolvedAccountDTO,
    BalanceResponseDTO,
    RateSnapshotDTO,
    UpdateRatesCommandDTO,
    AwardQuoteDTO,
    RedeemQuoteDTO,
    AwardPointsCommandDTO,
    RedeemPointsCommandDTO,
    LedgerEntryDTO,
    AccountHistoryResponseDTO,
    DailyClinicActivityDTO,
    ProgramSummaryDTO,
    ClinicStatsDTO,
    CustomerActivityDTO,
    CustomerActivityPageDTO,
    AccountSummaryDTO,
    LedgerDiscrepancyDTO,
    ReconciliationResultDTO,
)

__all__ = [
    "ResolveAccount",
    "is_account_id",
    "OpenAccount",
    "GetBalance",
    "GetCurrentRates",
    "UpdateRates",
    "ListRateHistory",
    "AwardPoints",
    "RedeemPoints",
    "ListAccountHistory",
    "GetDailyClinicActivity",
    "GetProgramSummary",
    "ReconcileLedger",
    "QuoteAward",
    "QuoteRedeem",
    "GetClinicStats",
    "ListCustomerActivity",
    "GetAccountSummary",
    "OpenAccountCommandDTO",
    "OpenAccountResponseDTO",
    "AccountDTO",
    "ResolvedAccountDTO",
    "BalanceResponseDTO",
    "RateSnapshotDTO",
    "UpdateRatesCommandDTO",
    "AwardQuoteDTO",
    "RedeemQuoteDTO",
    "AwardPointsCommandDTO",
    "RedeemPointsCommandDTO",
    "LedgerEntryDTO",
    "AccountHistoryResponseDTO",
    "DailyClinicActivityDTO",
    "ProgramSummaryDTO",
    "ClinicStatsDTO",
    "CustomerActivityDTO",
    "CustomerActivityPageDTO",
    "AccountSummaryDTO",
    "LedgerDiscrepancyDTO",
    "ReconciliationResultDTO",
]
