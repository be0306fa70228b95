"""Error codes returned by loyalty use cases

Every code here is an expected outcome of normal operation. Callers map
them to user-facing messages; `reason` is diagnostic only and is never
shown to staff or customers.
"""

INVALID_AMOUNT = "INVALID_AMOUNT"
INVALID_RATE = "INVALID_RATE"
ACCOUNT_NOT_FOUND = "ACCOUNT_NOT_FOUND"
AMBIGUOUS_MATCH = "AMBIGUOUS_MATCH"
INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
CONFIGURATION_UNAVAILABLE = "CONFIGURATION_UNAVAILABLE"
RATE_UPDATE_CONFLICT = "RATE_UPDATE_CONFLICT"

# Unexpected failures, always after a rollback
AWARD_POINTS_FAILED = "AWARD_POINTS_FAILED"
REDEEM_POINTS_FAILED = "REDEEM_POINTS_FAILED"
RATE_UPDATE_FAILED = "RATE_UPDATE_FAILED"
OPEN_ACCOUNT_FAILED = "OPEN_ACCOUNT_FAILED"
RESOLVE_ACCOUNT_FAILED = "RESOLVE_ACCOUNT_FAILED"
RECONCILIATION_FAILED = "RECONCILIATION_FAILED"

# Reads: *_UNAVAILABLE after a failed retry, *_FAILED for anything else
HISTORY_UNAVAILABLE = "HISTORY_UNAVAILABLE"
REPORT_UNAVAILABLE = "REPORT_UNAVAILABLE"
GET_BALANCE_FAILED = "GET_BALANCE_FAILED"
LIST_HISTORY_FAILED = "LIST_HISTORY_FAILED"
LIST_RATE_HISTORY_FAILED = "LIST_RATE_HISTORY_FAILED"
QUOTE_FAILED = "QUOTE_FAILED"
REPORT_FAILED = "REPORT_FAILED"

# Caller identity, raised by the HTTP layer
UNAUTHENTICATED = "UNAUTHENTICATED"
FORBIDDEN = "FORBIDDEN"
CLINIC_REQUIRED = "CLINIC_REQUIRED"
VALIDATION_ERROR = "VALIDATION_ERROR"

# Retrying later may succeed
TRANSIENT_CODES = frozenset({
    CONFIGURATION_UNAVAILABLE,
    HISTORY_UNAVAILABLE,
    REPORT_UNAVAILABLE,
    RATE_UPDATE_CONFLICT,
})
