import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./loyalty.db")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    API_RELOAD = bool(data.get("API_RELOAD", False))
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    AUTH_DISABLED = bool(data.get("AUTH_DISABLED", False))
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))
    AUTO_CREATE_TABLES = bool(data.get("AUTO_CREATE_TABLES", True))

    # Upper bound on waiting for a locked account row / database write lock
    DB_LOCK_TIMEOUT_SECONDS = data.get("DB_LOCK_TIMEOUT_SECONDS", 10)

    # Idempotent reads (rates, history, reports) retry once after this delay
    READ_RETRY_BACKOFF_SECONDS = data.get("READ_RETRY_BACKOFF_SECONDS", 0.2)

    # Rate updates: attempts at claiming the next snapshot version
    RATE_UPDATE_MAX_ATTEMPTS = data.get("RATE_UPDATE_MAX_ATTEMPTS", 3)

    # Account resolution: "most_recent" picks the newest match, "strict" reports AMBIGUOUS_MATCH
    RESOLVER_TIE_BREAK = data.get("RESOLVER_TIE_BREAK", "most_recent")
    RESOLVER_SEARCH_LIMIT = data.get("RESOLVER_SEARCH_LIMIT", 25)

    HISTORY_PAGE_SIZE = data.get("HISTORY_PAGE_SIZE", 20)

    # Ledger Reconciliation
    RECONCILIATION_ENABLED = bool(data.get("RECONCILIATION_ENABLED", True))
    RECONCILIATION_INTERVAL_SECONDS = data.get("RECONCILIATION_INTERVAL_SECONDS", 86400)  # Daily
