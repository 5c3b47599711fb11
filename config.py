import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file)
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./commerce.db")
    DB_ECHO = bool(data.get("DB_ECHO", False))
    LOCK_TIMEOUT_MS = int(data.get("LOCK_TIMEOUT_MS", 5000))  # Row lock wait before StoreBusyError
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    API_RELOAD = bool(data.get("API_RELOAD", False))
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))
    AUTO_CREATE_TABLES = bool(data.get("AUTO_CREATE_TABLES", True))  # create_all on startup (local sqlite)

    # Credit accounting
    DEFAULT_ACTION_COST = int(data.get("DEFAULT_ACTION_COST", 1))  # Cost of unconfigured action keys
    FREE_TIER_MONTHLY_CREDITS = int(data.get("FREE_TIER_MONTHLY_CREDITS", 10000))
    FREE_GRANT_INTERVAL_DAYS = int(data.get("FREE_GRANT_INTERVAL_DAYS", 30))
    TRIAL_DAYS = int(data.get("TRIAL_DAYS", 14))

    # Point of sale
    TRANSACTION_NUMBER_PREFIX = data.get("TRANSACTION_NUMBER_PREFIX", "POS")
    TRANSACTION_NUMBER_MAX_ATTEMPTS = int(data.get("TRANSACTION_NUMBER_MAX_ATTEMPTS", 5))
    LOW_STOCK_CRITICAL_RATIO = float(data.get("LOW_STOCK_CRITICAL_RATIO", 0.25))
    LOYALTY_POINTS_PER_UNIT = float(data.get("LOYALTY_POINTS_PER_UNIT", 1.0))  # Points per currency unit

    # Platform fee on confirmed sales
    PLATFORM_FEE_PERCENT = float(data.get("PLATFORM_FEE_PERCENT", 2.0))

    # Free credit replenishment worker
    REPLENISH_ENABLED = bool(data.get("REPLENISH_ENABLED", True))
    REPLENISH_INTERVAL_SECONDS = data.get("REPLENISH_INTERVAL_SECONDS", 3600)

    # Ledger reconciliation worker
    RECONCILIATION_ENABLED = bool(data.get("RECONCILIATION_ENABLED", True))
    RECONCILIATION_INTERVAL_SECONDS = data.get("RECONCILIATION_INTERVAL_SECONDS", 86400)  # Daily
    RECONCILIATION_REPAIR = bool(data.get("RECONCILIATION_REPAIR", False))
