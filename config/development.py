import os
from decimal import Decimal

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "dtr_payroll"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Flat tax placeholder applied to gross pay
TAX_RATE = Decimal(os.getenv("TAX_RATE", "0.10"))
# Replays of a settlement transaction after a deadlock/lock wait timeout
SETTLEMENT_RETRIES = int(os.getenv("SETTLEMENT_RETRIES", "3"))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
