import os
from decimal import Decimal

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "dtr_payroll_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

TAX_RATE = Decimal("0.10")
SETTLEMENT_RETRIES = 1

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
