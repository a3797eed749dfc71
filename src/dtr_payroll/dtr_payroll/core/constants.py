"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_TAX_RATE = Decimal("0.10")
DEFAULT_PAYMENT_METHOD = "bank_transfer"
DEFAULT_SETTLEMENT_RETRIES = 3

# Monthly salary is converted to an hourly rate assuming 160 working hours.
HOURS_PER_MONTH = Decimal("160")
OVERTIME_MULTIPLIER = Decimal("1.5")

# Semi-monthly pay periods: 1-15 and 16-end of month.
FIRST_HALF_LAST_DAY = 15

# Largest value a DECIMAL(12, 2) money column can hold.
MAX_AMOUNT = Decimal("9999999999.99")
