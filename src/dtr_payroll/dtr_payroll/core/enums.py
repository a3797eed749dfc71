from __future__ import annotations

from enum import Enum


class DTRStatus(str, Enum):
    """Attendance status stored on a time record."""

    PRESENT = "Present"
    ABSENT = "Absent"
    LATE = "Late"
    HALF_DAY = "Half Day"
    ON_LEAVE = "On Leave"

    @property
    def requires_punches(self) -> bool:
        return self in (DTRStatus.PRESENT, DTRStatus.LATE, DTRStatus.HALF_DAY)


class PayrollStatus(str, Enum):
    """Lifecycle of a payroll line item."""

    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"
