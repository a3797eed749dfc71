"""Pure hours computation for time records.

These functions do no I/O and are called synchronously on every write that
touches punches, before the record is persisted.
"""

from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from .model import DataQualityWarning, Punches

_CENT = Decimal("0.01")
_MINUTES_PER_HOUR = Decimal(60)


def _whole_minutes(start: datetime, end: datetime) -> int:
    # Partial minutes are dropped (toward zero), so negative spans stay negative.
    return int((end - start).total_seconds() / 60)


def _to_hours(minutes: int) -> float:
    return float((Decimal(minutes) / _MINUTES_PER_HOUR).quantize(_CENT, rounding=ROUND_HALF_UP))


def compute_hours_worked(
    time_in: Optional[datetime],
    time_out: Optional[datetime],
    lunch_start: Optional[datetime] = None,
    lunch_end: Optional[datetime] = None,
) -> float:
    """Hours between time in and time out, minus lunch when both lunch punches exist.

    Returns 0 when either main punch is missing. The result is not validated:
    a time out before time in yields negative hours.
    """

    if not time_in or not time_out:
        return 0.0

    minutes = _whole_minutes(time_in, time_out)
    if lunch_start and lunch_end:
        minutes -= _whole_minutes(lunch_start, lunch_end)
    return _to_hours(minutes)


def compute_overtime_hours(overtime_start: Optional[datetime], overtime_end: Optional[datetime]) -> float:
    """Overtime span in hours, 0 if either endpoint is missing. Not capped."""

    if not overtime_start or not overtime_end:
        return 0.0
    return _to_hours(_whole_minutes(overtime_start, overtime_end))


def derive_hours(punches: Punches) -> tuple[float, float]:
    hours = compute_hours_worked(punches.time_in, punches.time_out, punches.lunch_start, punches.lunch_end)
    overtime = compute_overtime_hours(punches.overtime_start, punches.overtime_end)
    return hours, overtime


def inspect_punches(punches: Punches, hours_worked: float, overtime_hours: float) -> list[DataQualityWarning]:
    warnings: list[DataQualityWarning] = []

    def _reversed(start: Optional[datetime], end: Optional[datetime]) -> bool:
        return bool(start and end and end < start)

    if _reversed(punches.time_in, punches.time_out):
        warnings.append(DataQualityWarning("time_out_before_time_in", "Time out is earlier than time in"))
    if _reversed(punches.lunch_start, punches.lunch_end):
        warnings.append(DataQualityWarning("lunch_end_before_lunch_start", "Lunch end is earlier than lunch start"))
    if _reversed(punches.overtime_start, punches.overtime_end):
        warnings.append(
            DataQualityWarning("overtime_end_before_overtime_start", "Overtime end is earlier than overtime start")
        )
    if hours_worked < 0:
        warnings.append(DataQualityWarning("negative_hours_worked", f"Hours worked is negative ({hours_worked:.2f})"))
    if overtime_hours < 0:
        warnings.append(
            DataQualityWarning("negative_overtime_hours", f"Overtime hours is negative ({overtime_hours:.2f})")
        )
    return warnings
