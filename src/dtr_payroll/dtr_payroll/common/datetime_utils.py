from __future__ import annotations

import calendar
from datetime import date, datetime
from typing import Optional, Protocol

from ..core.constants import FIRST_HALF_LAST_DAY
from ..core.exceptions import ValidationError


class Clock(Protocol):
    def today(self) -> date:
        raise NotImplementedError

    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock:
    """Clock backed by the local wall time."""

    def today(self) -> date:
        return now_local().date()

    def now(self) -> datetime:
        return now_local()


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_optional_date(value: Optional[str], field_name: str) -> Optional[date]:
    v = (value or "").strip()
    if not v:
        return None
    try:
        return parse_iso_date(v)
    except ValueError:
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")


def parse_punch(value: Optional[str], *, on: date, field_name: str) -> Optional[datetime]:
    """Parse a punch given either as HH:MM[:SS] or as an ISO datetime.

    Bare times are anchored to the record date; ISO datetimes must fall on it.
    Datetimes carrying a UTC offset are converted to server local time first.
    """

    v = (value or "").strip()
    if not v:
        return None

    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.combine(on, datetime.strptime(v, fmt).time())
        except ValueError:
            continue

    try:
        parsed = datetime.fromisoformat(v)
    except ValueError:
        raise ValidationError(f"{field_name} must be HH:MM or an ISO datetime")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    if parsed.date() != on:
        raise ValidationError(f"{field_name} must fall on {on.isoformat()}")
    return parsed


def pay_period_bounds(day: date) -> tuple[date, date]:
    """Semi-monthly pay period containing ``day`` (1-15, 16-end of month)."""

    if day.day <= FIRST_HALF_LAST_DAY:
        return day.replace(day=1), day.replace(day=FIRST_HALF_LAST_DAY)
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=FIRST_HALF_LAST_DAY + 1), day.replace(day=last)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
