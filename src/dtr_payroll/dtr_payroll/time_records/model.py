from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import DTRStatus


@dataclass(frozen=True)
class Punches:
    """The six optional timestamps captured for one attendance day."""

    time_in: Optional[datetime] = None
    time_out: Optional[datetime] = None
    lunch_start: Optional[datetime] = None
    lunch_end: Optional[datetime] = None
    overtime_start: Optional[datetime] = None
    overtime_end: Optional[datetime] = None


@dataclass(frozen=True)
class DataQualityWarning:
    """A suspicious but persisted value; surfaced to operators, never clamped."""

    code: str
    message: str


@dataclass(frozen=True)
class TimeRecord:
    """Domain entity: one employee's attendance entry (DTR) for one date.

    ``employee_id`` is None for unattached records (e.g. after orphan repair).
    ``hours_worked``/``overtime_hours`` are derived from ``punches`` on every write.
    ``pay_period``/``payroll_id`` are stamped when a payroll run settles the record;
    a manual mark-as-paid leaves them empty.
    """

    record_id: int
    employee_id: Optional[int]
    record_date: date
    punches: Punches
    status: DTRStatus
    leave_type: Optional[str] = None
    remarks: Optional[str] = None
    hours_worked: float = 0.0
    overtime_hours: float = 0.0
    is_paid: bool = False
    pay_period: Optional[date] = None
    payroll_id: Optional[int] = None


@dataclass(frozen=True)
class TimeRecordDraft:
    """Validated write model with derived hours already computed."""

    employee_id: int
    record_date: date
    punches: Punches
    status: DTRStatus
    leave_type: Optional[str]
    remarks: Optional[str]
    hours_worked: float
    overtime_hours: float


@dataclass(frozen=True)
class SavedTimeRecord:
    record: TimeRecord
    created: bool
    warnings: list[DataQualityWarning] = field(default_factory=list)


@dataclass(frozen=True)
class TimeRecordReportRow:
    """Read-model for exports: a record plus the employee name, if it resolves."""

    record: TimeRecord
    full_name: Optional[str]

    @property
    def is_orphaned(self) -> bool:
        return self.record.employee_id is not None and self.full_name is None
