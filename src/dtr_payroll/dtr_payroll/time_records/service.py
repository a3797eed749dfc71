from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence, Union

from ..common.datetime_utils import Clock, SystemClock, parse_iso_date, parse_punch, pay_period_bounds
from ..common.validators import optional_text, require_int, require_non_empty
from ..core.enums import DTRStatus
from ..core.exceptions import NotFound, RecordLocked, ValidationError
from ..employees.directory import EmployeeDirectory
from .calculator import derive_hours, inspect_punches
from .model import Punches, SavedTimeRecord, TimeRecord, TimeRecordDraft
from .repository import TimeRecordRepository

logger = logging.getLogger(__name__)

PUNCH_FIELDS = ("time_in", "time_out", "lunch_start", "lunch_end", "overtime_start", "overtime_end")


@dataclass(frozen=True)
class TimeRecordInput:
    """Raw write request as received at the boundary (strings or native values)."""

    employee_id: object
    record_date: Union[str, date, None]
    status: Optional[str]
    time_in: Optional[str] = None
    time_out: Optional[str] = None
    lunch_start: Optional[str] = None
    lunch_end: Optional[str] = None
    overtime_start: Optional[str] = None
    overtime_end: Optional[str] = None
    leave_type: Optional[str] = None
    remarks: Optional[str] = None
    record_id: Optional[int] = None


class TimeRecordService:
    """Use cases: write, read and delete time records.

    Hours are recomputed from the punches on every write, before persistence.
    Paid records are immutable and raise ``RecordLocked``.
    """

    def __init__(
        self,
        records: TimeRecordRepository,
        employees: EmployeeDirectory,
        *,
        clock: Optional[Clock] = None,
    ):
        self._records = records
        self._employees = employees
        self._clock = clock or SystemClock()

    def _parse_status(self, value: Optional[str]) -> DTRStatus:
        raw = require_non_empty(value, "status")
        try:
            return DTRStatus(raw)
        except ValueError:
            allowed = ", ".join(s.value for s in DTRStatus)
            raise ValidationError(f"status must be one of: {allowed}")

    def _parse_date(self, value: Union[str, date, None]) -> date:
        if isinstance(value, date):
            return value
        raw = require_non_empty(value, "date")
        try:
            return parse_iso_date(raw)
        except ValueError:
            raise ValidationError("date must be a date (YYYY-MM-DD)")

    def build_draft(self, data: TimeRecordInput) -> TimeRecordDraft:
        employee_id = require_int(data.employee_id, "employee_id")
        record_date = self._parse_date(data.record_date)
        status = self._parse_status(data.status)

        parsed = {name: parse_punch(getattr(data, name), on=record_date, field_name=name) for name in PUNCH_FIELDS}
        punches = Punches(**parsed)

        if status.requires_punches:
            if not punches.time_in:
                raise ValidationError(f"time_in is required when status is {status.value}")
            if not punches.time_out:
                raise ValidationError(f"time_out is required when status is {status.value}")

        leave_type = optional_text(data.leave_type)
        if status == DTRStatus.ON_LEAVE and not leave_type:
            raise ValidationError("leave_type is required when status is On Leave")

        if not self._employees.employee_exists(employee_id):
            raise ValidationError(f"employee_id {employee_id} does not exist")

        hours_worked, overtime_hours = derive_hours(punches)
        return TimeRecordDraft(
            employee_id=employee_id,
            record_date=record_date,
            punches=punches,
            status=status,
            leave_type=leave_type,
            remarks=optional_text(data.remarks),
            hours_worked=hours_worked,
            overtime_hours=overtime_hours,
        )

    def save(self, data: TimeRecordInput) -> SavedTimeRecord:
        draft = self.build_draft(data)
        warnings = inspect_punches(draft.punches, draft.hours_worked, draft.overtime_hours)
        if warnings:
            logger.warning(
                "Time record for employee %s on %s saved with data quality warnings: %s",
                draft.employee_id,
                draft.record_date.isoformat(),
                ", ".join(w.code for w in warnings),
            )

        if data.record_id is not None:
            existing = self._records.get_by_id(int(data.record_id))
            if not existing:
                raise NotFound(f"Time record #{data.record_id} not found")
            clash = self._records.get_for_employee_and_date(draft.employee_id, draft.record_date)
            if clash and clash.record_id != existing.record_id:
                raise ValidationError("A time record already exists for this employee on this date")
        else:
            existing = self._records.get_for_employee_and_date(draft.employee_id, draft.record_date)

        if existing is None:
            record_id = self._records.create(draft)
            logger.info("Created time record #%s for employee %s on %s", record_id, draft.employee_id, draft.record_date)
            return SavedTimeRecord(record=self._reload(record_id), created=True, warnings=warnings)

        if existing.is_paid:
            raise RecordLocked(existing.record_id)

        if not self._records.update_unpaid(existing.record_id, draft):
            # Lost a race with settlement (or a delete) between read and write.
            current = self._records.get_by_id(existing.record_id)
            if current and current.is_paid:
                raise RecordLocked(existing.record_id)
            raise NotFound(f"Time record #{existing.record_id} not found")

        logger.info("Updated time record #%s", existing.record_id)
        return SavedTimeRecord(record=self._reload(existing.record_id), created=False, warnings=warnings)

    def _reload(self, record_id: int) -> TimeRecord:
        record = self._records.get_by_id(record_id)
        if not record:
            raise NotFound(f"Time record #{record_id} not found")
        return record

    def get(self, record_id: int) -> TimeRecord:
        return self._reload(int(record_id))

    def list_records(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        employee_id: Optional[int] = None,
        status: Optional[str] = None,
        is_paid: Optional[bool] = None,
    ) -> Sequence[TimeRecord]:
        """List records; missing bounds default to the current semi-monthly pay period."""

        default_start, default_end = pay_period_bounds(self._clock.today())
        start = start_date or default_start
        end = end_date or default_end
        if end < start:
            raise ValidationError("end_date must not be earlier than start_date")

        return self._records.list_records(
            start_date=start,
            end_date=end,
            employee_id=employee_id,
            status=self._parse_status(status) if status else None,
            is_paid=is_paid,
        )

    def list_for_payroll(self, payroll_id: int) -> Sequence[TimeRecord]:
        return self._records.list_by_payroll(int(payroll_id))

    def delete(self, record_id: int) -> None:
        record = self._reload(int(record_id))
        if record.is_paid:
            raise RecordLocked(record.record_id)
        if not self._records.delete_unpaid(record.record_id):
            if self._records.get_by_id(record.record_id) is None:
                raise NotFound(f"Time record #{record.record_id} not found")
            raise RecordLocked(record.record_id)
        logger.info("Deleted time record #%s", record.record_id)

    def warnings_for(self, record: TimeRecord):
        return inspect_punches(record.punches, record.hours_worked, record.overtime_hours)
