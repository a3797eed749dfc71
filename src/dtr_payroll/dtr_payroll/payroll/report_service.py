from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import DTRStatus, PayrollStatus
from ..core.exceptions import ValidationError
from ..time_records.calculator import inspect_punches
from ..time_records.repository import TimeRecordRepository
from .model import PayrollReport
from .repository import PayrollRepository

logger = logging.getLogger(__name__)

_DAY_COUNTERS = {
    DTRStatus.PRESENT: "days_present",
    DTRStatus.ABSENT: "days_absent",
    DTRStatus.LATE: "days_late",
    DTRStatus.HALF_DAY: "days_half_day",
    DTRStatus.ON_LEAVE: "days_on_leave",
}

MONEY_COLUMNS = ("basic_salary", "overtime_pay", "allowances", "deductions", "tax", "net_salary")


@dataclass(frozen=True)
class AttendanceExport:
    rows: list[dict]
    summary: list[dict]
    orphaned_count: int
    unattached_count: int


class PayrollReportService:
    """Read-only reports: attendance export for payroll prep and payroll totals."""

    def __init__(self, records: TimeRecordRepository, payrolls: PayrollRepository):
        self._records = records
        self._payrolls = payrolls

    def build_attendance_export(
        self,
        *,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
    ) -> AttendanceExport:
        if end < start:
            raise ValidationError("end_date must not be earlier than start_date")

        query_rows = self._records.get_report_rows(start_date=start, end_date=end, employee_id=employee_id)

        summary_map: dict[int, dict] = {}
        out_rows: list[dict] = []
        orphaned = 0
        unattached = 0

        for row in query_rows:
            r = row.record
            if r.employee_id is None:
                unattached += 1
                continue
            if row.is_orphaned:
                orphaned += 1
                logger.warning(
                    "Skipping time record #%s with missing employee %s during payroll export", r.record_id, r.employee_id
                )
                continue

            warnings = inspect_punches(r.punches, r.hours_worked, r.overtime_hours)
            out_rows.append(
                {
                    "record_id": r.record_id,
                    "employee_id": r.employee_id,
                    "full_name": row.full_name,
                    "date": r.record_date.isoformat(),
                    "status": r.status.value,
                    "hours_worked": r.hours_worked,
                    "overtime_hours": r.overtime_hours,
                    "is_paid": r.is_paid,
                    "warnings": [w.code for w in warnings],
                }
            )

            s = summary_map.get(r.employee_id)
            if not s:
                s = {
                    "employee_id": r.employee_id,
                    "full_name": row.full_name,
                    "total_hours": Decimal("0"),
                    "overtime_hours": Decimal("0"),
                    "days_present": 0,
                    "days_absent": 0,
                    "days_late": 0,
                    "days_half_day": 0,
                    "days_on_leave": 0,
                    "flagged_records": 0,
                }
                summary_map[r.employee_id] = s
            s["total_hours"] += Decimal(str(r.hours_worked))
            s["overtime_hours"] += Decimal(str(r.overtime_hours))
            s[_DAY_COUNTERS[r.status]] += 1
            if warnings:
                s["flagged_records"] += 1

        summary = sorted(summary_map.values(), key=lambda x: x["employee_id"])
        return AttendanceExport(rows=out_rows, summary=summary, orphaned_count=orphaned, unattached_count=unattached)

    def build_payroll_report(
        self,
        *,
        start: date,
        end: date,
        status: Optional[PayrollStatus] = None,
    ) -> PayrollReport:
        if end < start:
            raise ValidationError("end_date must not be earlier than start_date")

        rows = list(self._payrolls.list_for_report(start_date=start, end_date=end, status=status))
        totals = {col: sum((getattr(p, col) for p in rows), Decimal("0")) for col in MONEY_COLUMNS}
        return PayrollReport(rows=rows, totals=totals)
