from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from src.dtr_payroll.dtr_payroll.core.enums import DTRStatus, PayrollStatus
from src.dtr_payroll.dtr_payroll.core.exceptions import NotFound, PayrollLocked, ValidationError
from src.dtr_payroll.dtr_payroll.employees.model import Employee
from src.dtr_payroll.dtr_payroll.payroll.model import Payroll, PayrollAmounts, PayrollRun
from src.dtr_payroll.dtr_payroll.settlement.model import SettlementResult
from src.dtr_payroll.dtr_payroll.time_records.calculator import derive_hours
from src.dtr_payroll.dtr_payroll.time_records.model import Punches, TimeRecord, TimeRecordDraft, TimeRecordReportRow


class FixedClock:
    def __init__(self, now: datetime):
        self._now = now

    def today(self) -> date:
        return self._now.date()

    def now(self) -> datetime:
        return self._now


class InMemoryEmployees:
    def __init__(self, employees: Optional[dict[int, Employee]] = None):
        self.employees: dict[int, Employee] = dict(employees or {})

    def add(self, employee_id: int, full_name: str = "Employee", monthly_salary: Optional[Decimal] = None) -> None:
        self.employees[employee_id] = Employee(employee_id, full_name, monthly_salary)

    def delete(self, employee_id: int) -> None:
        self.employees.pop(employee_id, None)

    def employee_exists(self, employee_id: int) -> bool:
        return employee_id in self.employees

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.employees.get(employee_id)

    def monthly_salary(self, employee_id: int) -> Optional[Decimal]:
        e = self.employees.get(employee_id)
        return e.monthly_salary if e else None


class InMemoryStore:
    """Time records, payrolls and settlement over dicts, serialized by one lock."""

    def __init__(self, employees: Optional[InMemoryEmployees] = None):
        self.employees = employees or InMemoryEmployees()
        self.records: dict[int, TimeRecord] = {}
        self.payrolls: dict[int, Payroll] = {}
        self.lock = threading.RLock()
        self._next_record = 0
        self._next_payroll = 0
        # Called inside settle_period after selection, to simulate interleavings.
        self.after_select = None

    # -- helpers ---------------------------------------------------------

    def add_record(
        self,
        *,
        employee_id: Optional[int],
        record_date: date,
        punches: Punches = Punches(),
        status: DTRStatus = DTRStatus.PRESENT,
        is_paid: bool = False,
    ) -> TimeRecord:
        hours, overtime = derive_hours(punches)
        with self.lock:
            self._next_record += 1
            rec = TimeRecord(
                record_id=self._next_record,
                employee_id=employee_id,
                record_date=record_date,
                punches=punches,
                status=status,
                hours_worked=hours,
                overtime_hours=overtime,
                is_paid=is_paid,
            )
            self.records[rec.record_id] = rec
            return rec

    # -- TimeRecordRepository ---------------------------------------------

    def get_by_id(self, record_id: int) -> Optional[TimeRecord]:
        return self.records.get(int(record_id))

    def get_for_employee_and_date(self, employee_id: int, record_date: date) -> Optional[TimeRecord]:
        for r in self.records.values():
            if r.employee_id == employee_id and r.record_date == record_date:
                return r
        return None

    def list_records(self, *, start_date, end_date, employee_id=None, status=None, is_paid=None):
        out = [
            r
            for r in self.records.values()
            if start_date <= r.record_date <= end_date
            and (employee_id is None or r.employee_id == employee_id)
            and (status is None or r.status == status)
            and (is_paid is None or r.is_paid == is_paid)
        ]
        return sorted(out, key=lambda r: (r.record_date, r.record_id), reverse=True)

    def create(self, draft: TimeRecordDraft) -> int:
        with self.lock:
            if self.get_for_employee_and_date(draft.employee_id, draft.record_date):
                raise ValidationError("duplicate")
            self._next_record += 1
            self.records[self._next_record] = TimeRecord(
                record_id=self._next_record,
                employee_id=draft.employee_id,
                record_date=draft.record_date,
                punches=draft.punches,
                status=draft.status,
                leave_type=draft.leave_type,
                remarks=draft.remarks,
                hours_worked=draft.hours_worked,
                overtime_hours=draft.overtime_hours,
            )
            return self._next_record

    def update_unpaid(self, record_id: int, draft: TimeRecordDraft) -> bool:
        with self.lock:
            current = self.records.get(record_id)
            if not current or current.is_paid:
                return False
            self.records[record_id] = replace(
                current,
                employee_id=draft.employee_id,
                record_date=draft.record_date,
                punches=draft.punches,
                status=draft.status,
                leave_type=draft.leave_type,
                remarks=draft.remarks,
                hours_worked=draft.hours_worked,
                overtime_hours=draft.overtime_hours,
            )
            return True

    def delete_unpaid(self, record_id: int) -> bool:
        with self.lock:
            current = self.records.get(record_id)
            if not current or current.is_paid:
                return False
            del self.records[record_id]
            return True

    def distinct_employee_ids(self) -> Sequence[int]:
        return sorted({r.employee_id for r in self.records.values() if r.employee_id is not None})

    def list_by_employee_ids(self, employee_ids: Sequence[int]) -> Sequence[TimeRecord]:
        wanted = set(employee_ids)
        return [r for r in sorted(self.records.values(), key=lambda r: r.record_id) if r.employee_id in wanted]

    def list_unattached(self) -> Sequence[TimeRecord]:
        return [r for r in self.records.values() if r.employee_id is None]

    def list_by_payroll(self, payroll_id: int) -> Sequence[TimeRecord]:
        out = [r for r in self.records.values() if r.payroll_id == payroll_id]
        return sorted(out, key=lambda r: (r.record_date, r.record_id))

    def clear_employee_ref(self, record_id: int, *, expected_employee_id: int) -> bool:
        with self.lock:
            current = self.records.get(record_id)
            if not current or current.employee_id != expected_employee_id:
                return False
            self.records[record_id] = replace(current, employee_id=None)
            return True

    def get_report_rows(self, *, start_date, end_date, employee_id=None):
        rows = []
        for r in sorted(self.records.values(), key=lambda r: (r.record_date, r.record_id)):
            if not (start_date <= r.record_date <= end_date):
                continue
            if employee_id is not None and r.employee_id != employee_id:
                continue
            emp = self.employees.get_by_id(r.employee_id) if r.employee_id is not None else None
            rows.append(TimeRecordReportRow(record=r, full_name=emp.full_name if emp else None))
        return rows

    # -- SettlementRepository ---------------------------------------------

    def mark_paid(self, record_ids: Sequence[int]) -> SettlementResult:
        requested = list(dict.fromkeys(int(i) for i in record_ids))
        with self.lock:
            updated, skipped = [], []
            for rid in requested:
                rec = self.records.get(rid)
                if rec and not rec.is_paid:
                    self.records[rid] = replace(rec, is_paid=True)
                    updated.append(rid)
                else:
                    skipped.append(rid)
            return SettlementResult(updated_ids=updated, skipped=skipped)

    def settle_period(self, *, employee_id, period_start, period_end, build) -> PayrollRun:
        with self.lock:
            covered = [
                r
                for r in sorted(self.records.values(), key=lambda r: (r.record_date, r.record_id))
                if r.employee_id == employee_id and period_start <= r.record_date <= period_end and not r.is_paid
            ]
            if self.after_select:
                self.after_select()
            new = build(covered)
            a = new.amounts
            self._next_payroll += 1
            payroll = Payroll(
                payroll_id=self._next_payroll,
                employee_id=new.employee_id,
                period_start=new.period_start,
                period_end=new.period_end,
                regular_hours=a.regular_hours,
                overtime_hours=a.overtime_hours,
                basic_salary=a.basic_salary,
                overtime_pay=a.overtime_pay,
                allowances=a.allowances,
                deductions=a.deductions,
                tax=a.tax,
                net_salary=a.net_salary,
                payment_method=new.payment_method,
                status=PayrollStatus.PENDING,
                remarks=new.remarks,
            )
            self.payrolls[payroll.payroll_id] = payroll
            for r in covered:
                self.records[r.record_id] = replace(r, is_paid=True, pay_period=period_end, payroll_id=payroll.payroll_id)
            return PayrollRun(payroll=payroll, covered_record_ids=[r.record_id for r in covered])

    def cancel_payroll(self, payroll_id: int) -> int:
        with self.lock:
            payroll = self.payrolls.get(payroll_id)
            if not payroll:
                raise NotFound(f"Payroll #{payroll_id} not found")
            if payroll.status != PayrollStatus.PENDING:
                raise PayrollLocked("not pending")
            self.payrolls[payroll_id] = replace(payroll, status=PayrollStatus.CANCELLED)
            released = 0
            for rid, r in list(self.records.items()):
                if r.payroll_id == payroll_id and r.is_paid:
                    self.records[rid] = replace(r, is_paid=False, pay_period=None, payroll_id=None)
                    released += 1
            return released


class InMemoryPayrolls:
    """PayrollRepository view over the same store."""

    def __init__(self, store: InMemoryStore):
        self._store = store

    def get_by_id(self, payroll_id: int) -> Optional[Payroll]:
        return self._store.payrolls.get(int(payroll_id))

    def list_payrolls(self, *, employee_id=None, status=None, limit=200):
        out = [
            p
            for p in self._store.payrolls.values()
            if (employee_id is None or p.employee_id == employee_id) and (status is None or p.status == status)
        ]
        return sorted(out, key=lambda p: p.payroll_id, reverse=True)[:limit]

    def update_pending(self, payroll_id: int, *, amounts: PayrollAmounts, payment_method, remarks, status, paid_at) -> bool:
        with self._store.lock:
            p = self._store.payrolls.get(payroll_id)
            if not p or p.status != PayrollStatus.PENDING:
                return False
            self._store.payrolls[payroll_id] = replace(
                p,
                allowances=amounts.allowances,
                deductions=amounts.deductions,
                tax=amounts.tax,
                net_salary=amounts.net_salary,
                payment_method=payment_method,
                remarks=remarks,
                status=status,
                paid_at=paid_at,
            )
            return True

    def list_for_report(self, *, start_date, end_date, status=None):
        return [
            p
            for p in sorted(self._store.payrolls.values(), key=lambda p: p.payroll_id)
            if start_date <= p.period_start <= end_date and (status is None or p.status == status)
        ]
