from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import PayrollStatus


@dataclass(frozen=True)
class PayrollAmounts:
    """Hours and money computed from the covered time records."""

    regular_hours: Decimal
    overtime_hours: Decimal
    basic_salary: Decimal
    overtime_pay: Decimal
    allowances: Decimal
    deductions: Decimal
    tax: Decimal
    net_salary: Decimal

    @property
    def gross_pay(self) -> Decimal:
        return self.basic_salary + self.overtime_pay + self.allowances


@dataclass(frozen=True)
class NewPayroll:
    employee_id: int
    period_start: date
    period_end: date
    amounts: PayrollAmounts
    payment_method: str
    remarks: Optional[str] = None


@dataclass(frozen=True)
class Payroll:
    """Domain entity: one payroll line item for one employee and one inclusive period."""

    payroll_id: int
    employee_id: int
    period_start: date
    period_end: date
    regular_hours: Decimal
    overtime_hours: Decimal
    basic_salary: Decimal
    overtime_pay: Decimal
    allowances: Decimal
    deductions: Decimal
    tax: Decimal
    net_salary: Decimal
    payment_method: str
    status: PayrollStatus
    remarks: Optional[str] = None
    paid_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def gross_pay(self) -> Decimal:
        return self.basic_salary + self.overtime_pay + self.allowances


@dataclass(frozen=True)
class PayrollRun:
    """Result of one aggregation: the persisted payroll and the records it settled."""

    payroll: Payroll
    covered_record_ids: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class PayrollReport:
    rows: list[Payroll]
    totals: dict[str, Decimal]
