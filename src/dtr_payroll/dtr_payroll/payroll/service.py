from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..common.datetime_utils import Clock, SystemClock
from ..common.validators import optional_text
from ..core.constants import DEFAULT_PAYMENT_METHOD, HOURS_PER_MONTH, MAX_AMOUNT, OVERTIME_MULTIPLIER
from ..core.enums import PayrollStatus
from ..core.exceptions import NotFound, PayrollLocked, UnknownEmployee, ValidationError
from ..employees.directory import EmployeeDirectory
from ..settlement.repository import SettlementRepository
from ..time_records.model import TimeRecord
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import NewPayroll, Payroll, PayrollAmounts, PayrollRun
from .repository import PayrollRepository

logger = logging.getLogger(__name__)


def _non_negative(value: Decimal, field_name: str) -> Decimal:
    value = Decimal(str(value))
    if not value.is_finite():
        raise ValidationError(f"{field_name} must be a number")
    if value < 0:
        raise ValidationError(f"{field_name} must not be negative")
    if value > MAX_AMOUNT:
        raise ValidationError(f"{field_name} must not exceed {MAX_AMOUNT}")
    return value


def _ensure_storable(amounts: PayrollAmounts) -> PayrollAmounts:
    for name in ("basic_salary", "overtime_pay", "allowances", "deductions", "tax", "net_salary"):
        if abs(getattr(amounts, name)) > MAX_AMOUNT:
            raise ValidationError(f"{name} would exceed {MAX_AMOUNT}; check the rates and amounts")
    if amounts.gross_pay > MAX_AMOUNT:
        raise ValidationError(f"gross pay would exceed {MAX_AMOUNT}; check the rates and amounts")
    return amounts


class PayrollService:
    """Use case: aggregate unpaid attendance into payroll line items.

    The covered records are selected, priced and flipped to paid inside one
    settlement transaction; see ``SettlementRepository.settle_period``.
    """

    def __init__(
        self,
        settlement: SettlementRepository,
        payrolls: PayrollRepository,
        employees: EmployeeDirectory,
        *,
        calculator: Optional[PayrollCalculator] = None,
        clock: Optional[Clock] = None,
    ):
        self._settlement = settlement
        self._payrolls = payrolls
        self._employees = employees
        self._calculator = calculator or StandardPayrollCalculator()
        self._clock = clock or SystemClock()

    def _resolve_rates(
        self,
        employee_id: int,
        hourly_rate: Optional[Decimal],
        overtime_rate: Optional[Decimal],
    ) -> tuple[Decimal, Decimal]:
        if hourly_rate is None:
            salary = self._employees.monthly_salary(employee_id)
            if salary is None:
                raise ValidationError("hourly_rate is required (employee has no monthly salary on file)")
            hourly_rate = Decimal(str(salary)) / HOURS_PER_MONTH
        hourly_rate = _non_negative(hourly_rate, "hourly_rate")

        if overtime_rate is None:
            overtime_rate = hourly_rate * OVERTIME_MULTIPLIER
        return hourly_rate, _non_negative(overtime_rate, "overtime_rate")

    def compute_payroll(
        self,
        *,
        employee_id: int,
        period_start: date,
        period_end: date,
        hourly_rate: Optional[Decimal] = None,
        overtime_rate: Optional[Decimal] = None,
        allowances: Decimal = Decimal("0"),
        deductions: Decimal = Decimal("0"),
        payment_method: Optional[str] = None,
        remarks: Optional[str] = None,
    ) -> PayrollRun:
        if period_end < period_start:
            raise ValidationError("period_end must not be earlier than period_start")
        if not self._employees.employee_exists(employee_id):
            raise UnknownEmployee(employee_id)

        hourly_rate, overtime_rate = self._resolve_rates(employee_id, hourly_rate, overtime_rate)
        allowances = _non_negative(allowances, "allowances")
        deductions = _non_negative(deductions, "deductions")
        method = optional_text(payment_method) or DEFAULT_PAYMENT_METHOD

        def build(covered: Sequence[TimeRecord]) -> NewPayroll:
            amounts = _ensure_storable(
                self._calculator.compute(
                    covered,
                    hourly_rate=hourly_rate,
                    overtime_rate=overtime_rate,
                    allowances=allowances,
                    deductions=deductions,
                )
            )
            return NewPayroll(
                employee_id=employee_id,
                period_start=period_start,
                period_end=period_end,
                amounts=amounts,
                payment_method=method,
                remarks=optional_text(remarks),
            )

        run = self._settlement.settle_period(
            employee_id=employee_id,
            period_start=period_start,
            period_end=period_end,
            build=build,
        )

        payroll = run.payroll
        logger.info(
            "Payroll #%s for employee %s (%s..%s) settled %d time records, net %s",
            payroll.payroll_id,
            employee_id,
            period_start.isoformat(),
            period_end.isoformat(),
            len(run.covered_record_ids),
            payroll.net_salary,
        )
        if not run.covered_record_ids:
            logger.info("Payroll #%s has no unpaid attendance in its period", payroll.payroll_id)
        if payroll.net_salary < 0:
            logger.warning("Payroll #%s has negative net salary %s", payroll.payroll_id, payroll.net_salary)
        return run

    def get(self, payroll_id: int) -> Payroll:
        payroll = self._payrolls.get_by_id(int(payroll_id))
        if not payroll:
            raise NotFound(f"Payroll #{payroll_id} not found")
        return payroll

    def list_payrolls(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
    ) -> Sequence[Payroll]:
        return self._payrolls.list_payrolls(employee_id=employee_id, status=status)

    def update(
        self,
        payroll_id: int,
        *,
        allowances: Optional[Decimal] = None,
        deductions: Optional[Decimal] = None,
        payment_method: Optional[str] = None,
        remarks: Optional[str] = None,
        status: Optional[PayrollStatus] = None,
    ) -> Payroll:
        """Edit a pending payroll. Moving to ``paid`` stamps ``paid_at`` and freezes it."""

        payroll = self.get(payroll_id)
        if payroll.status != PayrollStatus.PENDING:
            raise PayrollLocked(f"Payroll #{payroll.payroll_id} is {payroll.status.value} and can no longer be changed")

        if status == PayrollStatus.CANCELLED:
            self.cancel(payroll.payroll_id)
            return self.get(payroll.payroll_id)

        amounts = PayrollAmounts(
            regular_hours=payroll.regular_hours,
            overtime_hours=payroll.overtime_hours,
            basic_salary=payroll.basic_salary,
            overtime_pay=payroll.overtime_pay,
            allowances=payroll.allowances,
            deductions=payroll.deductions,
            tax=payroll.tax,
            net_salary=payroll.net_salary,
        )
        if allowances is not None or deductions is not None:
            new_allowances = _non_negative(allowances, "allowances") if allowances is not None else payroll.allowances
            new_deductions = _non_negative(deductions, "deductions") if deductions is not None else payroll.deductions
            amounts = _ensure_storable(
                self._calculator.adjust(amounts, allowances=new_allowances, deductions=new_deductions)
            )

        new_status = status or PayrollStatus.PENDING
        paid_at = self._clock.now() if new_status == PayrollStatus.PAID else None

        ok = self._payrolls.update_pending(
            payroll.payroll_id,
            amounts=amounts,
            payment_method=optional_text(payment_method) or payroll.payment_method,
            remarks=optional_text(remarks) if remarks is not None else payroll.remarks,
            status=new_status,
            paid_at=paid_at,
        )
        if not ok:
            raise PayrollLocked(f"Payroll #{payroll.payroll_id} changed while being updated")

        logger.info("Updated payroll #%s (status=%s)", payroll.payroll_id, new_status.value)
        return self.get(payroll.payroll_id)

    def cancel(self, payroll_id: int) -> int:
        released = self._settlement.cancel_payroll(int(payroll_id))
        logger.info("Payroll #%s cancelled, %d time records released", payroll_id, released)
        return released
