from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from ...core.constants import DEFAULT_TAX_RATE
from ...time_records.model import TimeRecord
from ..model import PayrollAmounts
from .base import PayrollCalculator, TaxPolicy

_CENT = Decimal("0.01")


def money(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


class FlatRateTaxPolicy(TaxPolicy):
    """Flat percentage of gross pay. A placeholder, not a statutory table."""

    def __init__(self, rate: Decimal = DEFAULT_TAX_RATE):
        self.rate = Decimal(str(rate))

    def tax_for(self, gross_pay: Decimal) -> Decimal:
        return gross_pay * self.rate


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: hours x rate, overtime x overtime rate, tax on gross, net = gross - deductions - tax."""

    def __init__(self, tax_policy: Optional[TaxPolicy] = None):
        self._tax_policy = tax_policy or FlatRateTaxPolicy()

    def compute(
        self,
        records: Sequence[TimeRecord],
        *,
        hourly_rate: Decimal,
        overtime_rate: Decimal,
        allowances: Decimal,
        deductions: Decimal,
    ) -> PayrollAmounts:
        # str() round-trip keeps the 2-decimal float hours exact.
        regular_hours = sum((Decimal(str(r.hours_worked)) for r in records), Decimal("0"))
        overtime_hours = sum((Decimal(str(r.overtime_hours)) for r in records), Decimal("0"))

        basic_salary = money(regular_hours * hourly_rate)
        overtime_pay = money(overtime_hours * overtime_rate)
        return self._finish(
            regular_hours=regular_hours,
            overtime_hours=overtime_hours,
            basic_salary=basic_salary,
            overtime_pay=overtime_pay,
            allowances=money(allowances),
            deductions=money(deductions),
        )

    def adjust(self, amounts: PayrollAmounts, *, allowances: Decimal, deductions: Decimal) -> PayrollAmounts:
        return self._finish(
            regular_hours=amounts.regular_hours,
            overtime_hours=amounts.overtime_hours,
            basic_salary=amounts.basic_salary,
            overtime_pay=amounts.overtime_pay,
            allowances=money(allowances),
            deductions=money(deductions),
        )

    def _finish(
        self,
        *,
        regular_hours: Decimal,
        overtime_hours: Decimal,
        basic_salary: Decimal,
        overtime_pay: Decimal,
        allowances: Decimal,
        deductions: Decimal,
    ) -> PayrollAmounts:
        gross_pay = basic_salary + overtime_pay + allowances
        tax = money(self._tax_policy.tax_for(gross_pay))
        return PayrollAmounts(
            regular_hours=regular_hours,
            overtime_hours=overtime_hours,
            basic_salary=basic_salary,
            overtime_pay=overtime_pay,
            allowances=allowances,
            deductions=deductions,
            tax=tax,
            net_salary=gross_pay - deductions - tax,
        )
