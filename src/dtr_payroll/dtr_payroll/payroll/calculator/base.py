from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Sequence

from ...time_records.model import TimeRecord
from ..model import PayrollAmounts


class TaxPolicy(ABC):
    """Tax rule applied to gross pay (Strategy Pattern, swappable per jurisdiction)."""

    @abstractmethod
    def tax_for(self, gross_pay: Decimal) -> Decimal:
        raise NotImplementedError


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def compute(
        self,
        records: Sequence[TimeRecord],
        *,
        hourly_rate: Decimal,
        overtime_rate: Decimal,
        allowances: Decimal,
        deductions: Decimal,
    ) -> PayrollAmounts:
        raise NotImplementedError

    @abstractmethod
    def adjust(self, amounts: PayrollAmounts, *, allowances: Decimal, deductions: Decimal) -> PayrollAmounts:
        """Re-derive tax and net pay after allowances/deductions change."""

        raise NotImplementedError
