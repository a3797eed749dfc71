from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import PayrollStatus
from .model import Payroll, PayrollAmounts


class PayrollRepository(Protocol):
    def get_by_id(self, payroll_id: int) -> Optional[Payroll]:
        raise NotImplementedError

    def list_payrolls(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
        limit: int = 200,
    ) -> Sequence[Payroll]:
        raise NotImplementedError

    def update_pending(
        self,
        payroll_id: int,
        *,
        amounts: PayrollAmounts,
        payment_method: str,
        remarks: Optional[str],
        status: PayrollStatus,
        paid_at: Optional[datetime],
    ) -> bool:
        """Apply changes only while the payroll is still pending."""

        raise NotImplementedError

    def list_for_report(
        self,
        *,
        start_date: date,
        end_date: date,
        status: Optional[PayrollStatus] = None,
    ) -> Sequence[Payroll]:
        """Payrolls whose period starts within [start_date, end_date]."""

        raise NotImplementedError
