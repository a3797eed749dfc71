from __future__ import annotations

from datetime import date
from typing import Callable, Protocol, Sequence

from ..payroll.model import NewPayroll, PayrollRun
from ..time_records.model import TimeRecord
from .model import SettlementResult

# Receives the covered (unpaid, locked) records and returns the payroll to persist.
PayrollBuilder = Callable[[Sequence[TimeRecord]], NewPayroll]


class SettlementRepository(Protocol):
    """The only writer of ``is_paid``.

    Every method runs as one all-or-nothing transaction holding exclusive locks
    on the records it reads, so two concurrent callers can never both observe
    the same record as unpaid.
    """

    def mark_paid(self, record_ids: Sequence[int]) -> SettlementResult:
        raise NotImplementedError

    def settle_period(
        self,
        *,
        employee_id: int,
        period_start: date,
        period_end: date,
        build: PayrollBuilder,
    ) -> PayrollRun:
        """Select unpaid records in the period, persist ``build(records)`` and flip them to paid."""

        raise NotImplementedError

    def cancel_payroll(self, payroll_id: int) -> int:
        """Cancel a pending payroll and release the records it settled; returns the released count."""

        raise NotImplementedError
