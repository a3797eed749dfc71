from __future__ import annotations

import logging
from datetime import date
from typing import Sequence

from ..core.enums import PayrollStatus
from ..core.exceptions import ConcurrentSettlement, NotFound, PayrollLocked
from ..database.connection import DatabaseConnection
from ..database.mysql_base import fetchall, in_clause, run_transaction
from ..payroll.model import PayrollRun
from ..payroll.mysql_payroll_repository import insert_payroll, select_payroll
from ..time_records.mysql_time_record_repository import RECORD_COLUMNS, row_to_record
from .model import SettlementResult
from .repository import PayrollBuilder, SettlementRepository

logger = logging.getLogger(__name__)


class MySQLSettlementRepository(SettlementRepository):
    """InnoDB implementation.

    ``SELECT ... FOR UPDATE`` over the ``(employee_id, record_date)`` unique index
    takes next-key locks, so rows cannot be inserted into a locked period until
    the settling transaction ends.
    """

    def __init__(self, conn_factory: DatabaseConnection, *, retries: int = 3):
        self._conn_factory = conn_factory
        self._retries = int(retries)

    def mark_paid(self, record_ids: Sequence[int]) -> SettlementResult:
        requested = list(dict.fromkeys(int(i) for i in record_ids))
        if not requested:
            return SettlementResult()

        def work(cur) -> SettlementResult:
            # Lock in id order so concurrent batches cannot deadlock on each other.
            ordered = sorted(requested)
            cur.execute(
                f"SELECT id, is_paid FROM time_records WHERE id IN ({in_clause(ordered)}) ORDER BY id FOR UPDATE",
                tuple(ordered),
            )
            unpaid = {int(r["id"]) for r in fetchall(cur) if not r["is_paid"]}
            to_flip = [i for i in ordered if i in unpaid]

            if to_flip:
                cur.execute(
                    f"UPDATE time_records SET is_paid=1 WHERE id IN ({in_clause(to_flip)}) AND is_paid=0",
                    tuple(to_flip),
                )
                if cur.rowcount != len(to_flip):
                    raise ConcurrentSettlement("Time records changed while being marked as paid")

            return SettlementResult(
                updated_ids=[i for i in requested if i in unpaid],
                skipped=[i for i in requested if i not in unpaid],
            )

        return run_transaction(self._conn_factory, work, retries=self._retries)

    def settle_period(
        self,
        *,
        employee_id: int,
        period_start: date,
        period_end: date,
        build: PayrollBuilder,
    ) -> PayrollRun:
        def work(cur) -> PayrollRun:
            cur.execute(
                f"""
                SELECT {RECORD_COLUMNS} FROM time_records tr
                WHERE tr.employee_id=%s AND tr.record_date BETWEEN %s AND %s
                ORDER BY tr.record_date ASC, tr.id ASC
                FOR UPDATE
                """,
                (int(employee_id), period_start, period_end),
            )
            covered = [rec for rec in (row_to_record(r) for r in fetchall(cur)) if not rec.is_paid]

            payroll_id = insert_payroll(cur, build(covered))

            covered_ids = [rec.record_id for rec in covered]
            if covered_ids:
                cur.execute(
                    f"""
                    UPDATE time_records
                    SET is_paid=1, pay_period=%s, payroll_id=%s
                    WHERE id IN ({in_clause(covered_ids)}) AND is_paid=0
                    """,
                    (period_end, payroll_id, *covered_ids),
                )
                if cur.rowcount != len(covered_ids):
                    raise ConcurrentSettlement("Covered time records changed during payroll settlement")

            payroll = select_payroll(cur, payroll_id)
            if payroll is None:
                raise ConcurrentSettlement(f"Payroll #{payroll_id} vanished during settlement")
            return PayrollRun(payroll=payroll, covered_record_ids=covered_ids)

        return run_transaction(self._conn_factory, work, retries=self._retries)

    def cancel_payroll(self, payroll_id: int) -> int:
        def work(cur) -> int:
            payroll = select_payroll(cur, payroll_id, for_update=True)
            if payroll is None:
                raise NotFound(f"Payroll #{payroll_id} not found")
            if payroll.status != PayrollStatus.PENDING:
                raise PayrollLocked(f"Payroll #{payroll_id} is {payroll.status.value} and cannot be cancelled")

            cur.execute("UPDATE payrolls SET status=%s WHERE id=%s", (PayrollStatus.CANCELLED.value, int(payroll_id)))
            cur.execute(
                "UPDATE time_records SET is_paid=0, pay_period=NULL, payroll_id=NULL WHERE payroll_id=%s AND is_paid=1",
                (int(payroll_id),),
            )
            released = cur.rowcount
            logger.info("Cancelled payroll #%s, released %d time records", payroll_id, released)
            return released

        return run_transaction(self._conn_factory, work, retries=self._retries)
