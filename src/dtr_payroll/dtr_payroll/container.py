from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .common.datetime_utils import Clock, SystemClock
from .core.constants import DEFAULT_SETTLEMENT_RETRIES, DEFAULT_TAX_RATE
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_directory import MySQLEmployeeDirectory
from .integrity.auditor import IntegrityAuditor
from .payroll.calculator.standard_calculator import FlatRateTaxPolicy, StandardPayrollCalculator
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.report_service import PayrollReportService
from .payroll.service import PayrollService
from .settlement.mysql_settlement_repository import MySQLSettlementRepository
from .settlement.service import SettlementService
from .time_records.mysql_time_record_repository import MySQLTimeRecordRepository
from .time_records.service import TimeRecordService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    employees: MySQLEmployeeDirectory
    time_records_repo: MySQLTimeRecordRepository
    payrolls_repo: MySQLPayrollRepository
    settlement_repo: MySQLSettlementRepository

    time_record_service: TimeRecordService
    settlement_service: SettlementService
    payroll_service: PayrollService
    payroll_report_service: PayrollReportService
    integrity_auditor: IntegrityAuditor


def build_container(
    *,
    db_config: dict,
    tax_rate: Decimal = DEFAULT_TAX_RATE,
    settlement_retries: int = DEFAULT_SETTLEMENT_RETRIES,
    clock: Optional[Clock] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_settings(db_config))
    clock = clock or SystemClock()

    employees = MySQLEmployeeDirectory(conn)
    time_records_repo = MySQLTimeRecordRepository(conn)
    payrolls_repo = MySQLPayrollRepository(conn)
    settlement_repo = MySQLSettlementRepository(conn, retries=settlement_retries)

    calculator = StandardPayrollCalculator(FlatRateTaxPolicy(Decimal(str(tax_rate))))

    time_record_service = TimeRecordService(time_records_repo, employees, clock=clock)
    settlement_service = SettlementService(settlement_repo)
    payroll_service = PayrollService(settlement_repo, payrolls_repo, employees, calculator=calculator, clock=clock)
    payroll_report_service = PayrollReportService(time_records_repo, payrolls_repo)
    integrity_auditor = IntegrityAuditor(time_records_repo, employees)

    return Container(
        conn=conn,
        employees=employees,
        time_records_repo=time_records_repo,
        payrolls_repo=payrolls_repo,
        settlement_repo=settlement_repo,
        time_record_service=time_record_service,
        settlement_service=settlement_service,
        payroll_service=payroll_service,
        payroll_report_service=payroll_report_service,
        integrity_auditor=integrity_auditor,
    )
