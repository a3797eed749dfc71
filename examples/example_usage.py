"""Example: drive the service layer directly (no Flask).

Lists the current pay period's time records and any orphaned records.
"""

import importlib

from dotenv import load_dotenv

from config import get_settings_module

from src.dtr_payroll.dtr_payroll.container import build_container


def main():
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, tax_rate=settings.TAX_RATE)

    for record in container.time_record_service.list_records():
        print(record.record_id, record.employee_id, record.record_date, record.status.value, record.hours_worked)

    orphans = container.integrity_auditor.find_orphans()
    print(f"{len(orphans)} orphaned time records")


if __name__ == "__main__":
    main()
