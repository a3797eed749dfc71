from __future__ import annotations

import logging
from typing import Sequence

import click
import mysql.connector
from flask import Flask

from ..core.exceptions import StorageError
from ..time_records.calculator import inspect_punches
from ..time_records.model import TimeRecord

logger = logging.getLogger(__name__)

HEADERS = ("DTR ID", "Date", "Employee ID", "Status", "Flags")


def format_table(headers: Sequence[str], rows: Sequence[Sequence[object]]) -> str:
    cells = [[str(c) for c in headers]] + [[str(c) for c in row] for row in rows]
    widths = [max(len(row[i]) for row in cells) for i in range(len(headers))]
    border = "+" + "+".join("-" * (w + 2) for w in widths) + "+"

    def line(row: list[str]) -> str:
        return "| " + " | ".join(c.ljust(w) for c, w in zip(row, widths)) + " |"

    out = [border, line(cells[0]), border]
    out.extend(line(row) for row in cells[1:])
    out.append(border)
    return "\n".join(out)


def _flags(r: TimeRecord) -> str:
    warnings = inspect_punches(r.punches, r.hours_worked, r.overtime_hours)
    return ", ".join(w.code for w in warnings) or "-"


def orphan_rows(records: Sequence[TimeRecord]) -> list[tuple]:
    return [(r.record_id, r.record_date.isoformat(), r.employee_id, r.status.value, _flags(r)) for r in records]


def register(app: Flask, container) -> None:
    @app.cli.group("dtr")
    def dtr():
        """Time record maintenance commands."""

    @dtr.command("check-orphaned")
    @click.option("--fix", is_flag=True, help="Fix orphaned records by setting employee_id to null.")
    def check_orphaned(fix: bool) -> None:
        """Check for DTR records with invalid employee_id values."""

        auditor = container.integrity_auditor
        click.echo("Checking for orphaned DTR records...")
        try:
            orphans = auditor.find_orphans()
            if not orphans:
                click.echo("No orphaned DTR records found with invalid employee_id values.")
                return

            click.echo(f"Found {len(orphans)} orphaned DTR records:")
            click.echo(format_table(HEADERS, orphan_rows(orphans)))

            if not fix:
                click.echo("Run with --fix option to set invalid employee_id values to null.")
                return

            click.echo("Fixing orphaned records...")
            repaired = auditor.repair_orphans(orphans)
            click.echo(f"Repaired {repaired} of {len(orphans)} orphaned DTR records (employee_id set to null).")
        except (StorageError, mysql.connector.Error) as e:
            logger.error("Orphan check failed: %s", e)
            raise click.ClickException(f"Storage failure: {e}")
