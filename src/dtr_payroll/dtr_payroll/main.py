from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.http import register_error_handlers
from .container import build_container
from .database.bootstrap import apply_schema, list_tables
from .integrity.cli import register as register_integrity_cli
from .payroll.controller import register as register_payroll
from .time_records.controller import register as register_time_records

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=SCHEMA_PATH)
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

    container = build_container(
        db_config=db_config,
        tax_rate=getattr(settings, "TAX_RATE"),
        settlement_retries=int(getattr(settings, "SETTLEMENT_RETRIES", 3)),
    )
    logger.info("settings=%s db=%s", settings_module, container.conn.description)

    register_error_handlers(app)
    register_time_records(app, container)
    register_payroll(app, container)
    register_integrity_cli(app, container)

    return app
