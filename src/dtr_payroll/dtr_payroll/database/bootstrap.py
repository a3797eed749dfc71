"""Schema and seed loading for development databases.

``schema.sql`` carries its own ``CREATE DATABASE``/``USE`` lines for manual use;
they are dropped here so the configured database name always wins.
"""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)

_CREATE_DB_OR_USE = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b[^;]*;\s*$")


@contextmanager
def _server(config: DBConfig, *, use_database: bool = True):
    kwargs = dict(host=config.host, port=config.port, user=config.user, password=config.password, use_pure=True)
    if use_database:
        kwargs["database"] = config.database
    conn = mysql.connector.connect(**kwargs)
    try:
        cur = conn.cursor()
        yield cur
        conn.commit()
    finally:
        conn.close()


def iter_sql_statements(sql: str) -> Iterator[str]:
    """Split a script on ``;``, ignoring semicolons in quotes and ``--`` comments."""

    buf: list[str] = []
    quote = None
    i = 0
    while i < len(sql):
        ch = sql[i]
        if quote:
            buf.append(ch)
            if ch == "\\" and i + 1 < len(sql):
                buf.append(sql[i + 1])
                i += 1
            elif ch == quote:
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
            buf.append(ch)
        elif sql.startswith("--", i):
            end = sql.find("\n", i)
            i = len(sql) if end == -1 else end
            continue
        elif ch == ";":
            stmt = "".join(buf).strip()
            if stmt:
                yield stmt
            buf = []
        else:
            buf.append(ch)
        i += 1

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    config = DBConfig.from_settings(db_config)
    with _server(config, use_database=False) as cur:
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )


def load_statements(path: str | Path) -> list[str]:
    sql = _CREATE_DB_OR_USE.sub("", Path(path).read_text(encoding="utf-8"))
    return list(iter_sql_statements(sql))


def apply_sql_file(db_config: dict, path: str | Path) -> int:
    """Run every statement of ``path`` in one transaction; returns the statement count."""

    statements = load_statements(path)
    with _server(DBConfig.from_settings(db_config)) as cur:
        for stmt in statements:
            cur.execute(stmt)
    logger.info("Applied %s (%d statements)", Path(path).name, len(statements))
    return len(statements)


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    apply_sql_file(db_config, schema_path)


def list_tables(db_config: dict) -> list[str]:
    with _server(DBConfig.from_settings(db_config)) as cur:
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
