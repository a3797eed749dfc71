from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import StorageError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Errors after which the whole transaction can simply be replayed.
RETRYABLE_ERRNOS = frozenset({errorcode.ER_LOCK_DEADLOCK, errorcode.ER_LOCK_WAIT_TIMEOUT})


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction: commit on success, rollback on any error."""
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as e:
        raise StorageError(f"Cannot connect to database: {e}") from e
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def run_transaction(conn_factory: DatabaseConnection, work: Callable[[Any], T], *, retries: int = 1) -> T:
    """Run ``work(cur)`` inside a single transaction.

    Deadlocks and lock wait timeouts are replayed up to ``retries`` times; any
    other driver error is surfaced as ``StorageError``. Nothing is committed
    unless ``work`` returns normally.
    """

    attempts = max(int(retries), 1)
    for attempt in range(1, attempts + 1):
        try:
            with db_cursor(conn_factory) as (_, cur):
                return work(cur)
        except mysql.connector.Error as e:
            if e.errno in RETRYABLE_ERRNOS and attempt < attempts:
                logger.warning("Transaction lock conflict (errno=%s), retrying %d/%d", e.errno, attempt, attempts)
                continue
            raise StorageError(f"Storage failure: {e}") from e
    raise StorageError("Transaction was not attempted")


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def in_clause(values: Sequence[Any]) -> str:
    """Placeholder list for ``IN (...)``; callers must pass a non-empty sequence."""
    return ", ".join(["%s"] * len(values))
