import mysql.connector
import pytest
from mysql.connector import errorcode

from src.dtr_payroll.dtr_payroll.core.exceptions import StorageError, ValidationError
from src.dtr_payroll.dtr_payroll.database.mysql_base import db_cursor, run_transaction


class Conn:
    def __init__(self):
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=True):
        return self

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class Factory:
    def __init__(self, fail_connect=False):
        self.conns = []
        self._fail_connect = fail_connect

    def connect(self):
        if self._fail_connect:
            raise mysql.connector.errors.InterfaceError(msg="Can't connect")
        conn = Conn()
        self.conns.append(conn)
        return conn


def test_commits_on_success():
    factory = Factory()
    assert run_transaction(factory, lambda cur: 42) == 42
    assert factory.conns[0].committed is True
    assert factory.conns[0].closed is True


def test_domain_errors_roll_back_and_propagate():
    factory = Factory()

    def work(cur):
        raise ValidationError("nope")

    with pytest.raises(ValidationError):
        run_transaction(factory, work, retries=3)

    assert len(factory.conns) == 1
    assert factory.conns[0].rolled_back is True
    assert factory.conns[0].committed is False


def test_lock_wait_timeout_is_replayed():
    factory = Factory()
    calls = []

    def work(cur):
        calls.append(cur)
        if len(calls) < 3:
            raise mysql.connector.errors.DatabaseError(msg="Lock wait timeout", errno=errorcode.ER_LOCK_WAIT_TIMEOUT)
        return "ok"

    assert run_transaction(factory, work, retries=3) == "ok"
    assert [c.rolled_back for c in factory.conns] == [True, True, False]


def test_connect_failure_is_storage_error():
    with pytest.raises(StorageError):
        with db_cursor(Factory(fail_connect=True)):
            pass
