from __future__ import annotations

import re

import mysql.connector
import pytest

from src.signin_desk.signin_desk.core.exceptions import LockTimeoutError
from src.signin_desk.signin_desk.storage.mysql_store import MySQLTabularStore


class FakeServer:
    """Just enough of MySQL for the DDL paths of the tabular store."""

    def __init__(self):
        self.catalog: dict[tuple[str, int], str] = {}
        self.tables: set[str] = set()
        self.statements: list[str] = []
        self.lock_free = True
        self.duplicate_columns: set[str] = set()


class FakeCursor:
    def __init__(self, server: FakeServer):
        self._server = server
        self._result: list[tuple] = []

    def execute(self, sql, params=()):
        s = self._server
        text = " ".join(sql.split())
        s.statements.append(text)
        self._result = []
        if "GET_LOCK" in text:
            self._result = [(1 if s.lock_free else 0,)]
        elif "RELEASE_LOCK" in text:
            self._result = [(1,)]
        elif text.startswith("CREATE TABLE IF NOT EXISTS"):
            s.tables.add(re.search(r"`(\w+)`", text).group(1))
        elif text.startswith("SELECT label FROM"):
            self._result = [(label,) for (t, _), label in sorted(s.catalog.items()) if t == params[0]]
        elif "information_schema" in text:
            self._result = [(1 if params[0] in s.tables else 0,)]
        elif text.startswith("ALTER TABLE"):
            column = re.search(r"ADD COLUMN `(\w+)`", text).group(1)
            if column in s.duplicate_columns:
                raise mysql.connector.Error(msg=f"Duplicate column name '{column}'", errno=1060)
        elif text.startswith("INSERT IGNORE INTO `tabular_headers`"):
            s.catalog.setdefault((params[0], params[1]), params[2])
        elif text.startswith("INSERT INTO `tabular_headers`"):
            if (params[0], params[1]) in s.catalog:
                raise mysql.connector.Error(msg="Duplicate entry", errno=1062)
            s.catalog[(params[0], params[1])] = params[2]

    def fetchone(self):
        return self._result[0] if self._result else None

    def fetchall(self):
        return list(self._result)

    def close(self):
        pass


class FakeConnection:
    def __init__(self, server: FakeServer):
        self._server = server

    def cursor(self, dictionary=False):
        return FakeCursor(self._server)

    def commit(self):
        pass

    def rollback(self):
        pass

    def close(self):
        pass


class FakeFactory:
    database = "signin_desk_test"

    def __init__(self, server: FakeServer):
        self._server = server

    def connect(self):
        return FakeConnection(self._server)


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def store(server):
    return MySQLTabularStore(FakeFactory(server))


def _positions(statements, needle):
    return [i for i, s in enumerate(statements) if needle in s]


def test_create_table_runs_inside_the_ddl_lock(server, store):
    store.create_table("attendance", ["Student ID", "Name"])

    got, released = _positions(server.statements, "GET_LOCK"), _positions(server.statements, "RELEASE_LOCK")
    created = _positions(server.statements, "CREATE TABLE IF NOT EXISTS `attendance`")
    assert got and released and created
    assert got[0] < created[0] < released[0]
    assert store.get_header("attendance") == ["Student ID", "Name"]


def test_create_table_keeps_a_header_written_by_another_process(server, store):
    server.catalog[("attendance", 0)] = "Student ID"
    server.catalog[("attendance", 1)] = "Name"

    store.create_table("attendance", ["Student ID", "Name"])
    store.create_table("attendance", ["Student ID", "Name"])

    assert store.get_header("attendance") == ["Student ID", "Name"]
    assert not any(s.startswith("INSERT INTO `tabular_headers`") for s in server.statements)


def test_add_columns_tolerates_a_column_that_already_exists(server, store):
    store.create_table("attendance", ["Student ID"])
    server.duplicate_columns.add("c1")

    header = store.add_columns("attendance", ["Name"])

    assert header == ["Student ID", "Name"]
    assert server.catalog[("attendance", 1)] == "Name"
    assert server.statements[-1].startswith("SELECT RELEASE_LOCK")


def test_add_columns_reraises_other_mysql_errors_and_releases_the_lock(server, store):
    store.create_table("attendance", ["Student ID"])

    class BrokenCursor(FakeCursor):
        def execute(self, sql, params=()):
            if sql.lstrip().startswith("ALTER TABLE"):
                raise mysql.connector.Error(msg="syntax error", errno=1064)
            super().execute(sql, params)

    class BrokenConnection(FakeConnection):
        def cursor(self, dictionary=False):
            return BrokenCursor(server)

    class BrokenFactory(FakeFactory):
        def connect(self):
            return BrokenConnection(server)

    broken_store = MySQLTabularStore(BrokenFactory(server))
    with pytest.raises(mysql.connector.Error):
        broken_store.add_columns("attendance", ["Name"])

    assert server.statements[-1].startswith("SELECT RELEASE_LOCK")
    assert ("attendance", 1) not in server.catalog


def test_busy_ddl_lock_writes_nothing(server, store):
    server.lock_free = False

    with pytest.raises(LockTimeoutError):
        store.create_table("attendance", ["Student ID"])

    assert "attendance" not in server.tables
    assert not server.catalog
