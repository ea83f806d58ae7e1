from __future__ import annotations

from datetime import datetime

import pytest

from src.signin_desk.signin_desk.attendance.table_attendance_repository import TableAttendanceRepository
from src.signin_desk.signin_desk.core.exceptions import MissingTableError, SchemaError
from src.signin_desk.signin_desk.roster.model import Person
from src.signin_desk.signin_desk.storage.memory_store import InMemoryTabularStore
from src.signin_desk.signin_desk.storage.schema import Column, resolve_columns
from src.signin_desk.signin_desk.storage.table import ensure_table, open_existing
from src.signin_desk.signin_desk.storage.tables import SIGN_IN_LOG, attendance_schema


def test_resolve_columns_accepts_alternate_header_spellings():
    cols = resolve_columns(["ID Number", "Full Name", " School "], SIGN_IN_LOG.columns)

    assert cols["person_id"] == 0
    assert cols["display_name"] == 1
    assert cols["school"] == 2
    assert "status" not in cols


def test_resolve_columns_first_duplicate_header_wins():
    cols = resolve_columns(["ID number", "id_number"], SIGN_IN_LOG.columns)

    assert cols["person_id"] == 0


def test_resolve_columns_never_maps_two_fields_to_one_column():
    columns = (Column("a", ("x",)), Column("b", ("x", "y")))

    assert resolve_columns(["X", "Y"], columns) == {"a": 0, "b": 1}


def test_ensure_table_creates_with_default_header():
    store = InMemoryTabularStore()

    table = ensure_table(store, SIGN_IN_LOG)

    assert store.get_header("sign_in_log") == SIGN_IN_LOG.default_header
    assert table.index("contact_id") == 9


def test_ensure_table_appends_missing_columns_without_moving_data():
    store = InMemoryTabularStore(
        {"sign_in_log": [["Date", "Student ID", "Full Name", "Notes"], ["2025-03-01", "S1", "Ana Lopez", "keep"]]}
    )

    table = ensure_table(store, SIGN_IN_LOG)
    header = store.get_header("sign_in_log")

    assert header[:4] == ["Date", "Student ID", "Full Name", "Notes"]
    assert header[4:] == ["School", "Mentor", "Status", "ClaimedBy", "ClaimedAt", "ProcessedAt", "ContactID"]

    row = table.rows()[0]
    assert row.text("person_id") == "S1"
    assert row.text("display_name") == "Ana Lopez"
    assert row.values[3] == "keep"

    table.update(row.key, {"status": "Claimed"})
    assert store.scan("sign_in_log")[0].values[3] == "keep"
    assert store.scan("sign_in_log")[0].values[header.index("Status")] == "Claimed"


def test_ensure_table_is_idempotent():
    store = InMemoryTabularStore()

    ensure_table(store, SIGN_IN_LOG)
    ensure_table(store, SIGN_IN_LOG)

    assert len(store.get_header("sign_in_log")) == len(SIGN_IN_LOG.default_header)


def test_external_table_is_never_created_or_extended():
    store = InMemoryTabularStore()

    with pytest.raises(MissingTableError):
        ensure_table(store, attendance_schema())
    assert open_existing(store, attendance_schema()) is None


def test_unresolvable_required_column_reports_schema_error():
    store = InMemoryTabularStore({"attendance": [["Timestamp", "Group"]]})
    repo = TableAttendanceRepository(store)

    with pytest.raises(SchemaError):
        repo.append(person=Person(person_id="S1"), group="Robotics", timestamp=datetime(2025, 3, 1, 10, 0))

    assert store.scan("attendance") == []
    assert store.get_header("attendance") == ["Timestamp", "Group"]


def test_optional_external_columns_are_skipped_when_absent():
    store = InMemoryTabularStore({"attendance": [["Timestamp", "ID Number", "Group"]]})
    repo = TableAttendanceRepository(store)

    entry = repo.append(
        person=Person(person_id="S1", first_name="Ana", school="Lane Tech"),
        group="Robotics",
        timestamp=datetime(2025, 3, 1, 10, 0),
    )

    stored = store.get_rows("attendance", [entry.row_key])[entry.row_key]
    assert stored.values == (datetime(2025, 3, 1, 10, 0), "S1", "Robotics")
