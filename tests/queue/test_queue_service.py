from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from src.signin_desk.signin_desk.core.enums import QueueStatus
from src.signin_desk.signin_desk.core.exceptions import ValidationError
from src.signin_desk.signin_desk.roster.model import Person
from src.signin_desk.signin_desk.storage.table import ensure_table
from src.signin_desk.signin_desk.storage.tables import SIGN_IN_LOG

CHICAGO = ZoneInfo("America/Chicago")


@pytest.fixture
def queue(container):
    return container.queue_service


def _enqueue(queue, clock, person_id, name=""):
    return queue.enqueue(person_id=person_id, display_name=name, school="Lane Tech", group="Drop-in", at=clock())


def _status(queue, row_key, day="2025-03-01"):
    return {e.row_key: e for e in queue.list_queue(day)}[row_key]


def test_processed_rows_cannot_be_claimed(queue, clock):
    row = _enqueue(queue, clock, "S1", "Ana Lopez")
    queue.mark_processed([row], "C-1")

    result = queue.claim([row], "staffB")

    assert result.failed == [row]
    assert result.applied == []
    entry = _status(queue, row)
    assert entry.status == QueueStatus.PROCESSED
    assert entry.claimed_by == ""


def test_claim_moves_pending_to_claimed_and_last_claimant_wins(queue, clock):
    row = _enqueue(queue, clock, "S1", "Ana Lopez")
    assert _status(queue, row).status == QueueStatus.PENDING

    queue.claim([row], "staffA")
    clock.advance(minutes=5)
    result = queue.claim([str(row)], "staffB")

    entry = _status(queue, row)
    assert result.applied == [row]
    assert entry.status == QueueStatus.CLAIMED
    assert entry.claimed_by == "staffB"
    assert entry.claimed_at == clock.now


def test_claim_reports_unknown_rows_as_failed(queue, clock):
    row = _enqueue(queue, clock, "S1")

    result = queue.claim([row, 99999], "")

    assert result.applied == [row]
    assert result.failed == [99999]
    assert _status(queue, row).claimed_by == "unknown"


def test_claim_requires_rows(queue):
    with pytest.raises(ValidationError, match="No rows provided"):
        queue.claim([], "staffA")
    with pytest.raises(ValidationError):
        queue.claim(["x", None], "staffA")


def test_mark_processed_skips_rows_that_do_not_exist(queue, clock):
    rows = [_enqueue(queue, clock, f"S{i}") for i in range(3)]

    result = queue.mark_processed([rows[0], rows[2], 424242], "C-9")

    assert result.rows == 2
    assert result.skipped == [424242]
    assert _status(queue, rows[0]).contact_id == "C-9"
    assert _status(queue, rows[1]).status == QueueStatus.PENDING
    assert _status(queue, rows[2]).processed_at == clock.now


def test_list_queue_uses_the_calendar_day_in_program_time_zone(queue, store):
    log = ensure_table(store, SIGN_IN_LOG)
    late_evening = log.append({"timestamp": datetime(2025, 3, 2, 5, 30, tzinfo=timezone.utc), "person_id": "S1"})
    next_day = log.append({"timestamp": datetime(2025, 3, 2, 7, 0, tzinfo=timezone.utc), "person_id": "S2"})
    log.append({"timestamp": "3/1/2025", "person_id": ""})

    assert [e.row_key for e in queue.list_queue("2025-03-01")] == [late_evening]
    assert [e.row_key for e in queue.list_queue("2025-03-02")] == [next_day]


def test_status_is_derived_from_stamps_before_raw_status(queue, store):
    log = ensure_table(store, SIGN_IN_LOG)
    ts = datetime(2025, 3, 1, 9, 0, tzinfo=CHICAGO)
    stamped = log.append({"timestamp": ts, "person_id": "S1", "status": "Pending", "processed_at": ts})
    linked = log.append({"timestamp": ts, "person_id": "S2", "status": "", "contact_id": "C-1"})
    plain = log.append({"timestamp": ts, "person_id": "S3", "status": "claimed"})

    statuses = {e.row_key: e.status for e in queue.list_queue("2025-03-01")}

    assert statuses == {stamped: QueueStatus.PROCESSED, linked: QueueStatus.CLAIMED, plain: QueueStatus.CLAIMED}


def test_missing_names_are_backfilled_from_the_roster(container, queue, clock):
    container.roster.upsert_known_student(Person(person_id="S1", first_name="Ana", last_name="Lopez"))
    known = _enqueue(queue, clock, "S1")
    unknown = _enqueue(queue, clock, "S404")

    names = {e.row_key: e.display_name for e in queue.list_queue("2025-03-01")}

    assert names == {known: "Ana Lopez", unknown: "S404"}


def test_mentor_cell_is_split_into_name_or_id(queue, store):
    log = ensure_table(store, SIGN_IN_LOG)
    ts = datetime(2025, 3, 1, 9, 0, tzinfo=CHICAGO)
    by_name = log.append({"timestamp": ts, "person_id": "S1", "mentor": "Alex Rivera"})
    by_id = log.append({"timestamp": ts, "person_id": "S2", "mentor": "staffa"})

    items = {e.row_key: e.to_dict() for e in queue.list_queue("2025-03-01")}

    assert (items[by_name]["mentorName"], items[by_name]["mentorId"]) == ("Alex Rivera", "")
    assert (items[by_id]["mentorName"], items[by_id]["mentorId"]) == ("", "STAFFA")
    assert items[by_id]["mentor"] == "STAFFA"


def test_mine_flag_compares_claimant_case_insensitively(queue, clock):
    row = _enqueue(queue, clock, "S1")
    queue.claim([row], "StaffA@example.org")

    entry = _status(queue, row)

    assert entry.to_dict(viewer="staffa@EXAMPLE.org")["mine"] is True
    assert entry.to_dict(viewer="other@example.org")["mine"] is False
    assert entry.to_dict()["mine"] is False


def test_mark_processed_by_ids_appends_contact_ids_once(queue, clock):
    row = _enqueue(queue, clock, "S1")
    other = _enqueue(queue, clock, "S2")

    first = queue.mark_processed_by_ids("2025-03-01", ["s1"], "C-1")
    queue.mark_processed_by_ids("2025-03-01", ["S1"], "C-2")
    queue.mark_processed_by_ids("2025-03-01", ["S1"], "C-1")

    entry = _status(queue, row)
    assert first.matched == 1
    assert first.rows == [row]
    assert entry.contact_id == "C-1,C-2"
    assert entry.processed_at == clock.now
    assert _status(queue, other).status == QueueStatus.PENDING


def test_mark_processed_by_ids_never_downgrades_processed_rows(queue, clock):
    row = _enqueue(queue, clock, "S1")
    queue.mark_processed([row], "C-1")

    queue.mark_processed_by_ids("2025-03-01", ["S1"], "", status="Claimed")

    assert _status(queue, row).status == QueueStatus.PROCESSED


def test_mark_processed_by_ids_validates_input(queue):
    with pytest.raises(ValidationError):
        queue.mark_processed_by_ids("2025-03-01", [], "C-1")
    with pytest.raises(ValidationError, match="Unknown queue status"):
        queue.mark_processed_by_ids("2025-03-01", ["S1"], "C-1", status="archived")


@pytest.mark.parametrize("ids", ["12", 12])
def test_mark_processed_by_ids_takes_a_single_id(queue, clock, ids):
    one, two = _enqueue(queue, clock, "1"), _enqueue(queue, clock, "2")
    twelve = _enqueue(queue, clock, "12")

    result = queue.mark_processed_by_ids("2025-03-01", ids, "C-1")

    assert result.rows == [twelve]
    assert _status(queue, twelve).status == QueueStatus.PROCESSED
    assert {_status(queue, one).status, _status(queue, two).status} == {QueueStatus.PENDING}
