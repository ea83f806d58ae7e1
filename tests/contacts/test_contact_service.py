from __future__ import annotations

import pytest

from src.signin_desk.signin_desk.cache import keys as cache_keys
from src.signin_desk.signin_desk.contacts.model import IndividualNote
from src.signin_desk.signin_desk.core.exceptions import ValidationError
from src.signin_desk.signin_desk.roster.model import Person
from src.signin_desk.signin_desk.storage.table import ensure_table
from src.signin_desk.signin_desk.storage.tables import GROUP_CONTACT_SESSIONS

DAY = "2025-03-01"


@pytest.fixture
def contacts(container):
    return container.contact_service


def _rows(store, name):
    return [r.values for r in store.scan(name)]


def test_group_session_upsert_keeps_one_row_per_date_and_group(contacts, store):
    first = contacts.create_or_update_group(day=DAY, group="Robotics", topic="Kickoff", summary="", duration_minutes="45")
    again = contacts.create_or_update_group(day=DAY, group=" Robotics ", topic="Build", summary="Gears", duration_minutes=60)
    third = contacts.create_or_update_group(day=DAY, group="Robotics", topic="Test", summary="", duration_minutes=None)

    assert first.created is True
    assert again.created is False and third.created is False
    assert first.contact_id == again.contact_id == third.contact_id
    assert len(store.scan("group_contact_sessions")) == 1

    latest = contacts.latest_group_session(DAY, "Robotics")
    assert latest.note() == {"topic": "Test", "summary": "", "duration": None}


def test_group_sessions_differ_by_date(contacts):
    a = contacts.create_or_update_group(day=DAY, group="Robotics")
    b = contacts.create_or_update_group(day="2025-03-02", group="Robotics")

    assert a.contact_id != b.contact_id


def test_group_upsert_validates_input(contacts):
    with pytest.raises(ValidationError, match="date"):
        contacts.create_or_update_group(day="", group="Robotics")
    with pytest.raises(ValidationError, match="group"):
        contacts.create_or_update_group(day=DAY, group="   ")


def test_stale_row_hint_falls_back_to_a_scan(contacts, container, store):
    other = contacts.create_or_update_group(day=DAY, group="Chess")
    robotics = contacts.create_or_update_group(day=DAY, group="Robotics")
    container.cache.put(cache_keys.group_row_hint(DAY, "Robotics"), other.row_key)

    again = contacts.create_or_update_group(day=DAY, group="Robotics", topic="Updated")

    assert again.contact_id == robotics.contact_id
    assert again.row_key == robotics.row_key
    assert len(store.scan("group_contact_sessions")) == 2
    assert contacts.latest_group_session(DAY, "Chess").topic == ""


def test_existing_row_without_contact_id_gets_one(contacts, store):
    ensure_table(store, GROUP_CONTACT_SESSIONS).append({"date": DAY, "group": "Robotics", "topic": "Legacy"})

    outcome = contacts.create_or_update_group(day=DAY, group="Robotics", topic="Now")

    assert outcome.created is False
    assert outcome.contact_id
    assert contacts.contact_id_for_group(DAY, "Robotics") == outcome.contact_id


def test_saving_participants_replaces_previous_rows(contacts, store):
    cid = contacts.create_or_update_group(day=DAY, group="Robotics").contact_id
    other = contacts.create_or_update_group(day=DAY, group="Chess").contact_id
    contacts.save_group_participants(other, [{"id": "S9", "name": "Zed Zee"}])

    contacts.save_group_participants(cid, [{"id": "S1", "name": "Ana Maria Lopez"}, {"id": "S2"}])
    added = contacts.save_group_participants(cid, ["S2", {"id": "s3", "firstName": "Cy"}, {"id": "S3"}, {"id": ""}])

    people = contacts.group_participants(cid)
    assert added == 2
    assert sorted(p.student_id for p in people) == ["S2", "s3"]
    assert len(store.scan("group_contact_participants")) == 3
    assert [(p.first_name, p.last_name) for p in contacts.group_participants(other)] == [("Zed", "Zee")]


def test_participant_names_split_on_the_last_token(contacts):
    cid = contacts.create_or_update_group(day=DAY, group="Robotics").contact_id

    contacts.save_group_participants(cid, [{"id": "S1", "name": "Ana Maria Lopez"}])

    p = contacts.group_participants(cid)[0]
    assert (p.first_name, p.last_name) == ("Ana Maria", "Lopez")


def test_single_token_participant_name_is_a_last_name(contacts):
    cid = contacts.create_or_update_group(day=DAY, group="Robotics").contact_id

    contacts.save_group_participants(cid, [{"id": "S1", "name": "Cher"}])

    p = contacts.group_participants(cid)[0]
    assert (p.first_name, p.last_name) == ("", "Cher")


def test_saving_mentors_dedupes_and_fills_names(contacts, store):
    cid = contacts.create_or_update_group(day=DAY, group="Robotics").contact_id

    contacts.save_group_mentors(cid, ["staffb"])
    added = contacts.save_group_mentors(cid, ["staffa", {"id": "STAFFA"}, {"id": "x1", "name": "Guest Mentor"}, "nobody"])

    assert added == 3
    names = {r[1]: r[2] for r in _rows(store, "group_contact_mentors")}
    assert names == {"STAFFA": "Alex Rivera", "X1": "Guest Mentor", "NOBODY": "NOBODY"}


def test_prefill_slices_one_day_index_and_is_invalidated_by_writes(contacts):
    contacts.save_full_group_note(
        day=DAY,
        group="Robotics",
        topic="Kickoff",
        summary="Intro",
        duration_minutes=30,
        participants=["S1"],
        mentors=["staffa"],
    )

    prefill = contacts.group_prefill(DAY, ["Robotics", "Chess", ""])
    assert set(prefill) == {"Robotics", "Chess"}
    assert prefill["Robotics"].note == {"topic": "Kickoff", "summary": "Intro", "duration": 30}
    assert prefill["Robotics"].mentors == [{"id": "STAFFA", "name": "Alex Rivera"}]
    assert prefill["Chess"].to_dict() == {"contactId": None, "note": None, "mentors": []}

    contacts.create_or_update_group(day=DAY, group="Robotics", topic="Changed", summary="", duration_minutes=None)

    assert contacts.group_prefill(DAY, ["Robotics"])["Robotics"].note["topic"] == "Changed"


def test_full_group_note_reports_counts(contacts):
    r = contacts.save_full_group_note(
        day=DAY,
        group="Robotics",
        topic="Kickoff",
        summary="",
        duration_minutes=30,
        participants=["S1", "S2", "s1"],
        mentors=[],
    )

    assert r.created is True
    assert (r.participants_added, r.mentors_added) == (2, 0)


def test_individual_session_always_creates_a_new_contact(contacts, store):
    note = IndividualNote.from_payload({"topic": "Check-in", "referrals": ["Tutoring", " ", "Food"], "mentorId": "staffa"})

    first = contacts.create_individual(day=DAY, people=[{"id": "S1"}, {"id": "s1"}, "S2"], note=note)
    second = contacts.create_individual(day=DAY, people=["S1"], note=note)

    assert first.contact_id != second.contact_id
    assert first.participants_saved == 2
    assert first.student_ids == ["S1", "S2"]
    assert len(store.scan("individual_contact_sessions")) == 2
    assert len(store.scan("individual_contact_participants")) == 3
    assert note.referrals == "Tutoring, Food"


def test_individual_session_needs_a_student(contacts):
    with pytest.raises(ValidationError, match="at least one student"):
        contacts.create_individual(day=DAY, people=[{"id": " "}], note=IndividualNote())


def test_recent_contacts_are_newest_first_with_mentor_names(container, contacts):
    container.roster.upsert_known_student(Person(person_id="S1", first_name="Ana", last_name="Lopez"))
    older = contacts.create_individual(day="2025-02-01", people=["S1"], note=IndividualNote(topic="Old"))
    newer = contacts.create_individual(day=DAY, people=["S1", "S2"], note=IndividualNote(topic="New", mentor_id="STAFFA"))

    recent = contacts.recent_contacts_for_ids(["S1", "S2", "S3", ""], per_id=1)

    assert set(recent) == {"S1", "S2", "S3"}
    assert [c.contact_id for c in recent["S1"]] == [newer.contact_id]
    assert recent["S1"][0].to_dict()["mentorName"] == "Alex Rivera"
    assert recent["S1"][0].display_name == "Ana Lopez"
    assert recent["S3"] == []

    all_for_s1 = contacts.recent_contacts_for_ids(["S1"])
    assert [c.contact_id for c in all_for_s1["S1"]] == [newer.contact_id, older.contact_id]
