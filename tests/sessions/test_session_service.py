from __future__ import annotations

import logging

import pytest

from src.signin_desk.signin_desk.core.enums import SessionType
from src.signin_desk.signin_desk.core.exceptions import NotFoundError, ValidationError


@pytest.fixture
def sessions(container):
    return container.session_service


def test_start_is_idempotent_for_same_label_date_and_type(sessions):
    first = sessions.start(label="Robotics", day="2025-03-01", session_type="group")
    sessions.record_sign_in(first.session_id, at=first.created_at)

    again = sessions.start(label="  robotics ", day="2025-03-01", session_type="GROUP")

    assert again.session_id == first.session_id
    assert again.sign_in_count == 1
    assert len(sessions.list_active("2025-03-01")) == 1


def test_type_is_part_of_the_session_key(sessions):
    group = sessions.start(label="Robotics", day="2025-03-01", session_type="group")
    individual = sessions.start(label="Robotics", day="2025-03-01", session_type="individual")

    assert group.session_id != individual.session_id
    assert individual.session_type == SessionType.INDIVIDUAL


def test_blank_type_means_individual_and_unknown_type_is_rejected(sessions):
    assert sessions.start(label="Drop-in", day="2025-03-01", session_type="").session_type == SessionType.INDIVIDUAL

    with pytest.raises(ValidationError):
        sessions.start(label="Drop-in", day="2025-03-01", session_type="workshop")


def test_blank_date_uses_today_in_program_time_zone(sessions):
    session = sessions.start(label="Drop-in", day=None, session_type="individual")

    assert session.day == "2025-03-01"


def test_end_then_start_reactivates_the_same_session(sessions, clock):
    started = sessions.start(label="Robotics", day="2025-03-01", session_type="group")
    clock.advance(hours=1)

    ended = sessions.end(started.session_id)
    ended_again = sessions.end(started.session_id)
    reopened = sessions.start(label="Robotics", day="2025-03-01", session_type="group")

    assert ended.is_active is False
    assert ended.closed_at == clock.now
    assert ended_again.closed_at == clock.now
    assert reopened.session_id == started.session_id
    assert reopened.is_active is True
    assert reopened.closed_at is None
    assert sessions.get(started.session_id).is_active is True


def test_end_unknown_session(sessions):
    with pytest.raises(NotFoundError):
        sessions.end("no-such-session")
    with pytest.raises(ValidationError):
        sessions.end("")


def test_list_active_filters_by_day_and_sorts_by_label(sessions):
    sessions.start(label="zumba", day="2025-03-01", session_type="group")
    sessions.start(label="Art", day="2025-03-01", session_type="group")
    closed = sessions.start(label="Chess", day="2025-03-01", session_type="group")
    sessions.end(closed.session_id)
    sessions.start(label="Tomorrow", day="2025-03-02", session_type="group")

    assert [s.label for s in sessions.list_active("2025-03-01")] == ["Art", "zumba"]


def test_get_active_rejects_closed_sessions(sessions):
    s = sessions.start(label="Robotics", day="2025-03-01", session_type="group")
    sessions.end(s.session_id)

    with pytest.raises(NotFoundError, match="not active"):
        sessions.get_active(s.session_id)


def test_end_is_logged_once(sessions, caplog, monkeypatch):
    started = sessions.start(label="Robotics", day="2025-03-01", session_type="group")
    root = logging.getLogger("signin_desk")
    monkeypatch.setattr(root, "propagate", False)
    caplog.set_level(logging.INFO, logger="signin_desk")
    root.addHandler(caplog.handler)
    try:
        sessions.end(started.session_id)
        sessions.end(started.session_id)
    finally:
        root.removeHandler(caplog.handler)

    ended = [r for r in caplog.records if r.getMessage().startswith("Ended session")]
    assert [r.getMessage() for r in ended] == [f"Ended session {started.session_id} (2025-03-01 Robotics)"]
