from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Sequence

from ..app_logger import get_logger
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import to_iso
from ..common.text import clean, split_first_rest
from ..common.validators import require_non_empty
from ..contacts.model import IndividualNote
from ..contacts.service import ContactSessionService
from ..core.exceptions import DomainError
from ..locking.base import DocumentLock, hold
from ..mentors.service import MentorDirectory
from ..queue.service import QueueService, parse_row_keys
from ..roster.grades import normalize_grade
from ..roster.model import Person
from ..roster.service import RosterDirectory
from ..sessions.model import SignInSession
from ..sessions.service import SignInSessionService

logger = get_logger("desk")


def person_from_payload(student: Optional[Mapping[str, Any]]) -> Person:
    s = student or {}
    person_id = require_non_empty(s.get("id") or s.get("studentId"), "student ID")
    first, last = clean(s.get("firstName")), clean(s.get("lastName"))
    if not first and not last:
        first, last = split_first_rest(s.get("name"))
    return Person(
        person_id=person_id,
        first_name=first,
        last_name=last,
        school=clean(s.get("school")),
        grade=normalize_grade(s.get("grade")),
        email=clean(s.get("email")),
    )


class SignInDesk:
    """Operation boundary of the sign-in desk.

    Every public method returns a plain dict with an ``ok`` flag. Domain errors
    (validation, not found, lock timeout, schema) become ``{"ok": False, "error": ...}``;
    configuration errors propagate to the transport.
    """

    def __init__(
        self,
        *,
        sessions: SignInSessionService,
        queue: QueueService,
        contacts: ContactSessionService,
        roster: RosterDirectory,
        attendance: AttendanceRepository,
        mentors: MentorDirectory,
        lock: DocumentLock,
        lock_timeout: float,
        clock: Callable[[], datetime],
    ):
        self._sessions = sessions
        self._queue = queue
        self._contacts = contacts
        self._roster = roster
        self._attendance = attendance
        self._mentors = mentors
        self._lock = lock
        self._lock_timeout = lock_timeout
        self._clock = clock

    @staticmethod
    def _run(operation: str, fn: Callable[[], Any]) -> Any:
        try:
            return fn()
        except DomainError as e:
            logger.warning("%s failed: %s", operation, e)
            return {"ok": False, "error": str(e)}

    # ---------- sign-in sessions ----------

    def start_sign_in_session(self, label: Any, date: Any = None, session_type: Any = None) -> dict[str, Any]:
        def op():
            session = self._sessions.start(label=label, day=date, session_type=session_type)
            return {"ok": True, "session": session.to_dict()}

        return self._run("startSignInSession", op)

    def end_sign_in_session(self, session_id: Any) -> dict[str, Any]:
        return self._run("endSignInSession", lambda: {"ok": True, "session": self._sessions.end(session_id).to_dict()})

    def list_active_sign_in_sessions(self, date: Any = None) -> dict[str, Any]:
        def op():
            return {"ok": True, "sessions": [s.to_dict() for s in self._sessions.list_active(date)]}

        return self._run("listActiveSignInSessions", op)

    def _sign_in_one(self, session: SignInSession, person: Person) -> dict[str, Any]:
        """Append the attendance/queue row and bump the session counter as one unit. Caller holds the lock."""
        now = self._clock()

        if session.is_group:
            row_key = self._attendance.append(person=person, group=session.label, timestamp=now).row_key
            target = self._attendance.table_name
            undo = self._attendance.discard
        else:
            row_key = self._queue.enqueue(
                person_id=person.person_id,
                display_name=person.full_name,
                school=person.school,
                group=session.label,
                at=now,
            )
            target = self._queue.table_name
            undo = self._queue.discard

        try:
            upsert = self._roster.upsert_known_student(person, sign_in_at=now)
            updated = self._sessions.record_sign_in(session.session_id, at=now)
        except Exception:
            logger.exception("Sign-in bookkeeping failed for session %s; removing row %s", session.session_id, row_key)
            undo(row_key)
            raise

        return {
            "session": updated,
            "student": person.to_dict(),
            "createdKnown": upsert.created,
            "rowIndex": row_key,
            "targetSheet": target,
        }

    def record_student_sign_in(self, session_id: Any, student: Optional[Mapping[str, Any]]) -> dict[str, Any]:
        def op():
            sid = require_non_empty(session_id, "session ID")
            person = person_from_payload(student)
            with hold(self._lock, self._lock_timeout, operation="recordStudentSignIn"):
                session = self._sessions.get_active(sid)
                result = self._sign_in_one(session, person)
            return {"ok": True, **result, "session": result["session"].summary()}

        return self._run("recordStudentSignIn", op)

    def record_student_batch(self, session_id: Any, students: Optional[Sequence[Any]]) -> dict[str, Any]:
        """Sign in several students under one lock; failures are reported per student."""

        def op():
            sid = require_non_empty(session_id, "session ID")
            results: list[dict[str, Any]] = []
            with hold(self._lock, self._lock_timeout, operation="recordStudentBatch"):
                session = self._sessions.get_active(sid)
                for item in students or []:
                    raw = item if isinstance(item, Mapping) else {"id": item}
                    try:
                        person = person_from_payload(raw)
                        r = self._sign_in_one(session, person)
                    except DomainError as e:
                        results.append({"ok": False, "id": clean(raw.get("id") or raw.get("studentId")), "error": str(e)})
                        continue
                    session = r["session"]
                    results.append(
                        {"ok": True, "id": person.person_id, "rowIndex": r["rowIndex"], "createdKnown": r["createdKnown"]}
                    )
            return {"ok": True, "session": session.summary(), "results": results}

        return self._run("recordStudentBatch", op)

    # ---------- queue ----------

    def list_queue(self, date: Any = None, viewer: Any = None) -> dict[str, Any]:
        def op():
            who = clean(viewer)
            return {"ok": True, "items": [e.to_dict(viewer=who) for e in self._queue.list_queue(date)]}

        return self._run("listQueue", op)

    def get_sign_ins_by_date(self, date: Any = None) -> list[dict[str, Any]]:
        """Older flat shape of the queue listing, kept for existing callers."""
        try:
            entries = self._queue.list_queue(date)
        except DomainError as e:
            logger.warning("getSignInsByDate failed: %s", e)
            return []
        return [
            {
                "rowIndex": e.row_key,
                "timestamp": to_iso(e.timestamp),
                "id": e.person_id,
                "name": e.display_name,
                "school": e.school,
                "mentor": e.mentor_name or e.mentor_id,
                "status": e.status.value,
            }
            for e in entries
        ]

    def claim_rows(self, row_keys: Any, claimant: Any = None) -> dict[str, Any]:
        def op():
            result = self._queue.claim(row_keys, claimant)
            return {"ok": True, "applied": result.applied, "failed": result.failed}

        return self._run("claimRows", op)

    def mark_processed(self, row_keys: Any, contact_id: Any) -> dict[str, Any]:
        def op():
            result = self._queue.mark_processed(row_keys, contact_id)
            return {"ok": True, "rows": result.rows, "contactId": result.contact_id, "skipped": result.skipped}

        return self._run("markProcessed", op)

    def mark_processed_by_ids(self, date: Any, ids: Any, contact_id: Any, status: Any = None) -> dict[str, Any]:
        def op():
            result = self._queue.mark_processed_by_ids(date, ids, contact_id, status)
            return {"ok": True, "matched": result.matched, "rows": result.rows}

        return self._run("markProcessedByIds", op)

    # ---------- group contact notes ----------

    def create_or_update_group_contact_session(
        self, date: Any, group: Any, topic: Any = "", summary: Any = "", duration_minutes: Any = None
    ) -> dict[str, Any]:
        def op():
            outcome = self._contacts.create_or_update_group(
                day=date, group=group, topic=topic, summary=summary, duration_minutes=duration_minutes
            )
            return {
                "ok": True,
                "contactId": outcome.contact_id,
                "created": outcome.created,
                "updated": not outcome.created,
            }

        return self._run("createOrUpdateGroupContactSession", op)

    def save_group_participants(self, contact_id: Any, participants: Any) -> dict[str, Any]:
        def op():
            added = self._contacts.save_group_participants(contact_id, participants)
            total = len(self._contacts.group_participants(contact_id))
            return {"ok": True, "contactId": clean(contact_id), "added": added, "totalForContact": total}

        return self._run("saveGroupParticipants", op)

    def save_group_mentors(self, contact_id: Any, mentors: Any) -> dict[str, Any]:
        def op():
            added = self._contacts.save_group_mentors(contact_id, mentors)
            return {"ok": True, "contactId": clean(contact_id), "added": added}

        return self._run("saveGroupMentors", op)

    def save_full_group_note(
        self,
        date: Any,
        group: Any,
        topic: Any,
        summary: Any,
        duration_minutes: Any,
        participants: Any = None,
        mentors: Any = None,
    ) -> dict[str, Any]:
        def op():
            r = self._contacts.save_full_group_note(
                day=date,
                group=group,
                topic=topic,
                summary=summary,
                duration_minutes=duration_minutes,
                participants=participants,
                mentors=mentors,
            )
            return {
                "ok": True,
                "contactId": r.contact_id,
                "created": r.created,
                "participantsAdded": r.participants_added,
                "mentorsAdded": r.mentors_added,
            }

        return self._run("saveFullGroupNote", op)

    def get_latest_group_contact_session(self, date: Any, group: Any) -> dict[str, Any]:
        def op():
            s = self._contacts.latest_group_session(date, group)
            return {"ok": True, "note": s.note() if s else None, "contactId": s.contact_id if s else None}

        return self._run("getLatestGroupContactSession", op)

    def get_group_prefill(self, date: Any, groups: Any) -> dict[str, Any]:
        def op():
            prefill = self._contacts.group_prefill(date, groups)
            return {"ok": True, "groups": {g: p.to_dict() for g, p in prefill.items()}}

        return self._run("getGroupPrefill", op)

    # ---------- individual contact notes ----------

    def save_individual_contact_session(
        self,
        date: Any,
        people: Any,
        payload: Optional[Mapping[str, Any]] = None,
        queue_row_keys: Any = None,
    ) -> dict[str, Any]:
        """Save an individual note, then stamp the related queue rows Processed.

        The queue stamping is best-effort: its failure is reported under ``processed``
        and does not undo the saved note.
        """

        def op():
            note = IndividualNote.from_payload(payload)
            with hold(self._lock, self._lock_timeout, operation="saveIndividualContactSession"):
                saved = self._contacts.create_individual(day=date, people=people, note=note)

                candidates: Any = queue_row_keys
                if candidates in (None, "", [], ()):
                    candidates = [
                        p.get("rowKey", p.get("rowIndex"))
                        for p in people or []
                        if isinstance(p, Mapping) and p.get("rowKey", p.get("rowIndex")) not in (None, "")
                    ]

                processed: Optional[dict[str, Any]] = None
                if candidates:
                    try:
                        r = self._queue.mark_processed(parse_row_keys(candidates), saved.contact_id)
                        processed = {"ok": True, "rows": r.rows, "contactId": r.contact_id}
                    except Exception as e:
                        logger.warning("Queue stamping after contact %s failed: %s", saved.contact_id, e)
                        processed = {"ok": False, "error": str(e)}

            return {
                "ok": True,
                "contactId": saved.contact_id,
                "participantsSaved": saved.participants_saved,
                "processed": processed,
            }

        return self._run("saveIndividualContactSession", op)

    def list_recent_contacts_for_ids(self, ids: Any, per_id: Any = None) -> dict[str, Any]:
        def op():
            recent = self._contacts.recent_contacts_for_ids(ids, per_id)
            return {"ok": True, "contacts": {sid: [c.to_dict() for c in items] for sid, items in recent.items()}}

        return self._run("listRecentContactsForIds", op)

    # ---------- people ----------

    def suggest_people(self, query: Any, limit: Any = None) -> list[dict[str, Any]]:
        return [s.to_dict() for s in self._roster.suggest(query, limit)]

    sign_in_suggest_people = suggest_people

    def lookup_sign_in_by_id(self, person_id: Any) -> dict[str, Any]:
        def op():
            person, is_known = self._roster.lookup(person_id)
            return {"ok": True, "student": person.to_dict(), "isKnown": is_known}

        return self._run("lookupSignInById", op)

    def get_names_for_ids(self, ids: Any) -> list[dict[str, str]]:
        if isinstance(ids, (str, int)):
            ids = [ids]
        return [{"id": pid, "name": name or pid} for pid, name in self._roster.names_for_ids(ids or []).items()]

    def check_id_status(self, person_id: Any) -> dict[str, Any]:
        return self._run("checkIdStatus", lambda: {"ok": True, **self._roster.check_id_status(person_id)})

    def bootstrap_known_students(self) -> dict[str, Any]:
        def op():
            with hold(self._lock, self._lock_timeout, operation="bootstrapKnownStudents"):
                return self._roster.bootstrap_known_students().to_dict()

        return self._run("bootstrapKnownStudents", op)

    def get_mentors(self, active_only: bool = True) -> list[dict[str, Any]]:
        return [m.to_dict() for m in self._mentors.list(active_only=active_only)]
