from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence
from zoneinfo import ZoneInfo

from ..common.datetime_utils import parse_loose_datetime, ymd
from ..common.text import clean, to_optional_int
from ..storage.repository import TabularStore
from ..storage.table import RowView, Table, ensure_table
from ..storage.tables import (
    GROUP_CONTACT_MENTORS,
    GROUP_CONTACT_PARTICIPANTS,
    GROUP_CONTACT_SESSIONS,
    INDIVIDUAL_CONTACT_PARTICIPANTS,
    INDIVIDUAL_CONTACT_SESSIONS,
)
from .model import (
    GroupContactSession,
    GroupMentor,
    GroupParticipant,
    IndividualContactSession,
    IndividualNote,
    IndividualParticipant,
)
from .repository import GroupContactRepository, IndividualContactRepository


class TableGroupContactRepository(GroupContactRepository):
    def __init__(self, store: TabularStore, *, tz: ZoneInfo):
        self._store = store
        self._tz = tz

    def _sessions(self) -> Table:
        return ensure_table(self._store, GROUP_CONTACT_SESSIONS)

    def _participants(self) -> Table:
        return ensure_table(self._store, GROUP_CONTACT_PARTICIPANTS)

    def _mentors(self) -> Table:
        return ensure_table(self._store, GROUP_CONTACT_MENTORS)

    def _to_session(self, row: RowView) -> GroupContactSession:
        return GroupContactSession(
            contact_id=row.text("contact_id"),
            day=ymd(row.get("date"), self._tz),
            group=row.text("group"),
            topic=row.text("topic"),
            summary=row.text("summary"),
            duration_minutes=to_optional_int(row.get("duration_minutes")),
            created_at=parse_loose_datetime(row.get("created_at")),
            edited_at=parse_loose_datetime(row.get("edited_at")),
            row_key=row.key,
        )

    def list_sessions(self) -> Sequence[GroupContactSession]:
        return [self._to_session(r) for r in self._sessions().rows()]

    def get_session(self, row_key: int) -> Optional[GroupContactSession]:
        row = self._sessions().get(row_key)
        return self._to_session(row) if row else None

    def insert_session(
        self,
        *,
        contact_id: str,
        day: str,
        group: str,
        topic: str,
        summary: str,
        duration_minutes: Optional[int],
        now: datetime,
    ) -> int:
        return self._sessions().append(
            {
                "contact_id": contact_id,
                "date": day,
                "group": group,
                "topic": topic,
                "summary": summary,
                "duration_minutes": "" if duration_minutes is None else duration_minutes,
                "created_at": now,
                "edited_at": now,
            }
        )

    def update_session(
        self,
        row_key: int,
        *,
        topic: str,
        summary: str,
        duration_minutes: Optional[int],
        now: datetime,
        contact_id: Optional[str] = None,
    ) -> bool:
        changes = {
            "topic": topic,
            "summary": summary,
            "duration_minutes": "" if duration_minutes is None else duration_minutes,
            "edited_at": now,
        }
        if contact_id:
            changes["contact_id"] = contact_id
        return self._sessions().update(row_key, changes)

    def list_mentors(self) -> Sequence[GroupMentor]:
        return [
            GroupMentor(contact_id=r.text("contact_id"), mentor_id=r.text("mentor_id"), name=r.text("name"))
            for r in self._mentors().rows()
            if r.text("contact_id")
        ]

    def list_participants(self, contact_id: str) -> Sequence[GroupParticipant]:
        cid = clean(contact_id)
        return [
            GroupParticipant(
                contact_id=cid,
                student_id=r.text("student_id"),
                first_name=r.text("first_name"),
                last_name=r.text("last_name"),
            )
            for r in self._participants().rows()
            if r.text("contact_id") == cid
        ]

    @staticmethod
    def _replace(table: Table, contact_id: str, records: list[dict]) -> int:
        stale = [r.key for r in table.rows() if r.text("contact_id") == contact_id]
        if stale:
            table.delete(stale)
        return len(table.append_many(records))

    def replace_participants(self, contact_id: str, participants: Sequence[GroupParticipant], *, now: datetime) -> int:
        return self._replace(
            self._participants(),
            contact_id,
            [
                {
                    "contact_id": contact_id,
                    "student_id": p.student_id,
                    "first_name": p.first_name,
                    "last_name": p.last_name,
                    "created_at": now,
                    "edited_at": now,
                }
                for p in participants
            ],
        )

    def replace_mentors(self, contact_id: str, mentors: Sequence[GroupMentor], *, now: datetime) -> int:
        return self._replace(
            self._mentors(),
            contact_id,
            [
                {
                    "contact_id": contact_id,
                    "mentor_id": m.mentor_id,
                    "name": m.name,
                    "created_at": now,
                    "edited_at": now,
                }
                for m in mentors
            ],
        )


class TableIndividualContactRepository(IndividualContactRepository):
    def __init__(self, store: TabularStore, *, tz: ZoneInfo):
        self._store = store
        self._tz = tz

    def _sessions(self) -> Table:
        return ensure_table(self._store, INDIVIDUAL_CONTACT_SESSIONS)

    def _participants(self) -> Table:
        return ensure_table(self._store, INDIVIDUAL_CONTACT_PARTICIPANTS)

    def insert_session(self, session: IndividualContactSession, participants: Sequence[IndividualParticipant]) -> None:
        # Resolve both tables before writing so a schema problem cannot leave a session without links.
        sessions, links = self._sessions(), self._participants()
        n = session.note
        sessions.append(
            {
                "contact_id": session.contact_id,
                "date": session.day,
                "duration_minutes": "" if n.duration_minutes is None else n.duration_minutes,
                "contact_with": n.contact_with,
                "type_of_contact": n.type_of_contact,
                "topic": n.topic,
                "success": n.success,
                "notes": n.notes,
                "referrals": n.referrals,
                "location": n.location,
                "mentor_id": n.mentor_id,
                "created_at": session.created_at,
                "edited_at": session.edited_at,
            }
        )
        links.append_many(
            [
                {
                    "contact_id": p.contact_id,
                    "student_id": p.student_id,
                    "notes_student": p.notes_student,
                    "created_at": session.created_at,
                }
                for p in participants
            ]
        )

    def list_sessions(self) -> Sequence[IndividualContactSession]:
        out: list[IndividualContactSession] = []
        for r in self._sessions().rows():
            if not r.text("contact_id"):
                continue
            out.append(
                IndividualContactSession(
                    contact_id=r.text("contact_id"),
                    day=ymd(r.get("date"), self._tz),
                    note=IndividualNote(
                        contact_with=r.text("contact_with"),
                        type_of_contact=r.text("type_of_contact"),
                        topic=r.text("topic"),
                        success=r.text("success"),
                        notes=r.text("notes"),
                        referrals=r.text("referrals"),
                        location=r.text("location"),
                        duration_minutes=to_optional_int(r.get("duration_minutes")),
                        mentor_id=r.text("mentor_id").upper(),
                    ),
                    created_at=parse_loose_datetime(r.get("created_at")),
                    edited_at=parse_loose_datetime(r.get("edited_at")),
                )
            )
        return out

    def list_participants(self) -> Sequence[IndividualParticipant]:
        return [
            IndividualParticipant(
                contact_id=r.text("contact_id"),
                student_id=r.text("student_id"),
                notes_student=r.text("notes_student"),
            )
            for r in self._participants().rows()
            if r.text("contact_id") and r.text("student_id")
        ]
