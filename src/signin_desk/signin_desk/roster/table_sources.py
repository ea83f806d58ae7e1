from __future__ import annotations

import re
from typing import Iterator
from zoneinfo import ZoneInfo

from ..common.datetime_utils import as_aware, parse_loose_datetime
from ..common.text import split_first_rest
from ..core.enums import SourcePriority
from ..storage.repository import TabularStore
from ..storage.schema import TableSchema
from ..storage.table import open_existing
from ..storage.tables import SIGN_IN_LOG
from .model import SourceRecord
from .repository import KnownStudentRepository

_EMAIL_SPLIT_RE = re.compile(r"[;,]")


class RosterTableSource:
    """Intake/roster form submissions. The most trusted source."""

    def __init__(self, store: TabularStore, schema: TableSchema, *, tz: ZoneInfo, priority: int = SourcePriority.ROSTER):
        self._store = store
        self._schema = schema
        self._tz = tz
        self.name = schema.name
        self.priority = int(priority)

    def records(self) -> Iterator[SourceRecord]:
        table = open_existing(self._store, self._schema)
        if table is None:
            return
        for row in table.rows():
            person_id = row.text("person_id")
            if not person_id:
                continue
            first, last = row.text("first_name"), row.text("last_name")
            if not first and not last:
                first, last = split_first_rest(row.text("full_name"))
            email = _EMAIL_SPLIT_RE.split(row.text("email") or row.text("alt_email"))[0].strip()
            yield SourceRecord(
                source=self.name,
                priority=self.priority,
                person_id=person_id,
                first_name=first,
                last_name=last,
                school=row.text("school"),
                grade=row.text("grade") or row.text("grade_at_intake"),
                email=email,
                seen_at=as_aware(parse_loose_datetime(row.get("timestamp")), self._tz),
            )


class SignInLogSource:
    def __init__(self, store: TabularStore, *, tz: ZoneInfo, schema: TableSchema = SIGN_IN_LOG):
        self._store = store
        self._schema = schema
        self._tz = tz
        self.name = schema.name
        self.priority = int(SourcePriority.SIGN_IN_LOG)

    def records(self) -> Iterator[SourceRecord]:
        table = open_existing(self._store, self._schema)
        if table is None:
            return
        for row in table.rows():
            person_id = row.text("person_id")
            if not person_id:
                continue
            first, last = split_first_rest(row.text("display_name"))
            yield SourceRecord(
                source=self.name,
                priority=self.priority,
                person_id=person_id,
                first_name=first,
                last_name=last,
                school=row.text("school"),
                seen_at=as_aware(parse_loose_datetime(row.get("timestamp")), self._tz),
            )


class AttendanceSource:
    def __init__(self, store: TabularStore, schema: TableSchema, *, tz: ZoneInfo):
        self._store = store
        self._schema = schema
        self._tz = tz
        self.name = schema.name
        self.priority = int(SourcePriority.ATTENDANCE)

    def records(self) -> Iterator[SourceRecord]:
        table = open_existing(self._store, self._schema)
        if table is None:
            return
        for row in table.rows():
            person_id = row.text("person_id")
            if not person_id:
                continue
            contact = row.text("contact")
            yield SourceRecord(
                source=self.name,
                priority=self.priority,
                person_id=person_id,
                first_name=row.text("first_name"),
                last_name=row.text("last_name"),
                school=row.text("school"),
                grade=row.text("school_year"),
                email=contact if "@" in contact else "",
                seen_at=as_aware(parse_loose_datetime(row.get("timestamp")), self._tz),
            )


class KnownStudentSource:
    def __init__(self, known: KnownStudentRepository, *, tz: ZoneInfo, name: str = "known_students"):
        self._known = known
        self._tz = tz
        self.name = name
        self.priority = int(SourcePriority.KNOWN_STUDENTS)

    def records(self) -> Iterator[SourceRecord]:
        for s in self._known.list_all():
            yield SourceRecord(
                source=self.name,
                priority=self.priority,
                person_id=s.person_id,
                first_name=s.first_name,
                last_name=s.last_name,
                school=s.school,
                grade=s.grade,
                email=s.email,
                seen_at=as_aware(s.last_sign_in, self._tz),
            )
