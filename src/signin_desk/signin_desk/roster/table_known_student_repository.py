from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import parse_loose_datetime
from ..common.text import id_key
from ..storage.repository import TabularStore
from ..storage.table import RowView, ensure_table
from ..storage.schema import TableSchema
from ..storage.tables import KNOWN_STUDENTS
from .grades import normalize_grade
from .model import KnownStudent, Person, UpsertResult
from .repository import KnownStudentRepository

_PROFILE_FIELDS = ("first_name", "last_name", "school", "grade", "email")


class TableKnownStudentRepository(KnownStudentRepository):
    def __init__(self, store: TabularStore, schema: TableSchema = KNOWN_STUDENTS):
        self._store = store
        self._schema = schema

    @property
    def table_name(self) -> str:
        return self._schema.name

    @staticmethod
    def _to_student(row: RowView) -> KnownStudent:
        return KnownStudent(
            person_id=row.text("person_id"),
            first_name=row.text("first_name"),
            last_name=row.text("last_name"),
            school=row.text("school"),
            grade=normalize_grade(row.text("grade")),
            email=row.text("email"),
            created_at=parse_loose_datetime(row.get("created_at")),
            last_sign_in=parse_loose_datetime(row.get("last_sign_in")),
            row_key=row.key,
        )

    def list_all(self) -> Sequence[KnownStudent]:
        table = ensure_table(self._store, self._schema)
        return [self._to_student(r) for r in table.rows() if r.text("person_id")]

    def find(self, person_id: str) -> Optional[KnownStudent]:
        key = id_key(person_id)
        if not key:
            return None
        for student in self.list_all():
            if id_key(student.person_id) == key:
                return student
        return None

    def upsert(self, person: Person, *, now: datetime, sign_in_at: Optional[datetime] = None) -> UpsertResult:
        table = ensure_table(self._store, self._schema)
        key = id_key(person.person_id)
        profile = {f: getattr(person, f) for f in _PROFILE_FIELDS}

        for row in table.rows():
            if id_key(row.get("person_id")) != key:
                continue
            changes = {f: v for f, v in profile.items() if v}
            if sign_in_at is not None:
                changes["last_sign_in"] = sign_in_at
            if not row.text("created_at"):
                changes["created_at"] = now
            if changes:
                table.update(row.key, changes)
            return UpsertResult(created=False, row_key=row.key)

        row_key = table.append(
            {
                "person_id": person.person_id,
                **profile,
                "created_at": now,
                "last_sign_in": sign_in_at if sign_in_at is not None else "",
            }
        )
        return UpsertResult(created=True, row_key=row_key)

    def insert_many(self, students: Sequence[KnownStudent], *, now: datetime) -> int:
        table = ensure_table(self._store, self._schema)
        keys = table.append_many(
            [
                {
                    "person_id": s.person_id,
                    **{f: getattr(s, f) for f in _PROFILE_FIELDS},
                    "created_at": s.created_at or now,
                    "last_sign_in": s.last_sign_in or "",
                }
                for s in students
            ]
        )
        return len(keys)
