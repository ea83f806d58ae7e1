from __future__ import annotations

from datetime import datetime

from ..roster.model import Person
from ..storage.repository import TabularStore
from ..storage.schema import TableSchema
from ..storage.table import ensure_table
from ..storage.tables import attendance_schema
from .model import AttendanceEntry
from .repository import AttendanceRepository


class TableAttendanceRepository(AttendanceRepository):
    """Group sign-ins land in the externally managed attendance table, which must exist."""

    def __init__(self, store: TabularStore, schema: TableSchema | None = None):
        self._store = store
        self._schema = schema or attendance_schema()

    @property
    def table_name(self) -> str:
        return self._schema.name

    def append(self, *, person: Person, group: str, timestamp: datetime) -> AttendanceEntry:
        # Raises MissingTableError when the table is absent: a configuration problem, not user input.
        table = ensure_table(self._store, self._schema)
        table.require("timestamp", "person_id")
        row_key = table.append(
            {
                "timestamp": timestamp,
                "first_name": person.first_name,
                "last_name": person.last_name,
                "contact": person.email,
                "school_year": person.grade,
                "school": person.school,
                "person_id": person.person_id,
                "group": group,
            }
        )
        return AttendanceEntry(
            row_key=row_key,
            timestamp=timestamp,
            person_id=person.person_id,
            first_name=person.first_name,
            last_name=person.last_name,
            school=person.school,
            grade=person.grade,
            group=group,
        )

    def discard(self, row_key: int) -> bool:
        table = ensure_table(self._store, self._schema)
        return table.delete([row_key]) > 0
